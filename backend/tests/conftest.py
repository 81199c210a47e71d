from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.core import db as db_module
from backend.app.core.rate_limiter import limiter
from backend.app.core.security import hash_password, issue_token
from backend.app.main import create_app
from backend.app.models import Base, User

DEFAULT_PASSWORD = "s3cret-pass"


@pytest.fixture()
def engine() -> Iterator:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db_module.enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, class_=Session)


@pytest.fixture()
def session(session_factory: sessionmaker) -> Iterator[Session]:
    with session_factory() as session:
        yield session


def _session_ctx(factory: sessionmaker):
    def _get_session() -> Iterator[Session]:
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _get_session


@pytest.fixture()
def app(monkeypatch: pytest.MonkeyPatch, session_factory: sessionmaker) -> TestClient:
    monkeypatch.setattr(db_module, "SessionLocal", session_factory)
    limiter.reset()

    app = create_app()
    app.dependency_overrides[db_module.get_session] = _session_ctx(session_factory)
    return TestClient(app)


@pytest.fixture()
def make_user(session_factory: sessionmaker) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(role: str = "user", email: str | None = None, password: str = DEFAULT_PASSWORD) -> User:
        counter["n"] += 1
        with session_factory() as session:
            user = User(
                name=f"{role.title()} {counter['n']}",
                email=email or f"{role}{counter['n']}@example.com",
                password_hash=hash_password(password),
                role=role,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _make_user


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    return bearer


@pytest.fixture()
def admin_user(make_user) -> User:
    return make_user(role="admin")


@pytest.fixture()
def regular_user(make_user) -> User:
    return make_user(role="user")


@pytest.fixture()
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture()
def user_headers(regular_user: User) -> dict[str, str]:
    return bearer(regular_user)


@pytest.fixture()
def default_password() -> str:
    return DEFAULT_PASSWORD
