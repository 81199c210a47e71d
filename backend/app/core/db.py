"""Database utilities for SQLAlchemy."""
from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import Engine, create_engine, event, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..models import Base, User
from .config import settings
from .errors import StorageError
from .metrics import record_rollback
from .security import hash_password

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _create_engine() -> Engine:
    """Create the SQLAlchemy engine using application settings."""

    connect_args = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(
        settings.DATABASE_URL, pool_pre_ping=True, future=True, connect_args=connect_args
    )
    enable_sqlite_foreign_keys(engine)
    return engine


ENGINE: Engine = _create_engine()
SessionLocal = sessionmaker[
    Session
](bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None, session_factory: sessionmaker | None = None) -> None:
    """Create missing tables and make sure an administrator account exists."""

    engine = engine or ENGINE
    session_factory = session_factory or SessionLocal

    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(engine)

    if not settings.SEED_ADMIN_ENABLED:
        return

    with session_factory() as session:
        admin_id = session.execute(
            select(User.id).where(User.role == "admin").limit(1)
        ).scalar_one_or_none()
        if admin_id is not None:
            return
        admin = User(
            name=settings.SEED_ADMIN_NAME,
            email=settings.SEED_ADMIN_EMAIL.strip().lower(),
            password_hash=hash_password(settings.SEED_ADMIN_PASSWORD),
            role="admin",
        )
        session.add(admin)
        session.commit()
        logger.info("Seeded default administrator %s", admin.email)


def commit_or_raise(session: Session, operation: str) -> None:
    """Commit the session, rolling back and raising ``StorageError`` on failure."""

    try:
        session.commit()
    except SQLAlchemyError as exc:
        logger.exception("Storage failure during %s", operation)
        rollback_quietly(session, operation)
        raise StorageError() from exc


def rollback_quietly(session: Session, operation: str) -> None:
    """Roll back after a failed operation; a failing rollback is only logged."""

    record_rollback(operation)
    try:
        session.rollback()
    except SQLAlchemyError:
        logger.exception("Rollback failed during %s", operation)
