"""Seed the development database with the default administrator and sample categories."""
from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select  # noqa: E402

from backend.app.core.config import settings  # noqa: E402
from backend.app.core.db import SessionLocal, init_db  # noqa: E402
from backend.app.models import PostCategory  # noqa: E402
from backend.app.services import categories  # noqa: E402

SAMPLE_CATEGORIES = {
    "News": ["Farm updates", "Market prices"],
    "Guides": ["Incubation", "Nest care"],
}


def _ensure_category(session, name: str, parent_id: str | None = None) -> PostCategory:
    stmt = select(PostCategory).where(PostCategory.name == name, PostCategory.parent_id == parent_id)
    category = session.execute(stmt).scalar_one_or_none()
    if category is None:
        category = categories.create_category(session, name, parent_id)
    return category


def main() -> None:
    """Entry point for seeding data."""

    init_db()
    with SessionLocal() as session:
        for root_name, child_names in SAMPLE_CATEGORIES.items():
            root = _ensure_category(session, root_name)
            for child_name in child_names:
                _ensure_category(session, child_name, root.id)

        print("Seeded development data:")
        print(f"  Administrator: {settings.SEED_ADMIN_EMAIL}")
        print(f"  Categories: {len(categories.build_tree(session).flat)}")


if __name__ == "__main__":
    main()
