"""Full-replacement sync of a user's incubation tracker."""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core import errors
from ..core.db import rollback_quietly
from ..models import BirdNest, generate_id

logger = logging.getLogger(__name__)


def list_for_owner(session: Session, owner_id: str) -> list[BirdNest]:
    """Return the owner's nests in the order they were last submitted."""

    stmt = (
        select(BirdNest)
        .where(BirdNest.owner_id == owner_id)
        .order_by(BirdNest.position, BirdNest.id)
        .execution_options(populate_existing=True)
    )
    return list(session.execute(stmt).scalars().all())


def replace_all(session: Session, owner_id: str, records: Sequence[Mapping[str, Any]]) -> list[BirdNest]:
    """Make the owner's stored nests match ``records`` exactly.

    Existing rows are deleted before the submitted rows are inserted, inside
    one transaction. Any storage failure rolls the whole transaction back so
    the previous set survives untouched. The returned list is re-read from
    storage after the commit.
    """

    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        raise errors.ValidationError("Nests must be submitted as a list")
    rows = [_to_row(owner_id, position, record) for position, record in enumerate(records)]

    try:
        session.execute(delete(BirdNest).where(BirdNest.owner_id == owner_id))
        if rows:
            session.execute(insert(BirdNest), rows)
        session.commit()
    except SQLAlchemyError as exc:
        logger.exception("Bird nest sync failed for user %s", owner_id)
        rollback_quietly(session, "replace_bird_nests")
        raise errors.StorageError("Could not save bird nest data") from exc

    logger.info("Replaced bird nests for user %s count=%d", owner_id, len(rows))
    return list_for_owner(session, owner_id)


def _to_row(owner_id: str, position: int, record: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(record, Mapping):
        raise errors.ValidationError("Each nest must be an object")
    return {
        "id": record.get("id") or generate_id(),
        "owner_id": owner_id,
        "name": record.get("name") or "",
        "hatch_date": _coerce_date(record.get("hatch_date")),
        "notes": record.get("notes") or "",
        "position": position,
    }


def _coerce_date(value: Any) -> date | None:
    """Accept dates, datetimes and ISO strings such as ``2024-03-01T10:00:00Z``."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        if "T" in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise errors.ValidationError("Invalid hatch date") from None
