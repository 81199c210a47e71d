"""Incubation tracker endpoints."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import ConfigDict, computed_field
from sqlalchemy.orm import Session

from ..auth import require_user
from ..core.config import settings
from ..core.db import get_session
from ..core.security import TokenClaims
from ..services import bird_nests as nest_service
from .common import CamelModel

router = APIRouter()


class BirdNestIn(CamelModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: Optional[str] = None
    hatch_date: Optional[str] = None
    notes: Optional[str] = None


class BirdNestOut(CamelModel):
    id: str
    name: str
    hatch_date: Optional[date] = None
    notes: str

    @computed_field(alias="expectedHatchDate")  # type: ignore[prop-decorator]
    @property
    def expected_hatch_date(self) -> Optional[date]:
        """Day the clutch is due to hatch, counted from ``hatch_date``."""

        if self.hatch_date is None:
            return None
        return self.hatch_date + timedelta(days=settings.INCUBATION_DAYS)


class BirdNestSyncRequest(CamelModel):
    nests: list[BirdNestIn]


class BirdNestListResponse(CamelModel):
    nests: list[BirdNestOut]


@router.get("", response_model=BirdNestListResponse, summary="Current user's nests")
def list_nests(
    claims: TokenClaims = Depends(require_user),
    session: Session = Depends(get_session),
) -> BirdNestListResponse:
    nests = nest_service.list_for_owner(session, claims.id)
    return BirdNestListResponse(nests=[BirdNestOut.model_validate(nest) for nest in nests])


@router.put("", response_model=BirdNestListResponse, summary="Replace the current user's nests")
def sync_nests(
    payload: BirdNestSyncRequest,
    claims: TokenClaims = Depends(require_user),
    session: Session = Depends(get_session),
) -> BirdNestListResponse:
    """Store the submitted list as the user's complete set of nests.

    The response is read back from the database after the commit.
    """

    records = [nest.model_dump() for nest in payload.nests]
    nests = nest_service.replace_all(session, claims.id, records)
    return BirdNestListResponse(nests=[BirdNestOut.model_validate(nest) for nest in nests])
