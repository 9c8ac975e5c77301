"""Series lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.api.dependencies import get_session
from sticker_archive.api.schemas import SeriesOut
from sticker_archive.db.repositories import get_series, list_series
from sticker_archive.errors import NotFoundError

router = APIRouter(prefix="/series", tags=["series"])


@router.get("")
async def get_all_series(session: AsyncSession = Depends(get_session)) -> dict:
    """List every series."""
    series = await list_series(session)
    return {
        "success": True,
        "data": [SeriesOut.model_validate(s).model_dump() for s in series],
    }


@router.get("/{series_id}")
async def get_series_by_id(
    series_id: str, session: AsyncSession = Depends(get_session)
) -> dict:
    """Look up one series."""
    series = await get_series(session, series_id)
    if series is None:
        raise NotFoundError(f"Series {series_id} not found")
    return {"success": True, "data": SeriesOut.model_validate(series).model_dump()}
