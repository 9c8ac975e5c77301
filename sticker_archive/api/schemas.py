"""Response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StickerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sticker_id: str
    path: str
    series_id: str


class SeriesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str


class RateLimitStatusOut(BaseModel):
    endpoint: str
    limit: int
    remaining: int
    reset_time: str | None
