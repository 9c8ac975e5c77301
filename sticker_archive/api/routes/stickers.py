"""Sticker upload, lookup and file retrieval endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, Form, Header, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.api.dependencies import (
    get_app_settings,
    get_rate_limiter,
    get_session,
    get_storage,
    rate_limited,
)
from sticker_archive.api.schemas import RateLimitStatusOut, StickerOut
from sticker_archive.config.settings import AppSettings
from sticker_archive.db.repositories import find_stickers
from sticker_archive.errors import NotFoundError, UploadValidationError
from sticker_archive.ingest.logger import logger as ingest_logger
from sticker_archive.ingest.manifest import check_series_id
from sticker_archive.ingest.pipeline import ingest_batch
from sticker_archive.ingest.validation import UploadedFile, validate_upload
from sticker_archive.ratelimit import (
    FixedWindowRateLimiter,
    RateLimitPolicy,
    client_ip,
    rate_limit_key,
)
from sticker_archive.storage import StorageBackend

router = APIRouter(prefix="/stickers", tags=["stickers"])

# Content-addressed bytes never change under the same id
CACHE_CONTROL = "public, max-age=31536000, immutable"
PNG_MEDIA_TYPE = "image/png"


def etag_matches(if_none_match: str | None, sticker_id: str) -> bool:
    """Whether an If-None-Match header names this sticker's ETag.

    Accepts quoted, unquoted and weak (W/) tags and comma-separated lists.
    The wildcard * is left to the caller since it only matches a stored file.
    """
    if not if_none_match:
        return False
    for candidate in if_none_match.split(","):
        tag = candidate.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        if tag.strip('"') == sticker_id:
            return True
    return False


@router.post("/upload", status_code=201, dependencies=[Depends(rate_limited("upload"))])
async def upload_stickers(
    record: UploadFile | None = File(None),
    files: list[UploadFile] | None = File(None),
    series_id: str | None = Form(None),
    settings: AppSettings = Depends(get_app_settings),
    session: AsyncSession = Depends(get_session),
    storage: StorageBackend = Depends(get_storage),
) -> dict:
    """Upload a sticker pack: a JSON manifest plus its PNG files."""
    manifest = await record.read() if record is not None else None
    uploads = [
        UploadedFile(
            name=upload.filename or "",
            content_type=upload.content_type,
            data=await upload.read(),
        )
        for upload in files or []
    ]

    errors = check_series_id(series_id)
    records = []
    try:
        records = validate_upload(manifest, uploads, settings.upload)
    except UploadValidationError as e:
        errors.extend(e.errors)
    if errors:
        ingest_logger.validation_failed([error.describe() for error in errors])
        raise UploadValidationError(errors)

    target_series = series_id or str(uuid.uuid4())
    result = await ingest_batch(session, storage, records, uploads, target_series)
    return {
        "success": True,
        "series_id": target_series,
        "count": result.stickers_ingested,
    }


@router.get("")
async def get_stickers(
    series_id: str | None = Query(None, alias="seriesId"),
    sticker_id: str | None = Query(None, alias="stickerId"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Look up stickers by series and/or id.

    Returns a single object when stickerId matches exactly one row,
    otherwise an array.
    """
    stickers = await find_stickers(session, series_id=series_id, sticker_id=sticker_id)
    data = [StickerOut.model_validate(s).model_dump() for s in stickers]
    if sticker_id and len(data) == 1:
        return {"success": True, "data": data[0]}
    return {"success": True, "data": data}


# Registered before /{series_id}/{sticker_id} so it is not shadowed by it
@router.get("/rate-limit/status")
async def get_rate_limit_status(
    request: Request,
    endpoint: str = Query("upload"),
    settings: AppSettings = Depends(get_app_settings),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> dict:
    """Report the caller's remaining budget for a rate-limited endpoint."""
    policy = settings.rate_limits.get(endpoint)
    if policy is None:
        raise NotFoundError(f"No rate limit policy named {endpoint!r}")

    key = rate_limit_key(client_ip(request.headers), policy.path)
    status = limiter.status(key, RateLimitPolicy.from_settings(policy))
    data = RateLimitStatusOut(
        endpoint=endpoint,
        limit=status.limit,
        remaining=status.remaining,
        reset_time=status.reset_time_iso(),
    )
    return {"success": True, "data": data.model_dump()}


@router.get("/{series_id}/{sticker_id}")
async def get_sticker_file(
    series_id: str,
    sticker_id: str,
    if_none_match: str | None = Header(None),
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    """Serve a sticker's PNG bytes with immutable caching headers.

    The ETag is the sticker id itself, so a matching If-None-Match is
    answered with 304 without touching storage. If-None-Match: * gets 304
    only once the file is known to exist.
    """
    headers = {"ETag": f'"{sticker_id}"', "Cache-Control": CACHE_CONTROL}
    if etag_matches(if_none_match, sticker_id):
        return Response(status_code=304, headers=headers)

    data = await storage.retrieve(series_id, sticker_id)
    if if_none_match is not None and if_none_match.strip() == "*":
        return Response(status_code=304, headers=headers)
    return Response(content=data, media_type=PNG_MEDIA_TYPE, headers=headers)
