"""Application factory for the sticker archive HTTP service."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sticker_archive.api.routes import series_router, stickers_router
from sticker_archive.config.settings import AppSettings, get_settings
from sticker_archive.db.engine import (
    dispose_engines,
    get_async_session,
    get_engine,
    init_db,
)
from sticker_archive.errors import (
    ClientInputError,
    DuplicateStickerError,
    NotFoundError,
    RateLimitedError,
    SchemaError,
    StickerArchiveError,
    UploadValidationError,
)
from sticker_archive.ratelimit import FixedWindowRateLimiter, RateLimitStore
from sticker_archive.storage import create_storage

logger = logging.getLogger(__name__)

# Location prefixes FastAPI puts in front of the parameter name
REQUEST_SECTIONS = frozenset({"body", "query", "path", "header", "cookie"})


def status_for(exc: StickerArchiveError) -> int:
    """HTTP status code for an error family."""
    if isinstance(exc, ClientInputError):
        return 400
    if isinstance(exc, RateLimitedError):
        return 429
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, DuplicateStickerError):
        return 409
    return 500


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


async def archive_error_handler(request: Request, exc: StickerArchiveError) -> JSONResponse:
    """Render a StickerArchiveError with the status of its family."""
    status_code = status_for(exc)
    headers = None

    if isinstance(exc, RateLimitedError):
        retry_after = max(0, math.ceil(exc.reset_at - time.time()))
        headers = {"Retry-After": str(retry_after)}
        logger.warning(f"Rate limited {request.method} {request.url.path}")
    elif status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
    else:
        logger.info(f"{status_code} on {request.method} {request.url.path}: {type(exc).__name__}")

    return error_response(status_code, str(exc), headers)


def request_errors(exc: RequestValidationError) -> list[ClientInputError]:
    """Field-scoped SchemaErrors for parameters FastAPI could not bind."""
    errors: list[ClientInputError] = []
    for error in exc.errors():
        parts = [str(part) for part in error.get("loc", ()) if part not in REQUEST_SECTIONS]
        message = str(error.get("msg", "invalid value"))
        # A plain form value where an UploadFile part was expected
        if "UploadFile" in message:
            message = "expected a file upload"
        errors.append(SchemaError(".".join(parts) or "request", message))
    return errors


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer unbindable form, query or header values with a 400."""
    return await archive_error_handler(request, UploadValidationError(request_errors(exc)))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, return a generic 500."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: "
        f"{type(exc).__name__}: {exc}",
        exc_info=exc,
    )
    return error_response(500, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database engine and storage backend; close them on shutdown."""
    settings: AppSettings = app.state.settings

    engine = get_engine(settings.database_url)
    if settings.create_tables:
        await init_db(engine)
    app.state.session_factory = get_async_session(settings.database_url)
    app.state.storage = create_storage(settings.storage)
    logger.info(
        f"Sticker archive ready (storage={settings.storage.backend}, "
        f"database={engine.url.render_as_string(hide_password=True)})"
    )

    try:
        yield
    finally:
        await app.state.storage.close()
        await dispose_engines()
        logger.info("Sticker archive shut down")


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings. If None, loads config.json.

    Returns:
        Configured FastAPI application. The database and storage are only
        attached once the lifespan runs.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Sticker Archive",
        description="Upload, index and serve content-addressed sticker packs.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limiter = FixedWindowRateLimiter(RateLimitStore())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Retry-After"],
    )

    app.add_exception_handler(StickerArchiveError, archive_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(stickers_router)
    app.include_router(series_router)

    @app.get("/")
    async def root() -> dict:
        return {
            "success": True,
            "message": "Welcome to the sticker archive",
            "storage": settings.storage.backend,
        }

    return app
