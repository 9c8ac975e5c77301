"""FastAPI dependencies.

Everything request handlers need is read from app.state, which the
application factory and lifespan populate. Tests replace these through
app.dependency_overrides.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.config.settings import AppSettings
from sticker_archive.ratelimit import (
    FixedWindowRateLimiter,
    RateLimitPolicy,
    client_ip,
    rate_limit_key,
)
from sticker_archive.storage import StorageBackend


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """One database session per request."""
    async with request.app.state.session_factory() as session:
        yield session


def rate_limited(policy_name: str):
    """Build a dependency that counts the request against a named policy.

    Endpoints without a configured policy are not limited.

    Raises:
        RateLimitedError: From the limiter when the budget is used up
    """

    async def enforce(
        request: Request,
        settings: AppSettings = Depends(get_app_settings),
        limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    ) -> None:
        policy = settings.rate_limits.get(policy_name)
        if policy is None:
            return
        key = rate_limit_key(client_ip(request.headers), request.url.path)
        limiter.hit(key, RateLimitPolicy.from_settings(policy))

    return enforce
