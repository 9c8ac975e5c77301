"""Fixed-window rate limiting for upload endpoints."""

from sticker_archive.ratelimit.limiter import (
    UNKNOWN_CLIENT,
    FixedWindowRateLimiter,
    RateLimitPolicy,
    RateLimitStatus,
    client_ip,
    rate_limit_key,
)
from sticker_archive.ratelimit.store import RateLimitEntry, RateLimitStore

__all__ = [
    "UNKNOWN_CLIENT",
    "FixedWindowRateLimiter",
    "RateLimitEntry",
    "RateLimitPolicy",
    "RateLimitStatus",
    "RateLimitStore",
    "client_ip",
    "rate_limit_key",
]
