"""Fixed-window request rate limiter.

Each (client_ip, endpoint) key gets up to max_requests per window. The
window starts at the first request and is not aligned to the clock; once
it ends, the next request opens a fresh window with count 1. Expired
entries are swept lazily on every call.

Client identity comes from X-Forwarded-For (first entry) or X-Real-IP and
so trusts the reverse proxy. Without a trusted proxy these headers can be
spoofed; this is abuse mitigation, not access control.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from sticker_archive.config.settings import RateLimitSettings
from sticker_archive.errors import RateLimitedError
from sticker_archive.ratelimit.store import RateLimitEntry, RateLimitStore

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Window length and request budget for one endpoint."""

    window_seconds: float
    max_requests: int
    message: str | None = None

    @classmethod
    def from_settings(cls, settings: RateLimitSettings) -> "RateLimitPolicy":
        return cls(
            window_seconds=settings.window_seconds,
            max_requests=settings.max_requests,
            message=settings.message,
        )


@dataclass(frozen=True)
class RateLimitStatus:
    """Snapshot of a key's budget."""

    limit: int
    remaining: int
    reset_at: float | None

    def reset_time_iso(self) -> str | None:
        if self.reset_at is None:
            return None
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat()


def client_ip(headers: Mapping[str, str]) -> str:
    """Best-effort client address from proxy headers.

    Args:
        headers: Request headers (case-insensitive mapping expected)

    Returns:
        First X-Forwarded-For entry, else X-Real-IP, else "unknown"
    """
    forwarded_for = headers.get("x-forwarded-for", "")
    if forwarded_for.strip():
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    return UNKNOWN_CLIENT


def rate_limit_key(ip: str, endpoint: str) -> str:
    return f"{ip}:{endpoint}"


class FixedWindowRateLimiter:
    """Counts requests per key against a RateLimitPolicy."""

    def __init__(
        self,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store if store is not None else RateLimitStore()
        self.clock = clock

    def hit(self, key: str, policy: RateLimitPolicy) -> RateLimitEntry:
        """Record one request for key.

        Returns:
            The updated entry

        Raises:
            RateLimitedError: If the key already used its budget this window
        """
        now = self.clock()
        self.store.sweep(now)

        entry = self.store.get(key)
        if entry is None or now > entry.reset_at:
            entry = RateLimitEntry(count=1, reset_at=now + policy.window_seconds)
            self.store.set(key, entry)
            return entry

        if entry.count < policy.max_requests:
            entry.count += 1
            return entry

        raise RateLimitedError(entry.reset_at, policy.message)

    def status(self, key: str, policy: RateLimitPolicy) -> RateLimitStatus:
        """Report the remaining budget for key without counting a request."""
        now = self.clock()
        self.store.sweep(now)

        entry = self.store.get(key)
        if entry is None or now > entry.reset_at:
            return RateLimitStatus(
                limit=policy.max_requests,
                remaining=policy.max_requests,
                reset_at=None,
            )
        return RateLimitStatus(
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - entry.count),
            reset_at=entry.reset_at,
        )
