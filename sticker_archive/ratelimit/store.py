"""In-memory state for the fixed-window rate limiter."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RateLimitEntry:
    """Request count for one (client, endpoint) key in the current window."""

    count: int
    reset_at: float


class RateLimitStore:
    """Process-local mapping of rate limit key to window state.

    One instance per application; tests get isolation by building a fresh one.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def sweep(self, now: float) -> int:
        """Drop every entry whose window has ended. Returns how many."""
        expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
