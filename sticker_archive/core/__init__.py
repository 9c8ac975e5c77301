"""Command-line orchestration shared by batch jobs.

An orchestrator owns the engine and session factory for one run, prepares
the schema when configured to, times the job and prints its summary:

    class PackImport(BaseOrchestrator):
        async def _run_pipeline(self) -> None: ...
        def _log_summary(self, elapsed: float) -> None: ...

    await PackImport(settings).run()
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sticker_archive.db.engine import get_async_session, get_engine, init_db

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from sticker_archive.config.settings import AppSettings


class BaseOrchestrator(ABC):
    """Runs one pipeline against the configured database."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self.engine: AsyncEngine = get_engine(settings.database_url)
        self.async_session: async_sessionmaker[AsyncSession] = get_async_session(
            settings.database_url
        )

    async def run(self) -> float:
        """Run the pipeline, print its summary and return the elapsed seconds."""
        started = time.monotonic()

        if self.settings.create_tables:
            await init_db(self.engine)
        await self._run_pipeline()

        elapsed = time.monotonic() - started
        self._log_summary(elapsed)
        return elapsed

    @abstractmethod
    async def _run_pipeline(self) -> None:
        """Do the work."""
        ...

    @abstractmethod
    def _log_summary(self, elapsed: float) -> None:
        """Report final statistics for a run that took elapsed seconds."""
        ...
