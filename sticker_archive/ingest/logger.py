"""Rich-based logging utilities for the sticker ingest pipeline.

Per-sticker events go through Python logging; the directory import CLI
additionally prints structured blocks and a summary panel.
"""

from __future__ import annotations

from typing import Any

from sticker_archive.utils.pipeline_logger import BasePipelineLogger


class IngestLogger(BasePipelineLogger):
    """Logger for sticker ingestion with rich output."""

    def __init__(self) -> None:
        super().__init__(__name__)

    # -------------------------------------------------------------------------
    # Batch Processing
    # -------------------------------------------------------------------------

    def batch_start(self, series_id: str, count: int) -> None:
        """Log the start of a batch."""
        self._logger.info(f"Ingesting {count} stickers into series {series_id}")

    def sticker_stored(self, file_name: str, sticker_id: str, location: str) -> None:
        """Log that a sticker's bytes were written."""
        self._logger.debug(f"Stored {file_name} as {sticker_id} at {location}")

    def sticker_ingested(self, file_name: str, sticker_id: str, tags: list[str]) -> None:
        """Log that a sticker's metadata rows were committed."""
        tag_info = f" tags=[{', '.join(tags)}]" if tags else ""
        self._logger.info(f"Ingested {file_name} -> {sticker_id[:12]}{tag_info}")

    def record_failed(self, file_name: str, error: Exception) -> None:
        """Log the record that aborted a batch."""
        self._logger.error(f"Ingestion aborted at {file_name}: {error}")

    def batch_complete(self, series_id: str, count: int) -> None:
        """Log the end of a batch."""
        self._logger.info(f"Series {series_id}: {count} stickers ingested")

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validation_failed(self, errors: list[str]) -> None:
        """Log every validation defect of a rejected upload."""
        self._logger.warning(
            f"Upload rejected with {len(errors)} defect(s):\n" + "\n".join(errors)
        )

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(
        self,
        series_id: str = "",
        stickers: int = 0,
        tags: int = 0,
        elapsed: float = 0.0,
        **kwargs: Any,
    ) -> None:
        """Print final import summary."""
        self.print_summary(
            "Import",
            elapsed=elapsed,
            stats={
                "Series": series_id,
                "Stickers ingested": stickers,
                "Tag links": tags,
            },
            style="cyan",
        )


# Global logger instance
logger = IngestLogger()
