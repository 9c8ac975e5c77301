"""Console output helpers for batch pipelines.

A pipeline logger pairs plain logging records with rich console output:
indented key/value blocks while work is in progress, and a bordered summary
panel when the run ends. Concrete loggers add their own event methods and a
summary().
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generator

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sticker_archive.utils.logging import console

if TYPE_CHECKING:
    from typing import Self


class StructuredBlock:
    """Indented key/value lines under a bold title.

    Usage:
        with logger.block("./cats") as block:
            block.field("series ID", "3f1c...")
            block.field("storage", "minio", color="magenta")
            block.result("ingested 16 stickers")

    Output:
        ./cats
            series ID: 3f1c...
            storage: minio
            ✓ ingested 16 stickers
    """

    def __init__(self, title: str, parent: "BasePipelineLogger") -> None:
        self.title = title
        self.console = parent.console

    def __enter__(self) -> "Self":
        self.console.print(f"\n[bold]{self.title}[/bold]")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None

    def field(self, key: str, value: Any, color: str | None = None) -> None:
        shown = f"[{color}]{value}[/{color}]" if color else value
        self.console.print(f"    [dim]{key}:[/dim] {shown}")

    def result(self, message: str, success: bool = True) -> None:
        icon = "[green]✓[/green]" if success else "[red]✗[/red]"
        self.console.print(f"    {icon} {message}")


class BasePipelineLogger(ABC):
    """Common base for pipeline loggers.

    info/warning/error/debug go through Python logging (and so through
    RichHandler and any log file); block(), success() and print_summary()
    write straight to the shared console.
    """

    def __init__(self, logger_name: str | None = None) -> None:
        """
        Args:
            logger_name: Python logger name. Defaults to the subclass's module.
        """
        self.console: Console = console
        self._logger = logging.getLogger(logger_name or self.__class__.__module__)

    @contextmanager
    def block(self, title: str) -> Generator[StructuredBlock, None, None]:
        with StructuredBlock(title, self) as block:
            yield block

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_summary(
        self,
        pipeline_name: str,
        *,
        elapsed: float,
        stats: dict[str, int | str],
        style: str = "cyan",
    ) -> None:
        """Print a "<pipeline_name> Complete" panel.

        Args:
            pipeline_name: Shown in the panel title
            elapsed: Seconds, appended as the last row
            stats: Rows as {label: value}; integers get thousands separators
            style: Border color
        """
        table = Table.grid(padding=(0, 2))
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="green")

        for label, value in stats.items():
            table.add_row(label, f"{value:,}" if isinstance(value, int) else str(value))
        table.add_row("Time elapsed", f"{elapsed:.1f}s")

        self.console.print()
        self.console.print(
            Panel(
                table,
                title=f"[bold]{pipeline_name} Complete[/bold]",
                border_style=style,
                padding=(1, 2),
            )
        )

    @abstractmethod
    def summary(self, **kwargs: Any) -> None:
        """Print the pipeline's final summary."""
        ...
