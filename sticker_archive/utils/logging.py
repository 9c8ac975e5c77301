"""Logging setup shared by the HTTP service and the import CLI.

Everything prints through one rich Console, so log records, structured
blocks and summary panels interleave cleanly on the terminal:

    from sticker_archive.utils.logging import setup_logging

    setup_logging(level=logging.DEBUG, log_file="import.log")

setup_logging() belongs in a CLI main(); modules only call
logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Shared by RichHandler and every pipeline logger; create no other Console
console = Console()

# Loggers held at WARNING unless debug_third_party is set
THIRD_PARTY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "urllib3")

FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _file_handler(log_file: str | Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
    debug_third_party: bool = False,
) -> None:
    """Route the root logger to the shared console (and optionally a file).

    Args:
        level: Root logger level
        log_file: Also append plain-text records to this file
        debug_third_party: Let SQLAlchemy, uvicorn access and urllib3 (minio)
            log below WARNING
    """
    handlers: list[logging.Handler] = [
        RichHandler(console=console, show_path=False, rich_tracebacks=True)
    ]
    if log_file:
        handlers.append(_file_handler(log_file))

    # force=True replaces handlers uvicorn or an earlier call installed
    logging.basicConfig(level=level, handlers=handlers, format="%(message)s", force=True)

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if debug_third_party else logging.WARNING)
