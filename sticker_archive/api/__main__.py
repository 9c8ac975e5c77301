"""CLI entry point for the sticker archive HTTP service.

Usage:
    python -m sticker_archive.api                       # Serve on config host/port
    python -m sticker_archive.api --port 9000           # Override the port
    python -m sticker_archive.api --config prod.json    # Use a custom config file
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from sticker_archive.api.app import create_app
from sticker_archive.config.settings import load_config
from sticker_archive.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Sticker Archive HTTP Service")
    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument("--host", type=str, help="Bind address (default: from config)")
    parser.add_argument("--port", type=int, help="Bind port (default: from config)")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with third-party library logs",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional file to write logs to",
    )

    args = parser.parse_args()

    setup_logging(
        level=logging.DEBUG if (args.debug or args.verbose) else logging.INFO,
        log_file=args.log_file,
        debug_third_party=args.debug,
    )

    settings = load_config(args.config)
    host = args.host or settings.host
    port = args.port or settings.port

    logger.info(f"Serving sticker archive on http://{host}:{port}")
    # log_config=None keeps uvicorn on the rich handlers installed above
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
