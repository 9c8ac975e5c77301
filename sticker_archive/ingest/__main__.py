"""CLI entry point for sticker_archive.ingest.

Usage:
    python -m sticker_archive.ingest ./pack                   # Import a pack directory
    python -m sticker_archive.ingest ./pack --series-id abc   # Into series "abc"
    python -m sticker_archive.ingest ./pack --verbose         # Show more details
    python -m sticker_archive.ingest ./pack --debug           # Show debug info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from sticker_archive.errors import UploadValidationError
from sticker_archive.ingest.logger import logger
from sticker_archive.ingest.run import DEFAULT_MANIFEST_NAME, run_import
from sticker_archive.utils.logging import setup_logging


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Sticker Archive Directory Import",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sticker_archive.ingest ./cats
      Import ./cats/record.json and every PNG in ./cats into a new series

  python -m sticker_archive.ingest ./cats --series-id 1234567
      Import into the series with id 1234567 (created if absent)

  python -m sticker_archive.ingest ./cats --config /path/to/config.json
      Use a custom config file
        """,
    )

    parser.add_argument("directory", help="Pack directory (manifest + PNG files)")
    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument(
        "--series-id",
        type=str,
        help="Series to import into (default: a new UUID)",
    )
    parser.add_argument(
        "--manifest",
        type=str,
        default=DEFAULT_MANIFEST_NAME,
        help=f"Manifest file name inside the directory (default: {DEFAULT_MANIFEST_NAME})",
    )
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

    logger.info(f"Importing sticker pack from {args.directory}")

    try:
        asyncio.run(
            run_import(
                args.directory,
                config_path=args.config,
                series_id=args.series_id,
                manifest_name=args.manifest,
            )
        )
        logger.success("Import complete!")
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)
    except UploadValidationError:
        sys.exit(2)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    main()
