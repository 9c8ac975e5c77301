"""Sticker Archive Ingest Pipeline.

This package validates sticker uploads (manifest + PNG files) and persists
them: image bytes to the storage backend, metadata to the database.

Usage:
    python -m sticker_archive.ingest DIR                  # Import a directory
    python -m sticker_archive.ingest DIR --series-id X    # Into a given series
"""
