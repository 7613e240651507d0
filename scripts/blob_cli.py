#!/usr/bin/env python3
"""Put, get and delete blobs in the configured store.

Usage:
  .venv/bin/python scripts/blob_cli.py put reports/2024.csv --file 2024.csv
  cat 2024.csv | .venv/bin/python scripts/blob_cli.py put reports/2024.csv
  .venv/bin/python scripts/blob_cli.py get reports/2024.csv --output copy.csv
  .venv/bin/python scripts/blob_cli.py delete reports/2024.csv reports/2023.csv

Connection settings come from S3_* environment variables or a .env file.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from typing import BinaryIO, Sequence

from blobstore.common.config import get_settings
from blobstore.common.logging import setup_logging
from blobstore.infra.storage.client import NoSuchBlobError, UploadFailedError
from blobstore.services.blob_store import BlobStore

CHUNK_SIZE = 1024 * 1024

logger = logging.getLogger("blobstore.cli")


def put_blob(store: BlobStore, key: str, source: BinaryIO) -> int:
    """Stream ``source`` into ``key`` chunk by chunk; returns bytes written."""
    total = 0
    with store.create(key) as handle:
        try:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += handle.write(chunk)
        except BrokenPipeError:
            # The upload already stopped; commit raises its error.
            pass
        handle.commit()
    return total


def get_blob(store: BlobStore, key: str, target: BinaryIO) -> None:
    body = store.open(key)
    try:
        shutil.copyfileobj(body, target, CHUNK_SIZE)
    finally:
        body.close()


def main(argv: Sequence[str] | None = None, *, store: BlobStore | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage blobs in the object store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    put_parser = subparsers.add_parser("put", help="Upload a blob")
    put_parser.add_argument("key")
    put_parser.add_argument(
        "--file",
        default=None,
        help="Read the blob from this file (default: stdin)",
    )

    get_parser = subparsers.add_parser("get", help="Download a blob")
    get_parser.add_argument("key")
    get_parser.add_argument(
        "--output",
        default=None,
        help="Write the blob to this file (default: stdout)",
    )

    delete_parser = subparsers.add_parser("delete", help="Delete blobs")
    delete_parser.add_argument("keys", nargs="+")

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    if store is None:
        store = BlobStore.from_settings(settings, instance_name="cli")

    if args.command == "put":
        try:
            if args.file:
                with open(args.file, "rb") as source:
                    total = put_blob(store, args.key, source)
            else:
                total = put_blob(store, args.key, sys.stdin.buffer)
        except UploadFailedError as exc:
            logger.error("%s", exc)
            return 1
        logger.info("Stored %s bytes under %s", total, args.key)
        return 0

    if args.command == "get":
        try:
            if args.output:
                with open(args.output, "wb") as target:
                    get_blob(store, args.key, target)
            else:
                get_blob(store, args.key, sys.stdout.buffer)
        except NoSuchBlobError:
            logger.error("No such blob: %s", args.key)
            return 1
        return 0

    try:
        store.delete_many(args.keys)
    except Exception as exc:
        logger.error("Delete finished with errors, last: %s", exc)
        return 1
    logger.info("Deleted %s blobs", len(args.keys))
    return 0


if __name__ == "__main__":
    sys.exit(main())
