#!/usr/bin/env python3
"""Ingest records produced by a format adapter into memory.

Input is a JSON array of ``{project, source, uri, title, content}`` records,
an object with a ``records`` list, or a ``.jsonl`` file with one record per
line. Re-running on the same file skips everything already stored.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from project_brain.api.dependencies import connect_services
from project_brain.core.config import settings
from project_brain.core.errors import ApplicationError
from project_brain.core.logging import get_logger, setup_logging
from project_brain.services.ingestion import load_records

setup_logging()
logger = get_logger(__name__)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest adapter records into Project Brain")
    parser.add_argument("records_file", type=Path, help="JSON or JSONL file with candidate records")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.ingest_concurrency,
        help="Number of records written at once",
    )
    parser.add_argument("--project", help="Override the project of every record")
    parser.add_argument("--dry-run", action="store_true", help="Parse the file but don't ingest")
    args = parser.parse_args()

    if not args.records_file.exists():
        logger.error(f"Records file not found: {args.records_file}")
        return 1

    try:
        records = load_records(args.records_file)
    except ApplicationError as e:
        logger.error(e.message)
        return 1

    if args.project:
        records = [r.model_copy(update={"project": args.project}) for r in records]

    logger.info(f"Loaded {len(records)} records from {args.records_file}")
    if args.dry_run:
        by_source: dict[str, int] = {}
        for record in records:
            by_source[record.source] = by_source.get(record.source, 0) + 1
        for source, count in sorted(by_source.items(), key=lambda x: x[1], reverse=True):
            logger.info(f"  {source}: {count}")
        return 0

    try:
        async with connect_services(settings) as container:
            stats = await container.pipeline.ingest(records, concurrency=args.concurrency)
    except ApplicationError as e:
        logger.error(f"Ingestion failed: {e.message}")
        return 1

    logger.info("=" * 50)
    logger.info("Ingestion complete!")
    logger.info(f"  Inserted: {stats.inserted}")
    logger.info(f"  Skipped: {stats.skipped}")
    logger.info(f"  Failed: {stats.failed}")
    logger.info(f"  Tokens: {stats.tokens}")
    return 0 if stats.failed == 0 else 2


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
