#!/usr/bin/env python3
"""
Import already confirmed registrations from a JSON file.

Usage:
    python scripts/import_registrations.py TOURNAMENT_ID KIND COUNTRY FILE

KIND is one of choreographies, coaches, judges, support. FILE holds a
JSON list of objects shaped like the API create bodies. Rows are stored
as REGISTERED; invalid rows are reported and skipped.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from tournament_registration.db import close_database, get_database
from tournament_registration.registration.importer import CREATE_SCHEMAS, import_registrations

logger = logging.getLogger("import_registrations")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import REGISTERED rows for one country")
    parser.add_argument("tournament_id")
    parser.add_argument("kind", choices=sorted(CREATE_SCHEMAS))
    parser.add_argument("country", help="Three letter federation code, e.g. MEX")
    parser.add_argument("file", type=Path)
    parser.add_argument("--dry-run", action="store_true", help="Validate without committing")
    return parser.parse_args(argv)


async def run(args) -> int:
    rows = json.loads(args.file.read_text(encoding="utf-8"))
    if not isinstance(rows, list):
        print("❌ Error: the file must contain a JSON list")
        return 1

    database = await get_database()
    try:
        async with database.async_session() as session:
            report = await import_registrations(session, args.tournament_id, args.kind, args.country, rows)
            if args.dry_run:
                await session.rollback()
            else:
                await session.commit()
    finally:
        await close_database()

    print(f"Imported {report.imported}/{len(rows)} {args.kind}" + (" (dry run)" if args.dry_run else ""))
    for error in report.errors:
        print(f"  row {error['index']}: {error['detail']}")
    return 0 if not report.errors else 2


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    exit(main())
