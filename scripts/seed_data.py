#!/usr/bin/env python3
"""
Seed delegation accounts and the 2024 tournaments.

Usage:
    alembic upgrade head
    python scripts/seed_data.py

Uses DATABASE_URL like the API. Running it twice is harmless.
"""

import asyncio
import logging

from tournament_registration.db import close_database, get_database
from tournament_registration.seed import seed_tournaments, seed_users

logger = logging.getLogger("seed_data")


async def run():
    database = await get_database()
    try:
        async with database.get_session() as session:
            users = await seed_users(session)
            tournaments = await seed_tournaments(session)
    finally:
        await close_database()

    print("=" * 60)
    print("Seed completed")
    print("=" * 60)
    for user in users:
        print(f"  user        {user.username:<16} {user.country:<6} {user.role}")
    for tournament in tournaments:
        print(f"  tournament  {tournament.short_name} ({tournament.type})")
    if not users and not tournaments:
        print("  nothing to do, data already present")
    return 0


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    return asyncio.run(run())


if __name__ == "__main__":
    exit(main())
