"""
Initial data: delegation accounts and the 2024 tournaments.

Seeding is idempotent; existing usernames and tournament names are left
untouched.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.jwt_handler import JWTHandler
from tournament_registration.models import Tournament, TournamentType, User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    {"username": "usa_delegate", "password": "USA2024!", "country": "USA", "role": UserRole.DELEGATE},
    {"username": "can_delegate", "password": "CAN2024!", "country": "CAN", "role": UserRole.DELEGATE},
    {"username": "mex_delegate", "password": "MEX2024!", "country": "MEX", "role": UserRole.DELEGATE},
    {"username": "bra_delegate", "password": "BRA2024!", "country": "BRA", "role": UserRole.DELEGATE},
    {"username": "arg_delegate", "password": "ARG2024!", "country": "ARG", "role": UserRole.DELEGATE},
    {"username": "admin", "password": "Admin2024!", "country": "ADMIN", "role": UserRole.ADMIN},
]

DEFAULT_TOURNAMENTS = [
    {
        "name": "Campeonato Panamericano de Gimnasia Aeróbica 2024",
        "short_name": "Campeonato Panamericano 2024",
        "type": TournamentType.CAMPEONATO_PANAMERICANO,
        "description": "Pan-American aerobic gymnastics championship",
        "start_date": date(2024, 7, 15),
        "end_date": date(2024, 7, 21),
        "location": "Lima, Peru",
    },
    {
        "name": "Copa Panamericana de Gimnasia Aeróbica 2024",
        "short_name": "Copa Panamericana 2024",
        "type": TournamentType.COPA_PANAMERICANA,
        "description": "Pan-American aerobic gymnastics cup, open to invited federations",
        "start_date": date(2024, 9, 10),
        "end_date": date(2024, 9, 16),
        "location": "Mexico City, Mexico",
    },
]


async def seed_users(
    session: AsyncSession,
    users: Optional[List[Dict]] = None,
    jwt_handler: Optional[JWTHandler] = None,
) -> List[User]:
    """Create missing user accounts. Returns the users that were created."""
    jwt_handler = jwt_handler or JWTHandler()
    created = []

    for entry in users or DEFAULT_USERS:
        username = entry["username"].lower()
        existing = await session.execute(select(User.id).where(User.username == username))
        if existing.first() is not None:
            logger.debug(f"User {username} already exists, skipping")
            continue

        user = User(
            username=username,
            password_hash=jwt_handler.hash_password(entry["password"]),
            country=entry["country"].upper(),
            role=UserRole(entry["role"]).value,
        )
        session.add(user)
        created.append(user)

    await session.flush()
    logger.info(f"Seeded {len(created)} users")
    return created


async def seed_tournaments(session: AsyncSession, tournaments: Optional[List[Dict]] = None) -> List[Tournament]:
    created = []

    for entry in tournaments or DEFAULT_TOURNAMENTS:
        existing = await session.execute(select(Tournament.id).where(Tournament.name == entry["name"]))
        if existing.first() is not None:
            continue

        data = dict(entry)
        data["type"] = TournamentType(data["type"]).value
        tournament = Tournament(**data)
        session.add(tournament)
        created.append(tournament)

    await session.flush()
    logger.info(f"Seeded {len(created)} tournaments")
    return created
