"""
Shared pytest fixtures for the registration API tests.

Sets required environment variables BEFORE any package module is imported
so the module-level config and JWT handler use safe test values.
"""

import os
from typing import AsyncGenerator, Dict

# ── Set env vars before any package import ────────────────────────────────────
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-pytest-0123456789abcdef"
os.environ["JWT_EXPIRES_IN"] = "1h"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)

# ── Third-party ───────────────────────────────────────────────────────────────
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# ── Package imports (safe after env vars are set) ─────────────────────────────
from tournament_registration.api.auth.jwt_handler import get_jwt_handler
from tournament_registration.api.main import app
from tournament_registration.db import Database, get_db_session
from tournament_registration.models import Tournament, TournamentType, User
from tournament_registration.seed import seed_tournaments, seed_users


# ── DB fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """A fresh in-memory SQLite database with the full schema."""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.initialize(max_retries=1)
    await database.create_tables()
    try:
        yield database
    finally:
        await database.close()


@pytest.fixture
async def session(database) -> AsyncGenerator[AsyncSession, None]:
    async with database.async_session() as session:
        yield session


@pytest.fixture
async def seeded(database) -> Dict[str, object]:
    """Seed the default delegates, admin and both 2024 tournaments."""
    async with database.get_session() as session:
        users = await seed_users(session)
        tournaments = await seed_tournaments(session)

    return {
        "users": {user.username: user for user in users},
        "campeonato": next(t for t in tournaments if t.type == TournamentType.CAMPEONATO_PANAMERICANO.value),
        "copa": next(t for t in tournaments if t.type == TournamentType.COPA_PANAMERICANA.value),
    }


@pytest.fixture
def campeonato(seeded) -> Tournament:
    return seeded["campeonato"]


@pytest.fixture
def copa(seeded) -> Tournament:
    return seeded["copa"]


# ── App fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, bound to the test database."""

    async def override_get_db_session():
        async with database.get_session() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# ── Token helpers ─────────────────────────────────────────────────────────────

def bearer(user: User) -> Dict[str, str]:
    token = get_jwt_handler().issue(user).token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(seeded):
    """Factory: ``auth_headers("usa_delegate")`` -> Authorization header."""

    def make(username: str) -> Dict[str, str]:
        return bearer(seeded["users"][username])

    return make


@pytest.fixture
def usa_headers(auth_headers):
    return auth_headers("usa_delegate")


@pytest.fixture
def mex_headers(auth_headers):
    return auth_headers("mex_delegate")


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin")


# ── Payload helpers ───────────────────────────────────────────────────────────

def gymnast(fig_id: str, birth: str = "1998-03-14", gender: str = "FEMALE", last_name: str = None) -> dict:
    return {
        "figId": fig_id,
        "firstName": "Ana",
        "lastName": last_name or f"Gym{fig_id}",
        "gender": gender,
        "dateOfBirth": birth,
    }


def choreography(type_: str = "WIND", count: int = 1, prefix: str = "G", birth: str = "1998-03-14", **extra) -> dict:
    payload = {
        "type": type_,
        "gymnasts": [gymnast(f"{prefix}{i}", birth=birth) for i in range(count)],
    }
    payload.update(extra)
    return payload


def coach(fig_id: str = "C100", **extra) -> dict:
    payload = {
        "figId": fig_id,
        "firstName": "Carlos",
        "lastName": "Ruiz",
        "gender": "MALE",
        "level": "L2",
        "levelDescription": "Level 2 coach",
    }
    payload.update(extra)
    return payload


def judge(fig_id: str = "J100", **extra) -> dict:
    payload = {
        "figId": fig_id,
        "firstName": "Laura",
        "lastName": "Gomez",
        "birth": "1980-05-02",
        "gender": "FEMALE",
        "category": "3",
        "categoryDescription": "Category 3 judge",
    }
    payload.update(extra)
    return payload


def support(**extra) -> dict:
    payload = {"firstName": "Maria", "lastName": "Lopez", "role": "MEDIC"}
    payload.update(extra)
    return payload
