import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.dependencies import Credential, CountryScope, get_scope, require_role
from tournament_registration.api.registrations.models import RegistrationSummary
from tournament_registration.api.tournaments.models import (
    TournamentCreate,
    TournamentResponse,
    TournamentUpdate,
)
from tournament_registration.db import get_db_session
from tournament_registration.errors import BusinessRuleViolation, ConflictError
from tournament_registration.models import Tournament, TournamentType, UserRole
from tournament_registration.models.base import utcnow
from tournament_registration.registration.service import get_tournament, registration_summary

logger = logging.getLogger(__name__)

router = APIRouter()


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(Tournament.id).where(Tournament.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Tournament.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError(f"Tournament with name '{name}' already exists")


@router.get("", response_model=List[TournamentResponse])
async def list_tournaments(
    active: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db_session),
):
    """List tournaments, newest first"""
    stmt = select(Tournament).order_by(Tournament.start_date.desc())
    if active is not None:
        stmt = stmt.where(Tournament.is_active == active)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/type/{tournament_type}", response_model=List[TournamentResponse])
async def list_tournaments_by_type(
    tournament_type: TournamentType,
    db: AsyncSession = Depends(get_db_session),
):
    result = await db.execute(
        select(Tournament)
        .where(Tournament.type == tournament_type.value, Tournament.is_active.is_(True))
        .order_by(Tournament.start_date.desc())
    )
    return result.scalars().all()


@router.get("/{tournament_id}", response_model=TournamentResponse)
async def get_tournament_by_id(tournament_id: str, db: AsyncSession = Depends(get_db_session)):
    return await get_tournament(db, tournament_id)


@router.get("/{tournament_id}/stats", response_model=RegistrationSummary)
async def get_tournament_stats(
    tournament_id: str,
    scope: CountryScope = Depends(get_scope),
    db: AsyncSession = Depends(get_db_session),
):
    """Registration counts for the tournament within the caller's scope"""
    return await registration_summary(db, scope, tournament_id)


@router.post("", response_model=TournamentResponse, status_code=status.HTTP_201_CREATED)
async def create_tournament(
    tournament_data: TournamentCreate,
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db_session),
):
    await _ensure_unique_name(db, tournament_data.name)

    data = tournament_data.model_dump()
    data["type"] = tournament_data.type.value
    tournament = Tournament(**data)
    db.add(tournament)
    await db.flush()

    logger.info(f"Tournament {tournament.short_name} ({tournament.id}) created by {user.username}")
    return tournament


@router.patch("/{tournament_id}", response_model=TournamentResponse)
async def update_tournament(
    tournament_id: str,
    tournament_data: TournamentUpdate,
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db_session),
):
    tournament = await get_tournament(db, tournament_id)
    changes = tournament_data.model_dump(exclude_unset=True)

    if changes.get("name") and changes["name"] != tournament.name:
        await _ensure_unique_name(db, changes["name"], exclude_id=tournament.id)

    start = changes.get("start_date") or tournament.start_date
    end = changes.get("end_date") or tournament.end_date
    if end < start:
        raise BusinessRuleViolation("endDate must not be before startDate")

    for field, value in changes.items():
        if value is not None:
            setattr(tournament, field, value)
    tournament.updated_at = utcnow()
    await db.flush()

    logger.info(f"Tournament {tournament.id} updated by {user.username}: {sorted(changes)}")
    return tournament


@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tournament(
    tournament_id: str,
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db_session),
):
    tournament = await get_tournament(db, tournament_id)
    await db.delete(tournament)
    await db.flush()
    logger.info(f"Tournament {tournament_id} deleted by {user.username}")
