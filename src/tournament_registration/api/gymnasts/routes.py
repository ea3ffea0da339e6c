import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.dependencies import CountryScope, Credential, get_scope, require_role
from tournament_registration.api.providers import get_fig_client
from tournament_registration.api.registrations.models import GymnastResponse
from tournament_registration.api.schemas import ApiModel
from tournament_registration.db import get_db_session
from tournament_registration.errors import NotFoundError
from tournament_registration.fig.client import FigApiClient
from tournament_registration.models import Gymnast, UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


class FigAthlete(ApiModel):
    fig_id: str
    first_name: str
    last_name: str
    gender: str
    country: str
    birth_date: Optional[str] = None
    discipline: str
    license_valid_to: Optional[str] = None
    is_licensed: bool


@router.get("", response_model=List[GymnastResponse])
async def list_gymnasts(
    scope: CountryScope = Depends(get_scope),
    db: AsyncSession = Depends(get_db_session),
):
    """Gymnasts already known locally, within the caller's country"""
    stmt = scope.apply(select(Gymnast), Gymnast)
    result = await db.execute(stmt.order_by(Gymnast.country, Gymnast.last_name, Gymnast.first_name))
    return result.scalars().all()


@router.get("/fig", response_model=List[FigAthlete])
async def search_fig_athletes(
    scope: CountryScope = Depends(get_scope),
    client: FigApiClient = Depends(get_fig_client),
):
    """Licensed FIG athletes of the caller's country (all countries for admins)"""
    athletes = await client.search_athletes(scope.country)
    logger.debug(f"FIG search for {scope.country or 'all countries'} returned {len(athletes)} athletes")
    return athletes


@router.get("/fig/{fig_id}", response_model=FigAthlete)
async def get_fig_athlete(
    fig_id: str,
    scope: CountryScope = Depends(get_scope),
    client: FigApiClient = Depends(get_fig_client),
):
    athlete = await client.get_athlete(fig_id, scope.country)
    if athlete is None:
        raise NotFoundError(f"No licensed FIG athlete with id {fig_id}")
    return athlete


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_fig_cache(
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    client: FigApiClient = Depends(get_fig_client),
):
    """Forget cached FIG searches so the next request hits the FIG API"""
    removed = await client.clear_cache()
    logger.info(f"{user.username} cleared the FIG athlete cache ({removed} entries)")
