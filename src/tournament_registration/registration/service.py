"""
Registration service.

CRUD and status operations for the four registrable entity kinds, always
executed inside a CountryScope: reads are filtered to the scope's
country, writes are stamped with the caller's country, and single-row
access to another country's data is refused.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.dependencies import CountryScope
from tournament_registration.errors import BusinessRuleViolation, ConflictError, NotFoundError
from tournament_registration.models import (
    Choreography,
    ChoreographyCategory,
    ChoreographyType,
    Gymnast,
    REGISTRABLE_MODELS,
    RegistrationStatus,
    SupportRole,
    SupportStaff,
    Tournament,
)
from tournament_registration.models.base import utcnow
from tournament_registration.registration import rules, workflow

logger = logging.getLogger(__name__)

KIND_LABELS = {
    "choreographies": "Choreography",
    "coaches": "Coach",
    "judges": "Judge",
    "support": "Support staff",
}

IMMUTABLE_FIELDS = {"id", "country", "status", "tournament_id", "fig_id", "created_at", "updated_at"}


async def get_tournament(session: AsyncSession, tournament_id: str) -> Tournament:
    tournament = await session.get(Tournament, tournament_id)
    if tournament is None:
        raise NotFoundError(f"Tournament not found: {tournament_id}")
    return tournament


def model_for(kind: str):
    try:
        return REGISTRABLE_MODELS[kind]
    except KeyError:
        raise NotFoundError(f"Unknown registration type: {kind}")


class RegistrationService:
    """
    Registration operations for one entity kind in one tournament.

    Args:
        session: Async SQLAlchemy session
        scope: Country scope of the acting user
        kind: One of "choreographies", "coaches", "judges", "support"
    """

    def __init__(self, session: AsyncSession, scope: CountryScope, kind: str):
        self.session = session
        self.scope = scope
        self.kind = kind
        self.model = model_for(kind)

    @property
    def label(self) -> str:
        return KIND_LABELS[self.kind]

    # Reads

    async def list(
        self,
        tournament_id: str,
        status: Optional[RegistrationStatus] = None,
        role: Optional[SupportRole] = None,
    ) -> List[Any]:
        await get_tournament(self.session, tournament_id)

        stmt = select(self.model).where(self.model.tournament_id == tournament_id)
        stmt = self.scope.apply(stmt, self.model)
        if status is not None:
            stmt = stmt.where(self.model.status == RegistrationStatus(status).value)
        if role is not None and self.model is SupportStaff:
            stmt = stmt.where(SupportStaff.role == SupportRole(role).value)

        result = await self.session.execute(
            stmt.order_by(self.model.country, self.model.created_at)
        )
        return list(result.scalars().all())

    async def get(self, tournament_id: str, entity_id: str):
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == entity_id,
                self.model.tournament_id == tournament_id,
            )
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            raise NotFoundError(f"{self.label} not found: {entity_id}")

        self.scope.ensure_access(entity.country, self.label)
        return entity

    # Writes

    async def create(self, tournament: Tournament, payload: Dict[str, Any]):
        """Create a PENDING row from a validated payload dict."""
        data = self.scope.stamp(dict(payload))
        data["tournament_id"] = tournament.id
        data["status"] = workflow.initial_status().value

        if self.model is Choreography:
            entity = await self._build_choreography(tournament, data)
        else:
            entity = await self._build_person(tournament, data)

        self.session.add(entity)
        await self.session.flush()
        logger.info(
            f"{self.label} {entity.id} created for {entity.country} in tournament {tournament.id} "
            f"by {self.scope.credential.username}"
        )
        return entity

    async def update(self, entity, payload: Dict[str, Any]):
        """Apply a partial update. Country and status never change here."""
        for field, value in payload.items():
            if field in IMMUTABLE_FIELDS:
                continue
            if hasattr(value, "value"):
                value = value.value
            setattr(entity, field, value)

        if self.model is not Choreography and ("first_name" in payload or "last_name" in payload):
            if "full_name" not in payload:
                entity.full_name = f"{entity.first_name} {entity.last_name}"

        entity.updated_at = utcnow()
        await self.session.flush()
        return entity

    async def delete(self, entity) -> None:
        await self.session.delete(entity)
        await self.session.flush()
        logger.info(f"{self.label} {entity.id} deleted by {self.scope.credential.username}")

    async def change_status(self, entity, status: RegistrationStatus, notes: Optional[str] = None):
        if workflow.apply_transition(entity, status, self.scope.credential.role, notes=notes):
            entity.updated_at = utcnow()
            await self.session.flush()
        return entity

    # Builders

    async def _build_person(self, tournament: Tournament, data: Dict[str, Any]):
        for field in ("gender", "role"):
            if hasattr(data.get(field), "value"):
                data[field] = data[field].value

        fig_id = data.get("fig_id")
        if fig_id:
            await self._ensure_unique_fig_id(tournament.id, fig_id)

        if not data.get("full_name"):
            data["full_name"] = f"{data['first_name']} {data['last_name']}"

        return self.model(**data)

    async def _ensure_unique_fig_id(self, tournament_id: str, fig_id: str) -> None:
        result = await self.session.execute(
            select(self.model.id).where(
                self.model.tournament_id == tournament_id,
                self.model.fig_id == fig_id,
            )
        )
        if result.first() is not None:
            raise ConflictError(
                f"{self.label} with FIG ID {fig_id} is already registered for this tournament"
            )

    async def _build_choreography(self, tournament: Tournament, data: Dict[str, Any]) -> Choreography:
        gymnasts = data.pop("gymnasts")
        choreography_type = ChoreographyType(data["type"])
        declared_count = data.pop("gymnast_count", None)

        fig_ids = [g["fig_id"] for g in gymnasts]
        if len(set(fig_ids)) != len(fig_ids):
            raise BusinessRuleViolation("A gymnast cannot appear twice in the same choreography")
        if declared_count is not None and declared_count != len(gymnasts):
            raise BusinessRuleViolation(
                f"gymnastCount ({declared_count}) does not match the number of gymnasts ({len(gymnasts)})"
            )
        rules.validate_gymnast_count(choreography_type, len(gymnasts))

        year = tournament.competition_year
        oldest = rules.oldest_age([g["date_of_birth"] for g in gymnasts], year)
        category = ChoreographyCategory(data.get("category") or rules.calculate_category(oldest))

        tournament_rules = rules.get_rules(tournament.type)
        existing = await self._count_quota(tournament.id, data["country"], tournament_rules, category, choreography_type)
        tournament_rules.validate_choreography(
            data["country"], category, choreography_type, fig_ids, existing
        )

        members = await self.upsert_gymnasts(gymnasts, data["country"], year)

        data["category"] = category.value
        data["type"] = choreography_type.value
        data["gymnast_count"] = len(members)
        data["oldest_gymnast_age"] = oldest
        if not data.get("name"):
            data["name"] = "-".join(g.last_name.upper() for g in members)

        choreography = Choreography(**data)
        choreography.gymnasts = members
        return choreography

    async def _count_quota(self, tournament_id, country, tournament_rules, category, choreography_type) -> int:
        stmt = select(func.count()).select_from(Choreography).where(
            Choreography.tournament_id == tournament_id,
            Choreography.country == country,
        )
        for column, value in tournament_rules.quota_filters(category, choreography_type).items():
            stmt = stmt.where(getattr(Choreography, column) == value)
        return (await self.session.execute(stmt)).scalar_one()

    async def upsert_gymnasts(self, gymnasts: Sequence[Dict[str, Any]], country: str, year: int) -> List[Gymnast]:
        """Insert or refresh gymnast master rows for the acting country."""
        fig_ids = [g["fig_id"] for g in gymnasts]
        result = await self.session.execute(select(Gymnast).where(Gymnast.fig_id.in_(fig_ids)))
        existing = {g.fig_id: g for g in result.scalars().all()}

        foreign = [g.fig_id for g in existing.values() if g.country != country]
        if foreign:
            raise BusinessRuleViolation(
                f"Gymnast(s) {', '.join(sorted(foreign))} are registered for another country"
            )

        members = []
        for data in gymnasts:
            data = dict(data)
            if hasattr(data.get("gender"), "value"):
                data["gender"] = data["gender"].value
            age = rules.competition_age(data["date_of_birth"], year)
            data["age"] = age
            data["category"] = rules.calculate_category(age).value
            data["country"] = country
            if not data.get("full_name"):
                data["full_name"] = f"{data['first_name']} {data['last_name']}"

            gymnast = existing.get(data["fig_id"])
            if gymnast is None:
                gymnast = Gymnast(**data)
                self.session.add(gymnast)
            else:
                for field, value in data.items():
                    setattr(gymnast, field, value)
                gymnast.updated_at = utcnow()
            members.append(gymnast)

        return members


# Tournament-wide operations


async def bulk_transition(
    session: AsyncSession,
    scope: CountryScope,
    tournament_id: str,
    source: RegistrationStatus,
    target: RegistrationStatus,
) -> Dict[str, int]:
    """
    Move every row of the scope in ``source`` status to ``target``.

    Returns:
        Number of rows updated per entity kind
    """
    await get_tournament(session, tournament_id)
    workflow.validate_transition(source, target, scope.credential.role)

    updated = {}
    for kind, model in REGISTRABLE_MODELS.items():
        stmt = (
            update(model)
            .where(model.tournament_id == tournament_id, model.status == source.value)
            .values(status=target.value, updated_at=utcnow())
        )
        stmt = scope.apply(stmt, model)
        result = await session.execute(stmt.execution_options(synchronize_session=False))
        updated[kind] = result.rowcount or 0

    logger.info(
        f"{scope.credential.username} moved {sum(updated.values())} registrations "
        f"{source.value} -> {target.value} in tournament {tournament_id} "
        f"(country={scope.country or 'ALL'})"
    )
    return updated


async def registration_summary(session: AsyncSession, scope: CountryScope, tournament_id: str) -> Dict[str, Any]:
    """Counts per entity kind and status within the scope."""
    await get_tournament(session, tournament_id)

    by_kind = {}
    totals = {status.value: 0 for status in RegistrationStatus}
    for kind, model in REGISTRABLE_MODELS.items():
        stmt = (
            select(model.status, func.count())
            .where(model.tournament_id == tournament_id)
            .group_by(model.status)
        )
        stmt = scope.apply(stmt, model)
        counts = {status.value: 0 for status in RegistrationStatus}
        for status, count in (await session.execute(stmt)).all():
            counts[status] = count
            totals[status] = totals.get(status, 0) + count
        counts["total"] = sum(counts.values())
        by_kind[kind] = counts

    totals["total"] = sum(totals.values())
    return {
        "tournament_id": tournament_id,
        "country": scope.country,
        "by_kind": by_kind,
        "totals": totals,
    }
