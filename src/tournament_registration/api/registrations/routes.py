"""
Registration endpoints, mounted under
``/api/v1/tournaments/{tournament_id}/registrations``.

One sub-router per entity kind is built by ``build_kind_router`` so each
kind keeps its own request/response schemas while sharing the same
scoping, batch-create and status handling.
"""

import logging
from typing import Any, Dict, List, Optional, Type, Union

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.dependencies import CountryScope, get_scope
from tournament_registration.api.schemas import ApiModel
from tournament_registration.api.registrations.models import (
    BatchCreateResponse,
    BulkStatusResponse,
    ChoreographyCreate,
    ChoreographyResponse,
    ChoreographyUpdate,
    CoachCreate,
    CoachResponse,
    CoachUpdate,
    JudgeCreate,
    JudgeResponse,
    JudgeUpdate,
    RegistrationSummary,
    StatusUpdate,
    SupportCreate,
    SupportResponse,
    SupportUpdate,
)
from tournament_registration.db import get_db_session
from tournament_registration.errors import RegistrationError
from tournament_registration.models.enums import RegistrationStatus, SupportRole
from tournament_registration.registration.service import (
    RegistrationService,
    bulk_transition,
    get_tournament,
    registration_summary,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CreateBody = Union[List[Dict[str, Any]], Dict[str, Any]]


def _body_errors(error: ValidationError) -> list:
    return [
        {**item, "loc": ("body",) + tuple(item["loc"])}
        for item in error.errors(include_url=False, include_context=False)
    ]


def build_kind_router(
    kind: str,
    create_schema: Type[ApiModel],
    update_schema: Type[ApiModel],
    response_schema: Type[ApiModel],
) -> APIRouter:
    kind_router = APIRouter()

    def serialize(entity) -> Dict[str, Any]:
        return response_schema.model_validate(entity).model_dump(by_alias=True, mode="json")

    @kind_router.get("", response_model=List[response_schema])
    async def list_registrations(
        tournament_id: str,
        scope: CountryScope = Depends(get_scope),
        status_filter: Optional[RegistrationStatus] = Query(None, alias="status"),
        role: Optional[SupportRole] = Query(None),
        db: AsyncSession = Depends(get_db_session),
    ):
        service = RegistrationService(db, scope, kind)
        return await service.list(tournament_id, status=status_filter, role=role)

    @kind_router.post("", response_model=BatchCreateResponse, status_code=status.HTTP_201_CREATED)
    async def create_registrations(
        tournament_id: str,
        scope: CountryScope = Depends(get_scope),
        body: CreateBody = Body(...),
        db: AsyncSession = Depends(get_db_session),
    ):
        """Create one registration, or many when the body is a list"""
        tournament = await get_tournament(db, tournament_id)
        service = RegistrationService(db, scope, kind)

        if isinstance(body, dict):
            try:
                payload = create_schema.model_validate(body)
            except ValidationError as e:
                raise RequestValidationError(_body_errors(e))
            entity = await service.create(tournament, payload.model_dump())
            return {"success": True, "results": [serialize(entity)], "errors": []}

        results = []
        errors = []
        for index, item in enumerate(body):
            try:
                payload = create_schema.model_validate(item)
                entity = await service.create(tournament, payload.model_dump())
            except ValidationError as e:
                errors.append({"index": index, "detail": _body_errors(e)})
                continue
            except RegistrationError as e:
                errors.append({"index": index, "detail": e.message})
                continue
            results.append(serialize(entity))

        if errors:
            logger.warning(
                f"Batch {kind} create by {scope.credential.username}: "
                f"{len(results)} created, {len(errors)} rejected"
            )
        return {"success": not errors, "results": results, "errors": errors}

    @kind_router.get("/{entity_id}", response_model=response_schema)
    async def get_registration(
        tournament_id: str,
        entity_id: str,
        scope: CountryScope = Depends(get_scope),
        db: AsyncSession = Depends(get_db_session),
    ):
        return await RegistrationService(db, scope, kind).get(tournament_id, entity_id)

    @kind_router.put("/{entity_id}", response_model=response_schema)
    async def update_registration(
        tournament_id: str,
        entity_id: str,
        payload: update_schema,
        scope: CountryScope = Depends(get_scope),
        db: AsyncSession = Depends(get_db_session),
    ):
        service = RegistrationService(db, scope, kind)
        entity = await service.get(tournament_id, entity_id)
        return await service.update(entity, payload.model_dump(exclude_unset=True))

    @kind_router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_registration(
        tournament_id: str,
        entity_id: str,
        scope: CountryScope = Depends(get_scope),
        db: AsyncSession = Depends(get_db_session),
    ):
        service = RegistrationService(db, scope, kind)
        entity = await service.get(tournament_id, entity_id)
        await service.delete(entity)

    @kind_router.patch("/{entity_id}/status", response_model=response_schema)
    async def update_registration_status(
        tournament_id: str,
        entity_id: str,
        payload: StatusUpdate,
        scope: CountryScope = Depends(get_scope),
        db: AsyncSession = Depends(get_db_session),
    ):
        """Move a registration along PENDING -> SUBMITTED -> REGISTERED"""
        service = RegistrationService(db, scope, kind)
        entity = await service.get(tournament_id, entity_id)
        return await service.change_status(entity, payload.status, notes=payload.notes)

    return kind_router


@router.post("/submit", response_model=BulkStatusResponse)
async def submit_registrations(
    tournament_id: str,
    scope: CountryScope = Depends(get_scope),
    db: AsyncSession = Depends(get_db_session),
):
    """Submit every pending registration of the caller's country"""
    updated = await bulk_transition(
        db, scope, tournament_id, RegistrationStatus.PENDING, RegistrationStatus.SUBMITTED
    )
    return BulkStatusResponse(status=RegistrationStatus.SUBMITTED, updated=updated, total=sum(updated.values()))


@router.post("/confirm", response_model=BulkStatusResponse)
async def confirm_registrations(
    tournament_id: str,
    scope: CountryScope = Depends(get_scope),
    db: AsyncSession = Depends(get_db_session),
):
    """Confirm every submitted registration (organisers only)"""
    updated = await bulk_transition(
        db, scope, tournament_id, RegistrationStatus.SUBMITTED, RegistrationStatus.REGISTERED
    )
    return BulkStatusResponse(status=RegistrationStatus.REGISTERED, updated=updated, total=sum(updated.values()))


@router.get("/summary", response_model=RegistrationSummary)
async def get_registration_summary(
    tournament_id: str,
    scope: CountryScope = Depends(get_scope),
    db: AsyncSession = Depends(get_db_session),
):
    return await registration_summary(db, scope, tournament_id)


KIND_SCHEMAS = {
    "choreographies": (ChoreographyCreate, ChoreographyUpdate, ChoreographyResponse),
    "coaches": (CoachCreate, CoachUpdate, CoachResponse),
    "judges": (JudgeCreate, JudgeUpdate, JudgeResponse),
    "support": (SupportCreate, SupportUpdate, SupportResponse),
}

for _kind, _schemas in KIND_SCHEMAS.items():
    router.include_router(build_kind_router(_kind, *_schemas), prefix=f"/{_kind}")
