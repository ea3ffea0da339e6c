"""
Administrative import of already confirmed registrations.

Legacy delegations registered on paper are loaded with this importer.
Rows go through the same validation and country stamping as API writes
but are created directly in REGISTERED status. This path is only
reachable from ``scripts/import_registrations.py``, never over HTTP.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.dependencies import CountryScope, Credential
from tournament_registration.api.registrations.models import (
    ChoreographyCreate,
    CoachCreate,
    JudgeCreate,
    SupportCreate,
)
from tournament_registration.errors import RegistrationError
from tournament_registration.models.enums import UserRole
from tournament_registration.registration import workflow
from tournament_registration.registration.service import RegistrationService, get_tournament

logger = logging.getLogger(__name__)

CREATE_SCHEMAS = {
    "choreographies": ChoreographyCreate,
    "coaches": CoachCreate,
    "judges": JudgeCreate,
    "support": SupportCreate,
}


@dataclass
class ImportReport:
    imported: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)


def import_credential(country: str) -> Credential:
    return Credential(
        user_id="import",
        username="registration-import",
        country=country.upper(),
        role=UserRole.ADMIN.value,
    )


async def import_registrations(
    session: AsyncSession,
    tournament_id: str,
    kind: str,
    country: str,
    rows: List[Dict[str, Any]],
) -> ImportReport:
    """
    Import ``rows`` of one entity kind for ``country`` as REGISTERED.

    Invalid rows are reported and skipped; valid rows are flushed to the
    session. The caller owns the transaction.
    """
    if kind not in CREATE_SCHEMAS:
        raise ValueError(f"Unknown registration type: {kind}")

    tournament = await get_tournament(session, tournament_id)
    scope = CountryScope(import_credential(country))
    service = RegistrationService(session, scope, kind)
    schema = CREATE_SCHEMAS[kind]
    report = ImportReport()

    for index, row in enumerate(rows):
        try:
            payload = schema.model_validate(row).model_dump()
            entity = await service.create(tournament, payload)
        except ValidationError as e:
            report.errors.append({"index": index, "detail": e.errors(include_url=False, include_context=False)})
            continue
        except RegistrationError as e:
            report.errors.append({"index": index, "detail": e.message})
            continue

        entity.status = workflow.initial_status(imported=True).value
        report.imported += 1

    await session.flush()
    logger.info(
        f"Imported {report.imported}/{len(rows)} {kind} for {country.upper()} "
        f"into tournament {tournament_id} ({len(report.errors)} rejected)"
    )
    return report
