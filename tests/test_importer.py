"""
Tests — administrative import of confirmed registrations.
"""

import pytest
from sqlalchemy import select

from conftest import choreography, coach
from tournament_registration.errors import NotFoundError
from tournament_registration.models import Choreography, Coach, Gymnast, RegistrationStatus, UserRole
from tournament_registration.registration.importer import import_credential, import_registrations


def test_import_credential():
    credential = import_credential("mex")
    assert credential.country == "MEX"
    assert credential.role == UserRole.ADMIN.value
    assert credential.is_admin


async def test_import_coaches(seeded, session):
    campeonato = seeded["campeonato"]
    rows = [
        coach("C1", country="USA"),
        {"firstName": "missing fields"},
        coach("C2", level=None),
        coach("C1"),
    ]

    report = await import_registrations(session, campeonato.id, "coaches", "mex", rows)
    await session.commit()

    assert report.imported == 2
    assert [error["index"] for error in report.errors] == [1, 3]
    assert isinstance(report.errors[0]["detail"], list)
    assert "already registered" in report.errors[1]["detail"]

    coaches = (await session.execute(select(Coach).order_by(Coach.fig_id))).scalars().all()
    assert [c.fig_id for c in coaches] == ["C1", "C2"]
    assert {c.country for c in coaches} == {"MEX"}
    assert {c.status for c in coaches} == {RegistrationStatus.REGISTERED.value}
    assert coaches[1].level is None


async def test_import_choreography(seeded, session):
    copa = seeded["copa"]
    rows = [choreography("MXP", count=2, prefix="IMP")]

    report = await import_registrations(session, copa.id, "choreographies", "BRA", rows)
    await session.commit()

    assert report.imported == 1
    imported = (await session.execute(select(Choreography))).scalar_one()
    assert imported.status == RegistrationStatus.REGISTERED.value
    assert imported.country == "BRA"
    assert imported.gymnast_count == 2

    gymnasts = (await session.execute(select(Gymnast))).scalars().all()
    assert {g.country for g in gymnasts} == {"BRA"}


async def test_import_unknown_kind(seeded, session):
    with pytest.raises(ValueError):
        await import_registrations(session, seeded["copa"].id, "athletes", "USA", [])


async def test_import_unknown_tournament(seeded, session):
    with pytest.raises(NotFoundError):
        await import_registrations(session, "missing", "coaches", "USA", [coach()])
