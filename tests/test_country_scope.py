"""
Unit tests — country scoping guard (api/auth/dependencies.py).

Delegates are confined to their own country on reads and writes;
organisers see every country unless they narrow the scope.
"""

import pytest
from sqlalchemy import select

from tournament_registration.api.auth.dependencies import CountryScope, Credential, can_access
from tournament_registration.errors import AuthenticationError, ForbiddenError
from tournament_registration.models import Coach, UserRole

USA = Credential(user_id="1", username="usa_delegate", country="USA", role="DELEGATE")
MEX = Credential(user_id="2", username="mex_delegate", country="MEX", role="DELEGATE")
ADMIN = Credential(user_id="3", username="admin", country="ADMIN", role="ADMIN")


# ─────────────────────────── Credential ──────────────────────────────────────

def test_credential_from_claims():
    credential = Credential.from_claims(
        {"sub": 7, "username": "bra_delegate", "country": "BRA", "role": "DELEGATE", "jti": "abc"}
    )
    assert credential.user_id == "7"
    assert credential.token_id == "abc"
    assert not credential.is_admin


def test_credential_from_incomplete_claims():
    with pytest.raises(AuthenticationError):
        Credential.from_claims({"sub": "1", "username": "x"})


# ─────────────────────────── can_access ──────────────────────────────────────

@pytest.mark.parametrize("credential,country,required,expected", [
    (USA, "USA", None, True),
    (USA, "usa", None, True),
    (USA, "MEX", None, False),
    (USA, None, None, False),
    (ADMIN, "MEX", None, True),
    (USA, "USA", UserRole.ADMIN, False),
    (ADMIN, "USA", UserRole.ADMIN, True),
    (USA, "USA", UserRole.DELEGATE, True),
])
def test_can_access(credential, country, required, expected):
    assert can_access(credential, country, required_role=required) is expected


# ─────────────────────────── Read filter ─────────────────────────────────────

def test_delegate_scope_is_own_country():
    scope = CountryScope(USA)
    assert scope.country == "USA"
    assert not scope.is_global


def test_delegate_may_name_own_country_in_any_case():
    assert CountryScope(USA, "usa").country == "USA"


def test_delegate_requesting_other_country_is_refused():
    with pytest.raises(ForbiddenError) as exc_info:
        CountryScope(USA, "MEX")
    assert exc_info.value.status_code == 403
    assert "(USA)" in exc_info.value.message


def test_admin_scope_is_global_by_default():
    scope = CountryScope(ADMIN)
    assert scope.country is None
    assert scope.is_global


def test_admin_can_narrow_scope():
    assert CountryScope(ADMIN, " mex ").country == "MEX"


def test_apply_adds_country_filter():
    stmt = CountryScope(USA).apply(select(Coach), Coach)
    compiled = stmt.compile(compile_kwargs={"literal_binds": True})
    assert "coaches.country = 'USA'" in str(compiled)


def test_apply_leaves_global_scope_untouched():
    stmt = select(Coach)
    assert CountryScope(ADMIN).apply(stmt, Coach) is stmt


# ─────────────────────────── Write stamping ──────────────────────────────────

@pytest.mark.parametrize("payload", [
    {"country": "MEX", "firstName": "x"},
    {"country": None},
    {},
])
def test_stamp_always_overwrites_country(payload):
    stamped = CountryScope(USA).stamp(dict(payload))
    assert stamped["country"] == "USA"


def test_admin_writes_are_stamped_with_admin_country():
    # A narrowed admin scope filters reads only
    assert CountryScope(ADMIN, "MEX").stamp({"country": "MEX"})["country"] == "ADMIN"


# ─────────────────────────── Single-row access ───────────────────────────────

def test_ensure_access():
    CountryScope(USA).ensure_access("USA")
    CountryScope(ADMIN).ensure_access("MEX")
    with pytest.raises(ForbiddenError):
        CountryScope(MEX).ensure_access("USA", "Coach")
