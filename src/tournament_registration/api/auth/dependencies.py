"""
Authentication and country scoping dependencies.

Every data endpoint depends on ``get_current_user`` (token verification)
and usually on ``get_scope``, which confines queries and writes to the
caller's country. ADMIN is the only role allowed to see other countries.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tournament_registration.api.auth.jwt_handler import JWTHandler, get_jwt_handler
from tournament_registration.errors import AuthenticationError, ForbiddenError
from tournament_registration.models.enums import UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Credential:
    """Verified token claims of the acting user."""
    user_id: str
    username: str
    country: str
    role: str
    token_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Credential":
        try:
            return cls(
                user_id=str(claims["sub"]),
                username=claims["username"],
                country=claims["country"],
                role=claims["role"],
                token_id=claims.get("jti"),
            )
        except KeyError:
            raise AuthenticationError("Invalid or expired token")

    def to_claims(self) -> Dict[str, Any]:
        return {
            "sub": self.user_id,
            "username": self.username,
            "country": self.country,
            "role": self.role,
            "jti": self.token_id,
        }


def can_access(credential: Credential, resource_country: Optional[str], required_role: Optional[UserRole] = None) -> bool:
    """Single authorization predicate for role and country checks."""
    if required_role is not None and not credential.is_admin:
        if credential.role != UserRole(required_role).value:
            return False
    if credential.is_admin:
        return True
    return resource_country is not None and resource_country.upper() == credential.country.upper()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
) -> Credential:
    """Dependency to get the authenticated user from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication token required")

    claims = jwt_handler.verify(credentials.credentials)
    return Credential.from_claims(claims)


def require_role(role: UserRole):
    """Dependency factory rejecting users without ``role`` (ADMIN passes every check)."""

    async def checker(user: Credential = Depends(get_current_user)) -> Credential:
        if not can_access(user, user.country, required_role=role):
            logger.warning(f"User {user.username} ({user.role}) denied: requires {role.value}")
            raise ForbiddenError("Insufficient permissions")
        return user

    return checker


class CountryScope:
    """
    Country constraint derived from the acting credential.

    Non-admin users are always filtered to their own country; a different
    ``?country=`` is refused rather than ignored. Admins may narrow the
    scope to one country or see all of them.
    """

    def __init__(self, credential: Credential, requested_country: Optional[str] = None):
        self.credential = credential
        requested = requested_country.strip().upper() if requested_country else None

        if credential.is_admin:
            self.country = requested
        else:
            if requested and requested != credential.country.upper():
                logger.warning(
                    f"User {credential.username} ({credential.country}) requested country {requested}"
                )
                raise ForbiddenError(
                    f"Access denied. You can only access data for your country ({credential.country})"
                )
            self.country = credential.country

    @property
    def is_global(self) -> bool:
        return self.country is None

    def apply(self, stmt, model):
        """Add the country filter to a select/update statement."""
        if self.country is None:
            return stmt
        return stmt.where(model.country == self.country)

    def stamp(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Overwrite any client supplied country with the credential's country."""
        supplied = payload.get("country")
        if supplied and supplied != self.credential.country:
            logger.info(
                f"Overriding client country {supplied} with {self.credential.country} "
                f"for {self.credential.username}"
            )
        payload["country"] = self.credential.country
        return payload

    def ensure_access(self, resource_country: str, resource: str = "Resource") -> None:
        if not can_access(self.credential, resource_country):
            logger.warning(
                f"User {self.credential.username} ({self.credential.country}) denied access to "
                f"{resource} of {resource_country}"
            )
            raise ForbiddenError(
                f"Access denied. You can only access data for your country ({self.credential.country})"
            )


async def get_scope(
    country: Optional[str] = Query(None, min_length=2, max_length=10),
    user: Credential = Depends(get_current_user),
) -> CountryScope:
    return CountryScope(user, country)
