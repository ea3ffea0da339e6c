import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from tournament_registration.config import config
from tournament_registration.errors import AuthenticationError, TokenIssueError

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([A-Za-z]*)\s*$")
_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def parse_expiration(value: str) -> timedelta:
    """
    Parse ``<integer><unit>`` into a timedelta.

    Unit is one of s, m, h, d. A missing or unknown unit means days.
    """
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid token expiration: {value!r}")
    amount, unit = int(match.group(1)), match.group(2).lower()
    return timedelta(**{_UNITS.get(unit, "days"): amount})


@dataclass(frozen=True)
class IssuedToken:
    token: str
    token_id: str
    expires_in: int  # seconds


class JWTHandler:
    def __init__(self, secret_key: Optional[str] = None, expires_in: Optional[str] = None):
        self.secret_key = secret_key or config.jwt_secret_key
        if not self.secret_key:
            raise ValueError(
                "JWT_SECRET_KEY must be set. Tokens cannot be signed without a secret."
            )
        self.algorithm = config.jwt_algorithm
        self.expires_delta = parse_expiration(expires_in or config.jwt_expires_in)
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=config.bcrypt_rounds,
        )

    @property
    def expires_in(self) -> int:
        return int(self.expires_delta.total_seconds())

    def issue(self, user) -> IssuedToken:
        """Mint a signed token carrying the user's identity, country and role."""
        token_id = str(uuid.uuid4())
        issued_at = int(datetime.now(timezone.utc).timestamp())
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "country": user.country,
            "role": user.role,
            "jti": token_id,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        try:
            token = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        except (JWTError, TypeError, ValueError) as e:
            logger.error(f"Failed to sign token for user {user.username}: {e}")
            raise TokenIssueError()
        return IssuedToken(token=token, token_id=token_id, expires_in=self.expires_in)

    def verify(self, token: str) -> Dict:
        """Validate signature and expiry; every failure looks the same to the caller."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except (JWTError, AttributeError) as e:
            logger.debug(f"Token rejected: {e}")
            raise AuthenticationError("Invalid or expired token")

    def decode(self, token: str) -> Optional[Dict]:
        """Read claims without verifying them. None for malformed input."""
        try:
            return jwt.get_unverified_claims(token)
        except (JWTError, AttributeError):
            return None

    def expiration(self, token: str) -> Optional[datetime]:
        claims = self.decode(token)
        if not claims or "exp" not in claims:
            return None
        return datetime.fromtimestamp(claims["exp"], tz=timezone.utc)

    def is_expired(self, token: str) -> bool:
        expires_at = self.expiration(token)
        return expires_at is None or expires_at <= datetime.now(timezone.utc)

    def token_id(self, token: str) -> Optional[str]:
        claims = self.decode(token)
        return claims.get("jti") if claims else None

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False


_handler: Optional[JWTHandler] = None


def get_jwt_handler() -> JWTHandler:
    global _handler
    if _handler is None:
        _handler = JWTHandler()
    return _handler
