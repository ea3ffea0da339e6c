from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from tournament_registration.api.schemas import ApiModel
from tournament_registration.models.enums import UserRole


class UserLogin(ApiModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(ApiModel):
    id: str
    username: str
    country: str
    role: UserRole
    last_login_at: Optional[datetime] = None


class Token(ApiModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class LoginResponse(Token):
    user: UserResponse


class TokenValidationRequest(ApiModel):
    token: str


class TokenValidationResponse(ApiModel):
    is_valid: bool
    user: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class VerifyResponse(ApiModel):
    valid: bool = True
    user: Dict[str, Any]
