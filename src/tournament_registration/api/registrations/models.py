from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from tournament_registration.api.schemas import ApiModel, PartialUpdate
from tournament_registration.models.enums import (
    ChoreographyCategory,
    ChoreographyType,
    Gender,
    RegistrationStatus,
    SupportRole,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class GymnastInput(ApiModel):
    fig_id: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    gender: Gender
    date_of_birth: date
    discipline: str = Field(default="AER", max_length=10)
    license_valid: bool = True
    license_expiry_date: Optional[date] = None
    is_local: bool = False
    image_url: Optional[str] = Field(None, max_length=500)


class GymnastResponse(ApiModel):
    id: str
    fig_id: str
    first_name: str
    last_name: str
    full_name: str
    gender: str
    country: str
    date_of_birth: date
    discipline: str
    license_valid: bool
    age: int
    category: ChoreographyCategory
    is_local: bool
    image_url: Optional[str] = None


# Shared registration fields. ``country`` is accepted so clients can send
# it, but it is always replaced with the caller's own country.


class RegistrationCreate(ApiModel):
    country: Optional[str] = Field(None, max_length=10)
    club: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class RegistrationUpdate(PartialUpdate):
    club: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class RegistrationResponse(ApiModel):
    id: str
    tournament_id: str
    country: str
    status: RegistrationStatus
    club: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ChoreographyCreate(RegistrationCreate):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[ChoreographyCategory] = None
    type: ChoreographyType
    gymnast_count: Optional[int] = Field(None, ge=1, le=8)
    gymnasts: List[GymnastInput] = Field(..., min_length=1, max_length=8)


class ChoreographyUpdate(RegistrationUpdate):
    not_nullable = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)


class ChoreographyResponse(RegistrationResponse):
    name: str
    category: ChoreographyCategory
    type: ChoreographyType
    gymnast_count: int
    oldest_gymnast_age: int
    gymnasts: List[GymnastResponse] = []


class CoachCreate(RegistrationCreate):
    fig_id: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    gender: Gender
    level: Optional[str] = Field(None, max_length=50)
    level_description: Optional[str] = Field(None, max_length=255)
    is_local: bool = False
    image_url: Optional[str] = Field(None, max_length=500)


class CoachUpdate(RegistrationUpdate):
    not_nullable = ("first_name", "last_name", "full_name", "gender", "is_local")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    gender: Optional[Gender] = None
    level: Optional[str] = Field(None, max_length=50)
    level_description: Optional[str] = Field(None, max_length=255)
    is_local: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=500)


class CoachResponse(RegistrationResponse):
    fig_id: str
    first_name: str
    last_name: str
    full_name: str
    gender: str
    level: Optional[str] = None
    level_description: Optional[str] = None
    is_local: bool
    image_url: Optional[str] = None


class JudgeCreate(RegistrationCreate):
    fig_id: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    birth: str = Field(..., min_length=4, max_length=20)
    gender: Gender
    category: str = Field(..., min_length=1, max_length=20)
    category_description: str = Field(..., min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, max_length=500)


class JudgeUpdate(RegistrationUpdate):
    not_nullable = ("first_name", "last_name", "full_name", "birth", "gender", "category", "category_description")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    birth: Optional[str] = Field(None, min_length=4, max_length=20)
    gender: Optional[Gender] = None
    category: Optional[str] = Field(None, min_length=1, max_length=20)
    category_description: Optional[str] = Field(None, min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, max_length=500)


class JudgeResponse(RegistrationResponse):
    fig_id: str
    first_name: str
    last_name: str
    full_name: str
    birth: str
    gender: str
    category: str
    category_description: str
    image_url: Optional[str] = None


class SupportCreate(RegistrationCreate):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    role: SupportRole = SupportRole.COMPANION
    gender: Optional[Gender] = None
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    image_url: Optional[str] = Field(None, max_length=500)


class SupportUpdate(RegistrationUpdate):
    not_nullable = ("first_name", "last_name", "full_name", "role")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    role: Optional[SupportRole] = None
    gender: Optional[Gender] = None
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    image_url: Optional[str] = Field(None, max_length=500)


class SupportResponse(RegistrationResponse):
    first_name: str
    last_name: str
    full_name: str
    role: SupportRole
    gender: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None


class StatusUpdate(ApiModel):
    status: RegistrationStatus
    notes: Optional[str] = None


class ItemError(ApiModel):
    index: int
    detail: Any


class BatchCreateResponse(ApiModel):
    success: bool
    results: List[Dict[str, Any]]
    errors: List[ItemError] = []


class BulkStatusResponse(ApiModel):
    status: RegistrationStatus
    updated: Dict[str, int]
    total: int


class RegistrationSummary(ApiModel):
    tournament_id: str
    country: Optional[str] = None
    by_kind: Dict[str, Dict[str, int]]
    totals: Dict[str, int]
