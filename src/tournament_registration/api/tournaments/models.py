from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from tournament_registration.api.schemas import ApiModel, PartialUpdate
from tournament_registration.models.enums import TournamentType


class TournamentCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    short_name: str = Field(..., min_length=1, max_length=100)
    type: TournamentType
    description: Optional[str] = None
    start_date: date
    end_date: date
    location: str = Field(..., min_length=1, max_length=255)
    is_active: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class TournamentUpdate(PartialUpdate):
    not_nullable = ("name", "short_name", "start_date", "end_date", "location", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    short_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None


class TournamentResponse(ApiModel):
    id: str
    name: str
    short_name: str
    type: TournamentType
    description: Optional[str] = None
    start_date: date
    end_date: date
    location: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
