"""
Tournament Registration Database Models

This package contains all SQLAlchemy models for the registration API:
- User: Delegates and organisers
- Tournament: Campeonato and Copa Panamericana editions
- Gymnast: Athlete master data keyed by FIG id
- Choreography, Coach, Judge, SupportStaff: Registrable entities
"""

from .base import Base
from .enums import (
    UserRole,
    RegistrationStatus,
    TournamentType,
    ChoreographyCategory,
    ChoreographyType,
    SupportRole,
    Gender,
)
from .user import User
from .tournament import Tournament
from .registration import (
    Choreography,
    Coach,
    Judge,
    SupportStaff,
    REGISTRABLE_MODELS,
    choreography_gymnasts,
)
from .gymnast import Gymnast

__all__ = [
    "Base",
    "UserRole",
    "RegistrationStatus",
    "TournamentType",
    "ChoreographyCategory",
    "ChoreographyType",
    "SupportRole",
    "Gender",
    "User",
    "Tournament",
    "Gymnast",
    "Choreography",
    "Coach",
    "Judge",
    "SupportStaff",
    "REGISTRABLE_MODELS",
    "choreography_gymnasts",
]
