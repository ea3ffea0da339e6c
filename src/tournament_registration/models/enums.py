"""
Enumerations shared by the ORM models, API schemas and business rules.

Values are stored verbatim in string columns and exposed verbatim in
API responses.
"""

from enum import Enum


class UserRole(str, Enum):
    DELEGATE = "DELEGATE"
    ADMIN = "ADMIN"


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    REGISTERED = "REGISTERED"

    @property
    def description(self) -> str:
        return STATUS_DESCRIPTIONS[self]


STATUS_DESCRIPTIONS = {
    RegistrationStatus.PENDING: "Selected but not yet submitted by the delegation",
    RegistrationStatus.SUBMITTED: "Submitted by the delegation, awaiting confirmation",
    RegistrationStatus.REGISTERED: "Confirmed by the tournament organisers",
}


class TournamentType(str, Enum):
    CAMPEONATO_PANAMERICANO = "CAMPEONATO_PANAMERICANO"
    COPA_PANAMERICANA = "COPA_PANAMERICANA"


class ChoreographyCategory(str, Enum):
    YOUTH = "YOUTH"
    JUNIOR = "JUNIOR"
    SENIOR = "SENIOR"


class ChoreographyType(str, Enum):
    MIND = "MIND"  # Men's individual
    WIND = "WIND"  # Women's individual
    MXP = "MXP"  # Mixed pair
    TRIO = "TRIO"
    GRP = "GRP"  # Group
    DNCE = "DNCE"  # Aerobic dance

    @property
    def gymnast_count(self) -> int:
        return GYMNAST_COUNTS[self]


GYMNAST_COUNTS = {
    ChoreographyType.MIND: 1,
    ChoreographyType.WIND: 1,
    ChoreographyType.MXP: 2,
    ChoreographyType.TRIO: 3,
    ChoreographyType.GRP: 5,
    ChoreographyType.DNCE: 8,
}


class SupportRole(str, Enum):
    DELEGATION_LEADER = "DELEGATION_LEADER"
    MEDIC = "MEDIC"
    COMPANION = "COMPANION"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
