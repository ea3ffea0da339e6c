"""
Tournament business rules for choreography registration.

Each tournament type has its own rule set:
- Campeonato Panamericano: Pan-American federations only, at most 2
  choreographies per country per category
- Copa Panamericana: Pan-American plus invited federations, at most 4
  choreographies per country per category and choreography type

Rules common to both (gymnast count per type, category from the oldest
gymnast's age) live at module level.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from ..errors import BusinessRuleViolation
from ..models.enums import ChoreographyCategory, ChoreographyType, TournamentType

PAN_AMERICAN_COUNTRIES = [
    "ARG", "BOL", "BRA", "CAN", "CHI", "COL", "CRC", "CUB", "DOM", "ECU",
    "ESA", "GUA", "HAI", "HON", "JAM", "MEX", "NCA", "PAN", "PAR", "PER",
    "PUR", "TTO", "URU", "USA", "VEN",
]

INVITED_COUNTRIES = ["ESP", "POR", "ITA", "FRA", "GER", "GBR", "JPN", "KOR", "CHN", "AUS"]

YOUTH_MAX_AGE = 14
JUNIOR_MAX_AGE = 17

# Inclusive age range of each category
AGE_LIMITS = {
    ChoreographyCategory.YOUTH: {"min": 0, "max": YOUTH_MAX_AGE},
    ChoreographyCategory.JUNIOR: {"min": YOUTH_MAX_AGE + 1, "max": JUNIOR_MAX_AGE},
    ChoreographyCategory.SENIOR: {"min": JUNIOR_MAX_AGE + 1, "max": 100},
}


def competition_age(date_of_birth: date, competition_year: int) -> int:
    """FIG age: the age a gymnast turns during the competition year."""
    return competition_year - date_of_birth.year


def calculate_category(oldest_age: int) -> ChoreographyCategory:
    if oldest_age <= YOUTH_MAX_AGE:
        return ChoreographyCategory.YOUTH
    if oldest_age <= JUNIOR_MAX_AGE:
        return ChoreographyCategory.JUNIOR
    return ChoreographyCategory.SENIOR


def is_age_in_category(age: int, category: ChoreographyCategory) -> bool:
    limits = AGE_LIMITS[ChoreographyCategory(category)]
    return limits["min"] <= age <= limits["max"]


def validate_gymnast_count(choreography_type: ChoreographyType, gymnast_count: int) -> None:
    expected = ChoreographyType(choreography_type).gymnast_count
    if gymnast_count != expected:
        raise BusinessRuleViolation(
            f"{ChoreographyType(choreography_type).value} choreographies require exactly "
            f"{expected} gymnast(s), got {gymnast_count}"
        )


class TournamentRules:
    """Base rule set; subclasses fix the tournament type, quota and eligibility."""

    tournament_type: TournamentType
    display_name: str
    max_per_category: int
    quota_per_type = False
    eligible_countries: List[str] = []

    def quota_filters(self, category: ChoreographyCategory, choreography_type: ChoreographyType) -> Dict[str, str]:
        """Column filters selecting the existing rows that count against the quota."""
        filters = {"category": ChoreographyCategory(category).value}
        if self.quota_per_type:
            filters["type"] = ChoreographyType(choreography_type).value
        return filters

    def is_eligible(self, country: str) -> bool:
        return country.upper() in self.eligible_countries

    def validate_choreography(
        self,
        country: str,
        category: ChoreographyCategory,
        choreography_type: ChoreographyType,
        gymnast_fig_ids: Sequence[str],
        existing_count: int,
    ) -> None:
        """
        Validate a new choreography against this tournament's rules.

        Args:
            country: Acting country (already taken from the credential)
            category: Choreography category
            choreography_type: Choreography type
            gymnast_fig_ids: FIG ids of the performing gymnasts
            existing_count: Choreographies already counted against the quota

        Raises:
            BusinessRuleViolation: If any rule is broken
        """
        if existing_count >= self.max_per_category:
            scope = "category"
            if self.quota_per_type:
                scope = f"category and choreography type ({ChoreographyType(choreography_type).value})"
            raise BusinessRuleViolation(
                f"{self.display_name} allows maximum {self.max_per_category} choreographies per country "
                f"per {scope}. {country} already has {existing_count} in "
                f"{ChoreographyCategory(category).value}."
            )

        if not gymnast_fig_ids:
            raise BusinessRuleViolation(f"At least one gymnast is required for {self.display_name}")

        if not self.is_eligible(country):
            raise BusinessRuleViolation(
                f"Country {country} is not eligible for {self.display_name}"
            )

    def describe(self) -> List[str]:
        return [
            f"Maximum {self.max_per_category} choreographies per country per category"
            + (" per choreography type" if self.quota_per_type else ""),
            f"{len(self.eligible_countries)} eligible federations",
        ]


class CampeonatoPanamericanoRules(TournamentRules):
    tournament_type = TournamentType.CAMPEONATO_PANAMERICANO
    display_name = "Campeonato Panamericano"
    max_per_category = 2
    eligible_countries = PAN_AMERICAN_COUNTRIES


class CopaPanamericanaRules(TournamentRules):
    tournament_type = TournamentType.COPA_PANAMERICANA
    display_name = "Copa Panamericana"
    max_per_category = 4
    quota_per_type = True
    eligible_countries = PAN_AMERICAN_COUNTRIES + INVITED_COUNTRIES


_RULES: Dict[TournamentType, TournamentRules] = {
    rules.tournament_type: rules
    for rules in (CampeonatoPanamericanoRules(), CopaPanamericanaRules())
}


def get_rules(tournament_type) -> TournamentRules:
    try:
        return _RULES[TournamentType(tournament_type)]
    except (KeyError, ValueError):
        raise BusinessRuleViolation(f"No business rules for tournament type: {tournament_type}")


def supported_tournament_types() -> List[TournamentType]:
    return list(_RULES.keys())


def oldest_age(dates_of_birth: Sequence[date], competition_year: int) -> Optional[int]:
    if not dates_of_birth:
        return None
    return max(competition_age(dob, competition_year) for dob in dates_of_birth)
