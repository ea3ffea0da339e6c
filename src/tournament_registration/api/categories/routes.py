from typing import Dict, List

from fastapi import APIRouter, Query

from tournament_registration.api.schemas import ApiModel
from tournament_registration.models.enums import ChoreographyCategory
from tournament_registration.registration.rules import AGE_LIMITS, calculate_category, is_age_in_category

router = APIRouter()


class AgeRange(ApiModel):
    min: int
    max: int


class CategoryList(ApiModel):
    categories: List[ChoreographyCategory]
    age_limits: Dict[ChoreographyCategory, AgeRange]


class CategoryForAge(ApiModel):
    age: int
    category: ChoreographyCategory
    age_limits: Dict[ChoreographyCategory, AgeRange]


class CategoryCheck(ApiModel):
    age: int
    category: ChoreographyCategory
    is_valid: bool
    age_limits: AgeRange


@router.get("", response_model=CategoryList)
async def list_categories():
    return {"categories": list(ChoreographyCategory), "age_limits": AGE_LIMITS}


@router.get("/calculate", response_model=CategoryForAge)
async def category_for_age(age: int = Query(..., ge=0)):
    """Category of a choreography whose oldest gymnast has this FIG age"""
    return {"age": age, "category": calculate_category(age), "age_limits": AGE_LIMITS}


@router.get("/validate", response_model=CategoryCheck)
async def check_age_in_category(age: int = Query(..., ge=0), category: ChoreographyCategory = Query(...)):
    return {
        "age": age,
        "category": category,
        "is_valid": is_age_in_category(age, category),
        "age_limits": AGE_LIMITS[category],
    }
