"""
Integration tests — /api/v1/categories.
"""

import pytest

URL = "/api/v1/categories"


async def test_lists_categories_with_age_limits(client):
    response = await client.get(URL)

    assert response.status_code == 200
    body = response.json()
    assert body["categories"] == ["YOUTH", "JUNIOR", "SENIOR"]
    assert body["ageLimits"]["JUNIOR"] == {"min": 15, "max": 17}


@pytest.mark.parametrize("age,category", [(9, "YOUTH"), (14, "YOUTH"), (15, "JUNIOR"), (17, "JUNIOR"), (18, "SENIOR")])
async def test_calculate(client, age, category):
    body = (await client.get(f"{URL}/calculate?age={age}")).json()
    assert body["age"] == age
    assert body["category"] == category
    assert set(body["ageLimits"]) == {"YOUTH", "JUNIOR", "SENIOR"}


async def test_validate(client):
    body = (await client.get(f"{URL}/validate?age=16&category=JUNIOR")).json()
    assert body == {"age": 16, "category": "JUNIOR", "isValid": True, "ageLimits": {"min": 15, "max": 17}}

    body = (await client.get(f"{URL}/validate?age=16&category=SENIOR")).json()
    assert body["isValid"] is False


async def test_bad_query_is_422(client):
    assert (await client.get(f"{URL}/calculate?age=abc")).status_code == 422
    assert (await client.get(f"{URL}/calculate")).status_code == 422
    assert (await client.get(f"{URL}/validate?age=16&category=MASTER")).status_code == 422
