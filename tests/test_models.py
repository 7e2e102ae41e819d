"""Tests des modèles / Model tests."""

import pytest
from sqlalchemy.exc import IntegrityError

from countries_api.models.country import Country
from countries_api.services.country_query import SortKey, parse_sort
from countries_api.exceptions import ValidationError


def test_country_repr():
    c = Country(id=1, name="France", currency_code="EUR")
    assert "France" in repr(c)
    assert "EUR" in repr(c)


def test_sort_keys():
    assert SortKey.GDP_DESC.value == "gdp_desc"
    assert parse_sort(None) is SortKey.NAME_ASC
    assert parse_sort("population_desc") is SortKey.POPULATION_DESC
    with pytest.raises(ValidationError):
        parse_sort("GDP_DESC")


async def test_name_unique_case_insensitive(session_factory):
    async with session_factory() as session:
        session.add(Country(name="France", population=1))
        await session.commit()

    async with session_factory() as session:
        session.add(Country(name="FRANCE", population=2))
        with pytest.raises(IntegrityError):
            await session.commit()
