"""
Service de consultation des pays / Country query service.
Lecture seule, hors suppression administrative / Read-only apart from the admin delete.
"""

import enum

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from countries_api.exceptions import NotFound, ValidationError
from countries_api.models.country import Country


class SortKey(str, enum.Enum):
    GDP_DESC = "gdp_desc"
    GDP_ASC = "gdp_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    POPULATION_DESC = "population_desc"
    POPULATION_ASC = "population_asc"


# PIB nul en dernier dans les deux sens / Null GDP last in both directions
SORT_ORDER = {
    SortKey.GDP_DESC: Country.estimated_gdp.desc().nulls_last(),
    SortKey.GDP_ASC: Country.estimated_gdp.asc().nulls_last(),
    SortKey.NAME_ASC: Country.name.asc(),
    SortKey.NAME_DESC: Country.name.desc(),
    SortKey.POPULATION_DESC: Country.population.desc(),
    SortKey.POPULATION_ASC: Country.population.asc(),
}


def parse_sort(sort: str | None) -> SortKey:
    if not sort:
        return SortKey.NAME_ASC
    try:
        return SortKey(sort)
    except ValueError:
        raise ValidationError(
            "Invalid sort value",
            details={"sort": f"must be one of {', '.join(key.value for key in SortKey)}"},
        ) from None


def _name_clause(name: str | None):
    if name is None or not name.strip():
        raise ValidationError(details={"name": "is required"})
    return func.lower(Country.name) == func.lower(name.strip())


async def list_countries(
    db: AsyncSession,
    region: str | None = None,
    currency: str | None = None,
    sort: str | None = None,
) -> list[Country]:
    """Lister avec filtres et tri / List with filters and sort."""
    sort_key = parse_sort(sort)

    query = select(Country)
    if region and region.strip():
        query = query.where(func.lower(Country.region) == func.lower(region.strip()))
    if currency and currency.strip():
        query = query.where(func.upper(Country.currency_code) == func.upper(currency.strip()))

    query = query.order_by(SORT_ORDER[sort_key], Country.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_country(db: AsyncSession, name: str) -> Country:
    result = await db.execute(select(Country).where(_name_clause(name)).limit(1))
    country = result.scalar_one_or_none()
    if country is None:
        raise NotFound()
    return country


async def delete_country(db: AsyncSession, name: str) -> str:
    """
    Supprimer par nom, insensible à la casse / Delete by name, case-insensitive.
    Retourne le nom enregistré / Returns the stored name.
    """
    country = await get_country(db, name)
    await db.delete(country)
    await db.flush()
    return country.name


async def get_status(db: AsyncSession) -> dict:
    """Nombre total et dernier rafraichissement / Total count and latest refresh."""
    result = await db.execute(select(func.count(Country.id), func.max(Country.last_refreshed_at)))
    total, last_refreshed_at = result.one()
    return {"total_countries": total or 0, "last_refreshed_at": last_refreshed_at}
