"""
Upsert transactionnel des pays / Transactional country upsert.
Tout ou rien : une seule transaction pour tout le cycle de rafraichissement.
All or nothing: one transaction for the whole refresh cycle.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from countries_api.exceptions import InternalError
from countries_api.models.country import Country
from countries_api.services.derived_fields import DerivedFields
from countries_api.services.external_data import CountryRecord

logger = logging.getLogger(__name__)


@dataclass
class UpsertRow:
    record: CountryRecord
    population: int
    derived: DerivedFields


@dataclass
class UpsertResult:
    inserted: int = 0
    updated: int = 0


class CountryUpsertService:
    """Insertion ou mise à jour par nom / Insert-or-update keyed by name."""

    @staticmethod
    async def find_by_name(session: AsyncSession, name: str) -> Country | None:
        """Recherche insensible à la casse / Case-insensitive lookup."""
        result = await session.execute(
            select(Country).where(func.lower(Country.name) == func.lower(name.strip())).limit(1)
        )
        return result.scalar_one_or_none()

    @classmethod
    async def apply_row(cls, session: AsyncSession, row: UpsertRow, refreshed_at: datetime) -> bool:
        """Appliquer une ligne, True si insérée / Apply one row, True when inserted."""
        values = {
            "capital": row.record.capital,
            "region": row.record.region,
            "population": row.population,
            "currency_code": row.derived.currency_code,
            "exchange_rate": row.derived.exchange_rate,
            "estimated_gdp": row.derived.estimated_gdp,
            "flag_url": row.record.flag_url,
            "last_refreshed_at": refreshed_at,
        }
        existing = await cls.find_by_name(session, row.record.name)
        if existing is not None:
            for key, value in values.items():
                setattr(existing, key, value)
            inserted = False
        else:
            session.add(Country(name=row.record.name, **values))
            inserted = True
        # Rendre la ligne visible aux suivantes / Make the row visible to later rows
        await session.flush()
        return inserted

    @classmethod
    async def upsert_all(
        cls, session: AsyncSession, rows: list[UpsertRow], refreshed_at: datetime
    ) -> UpsertResult:
        """
        Appliquer toutes les lignes dans une transaction / Apply every row in one transaction.
        Toute erreur annule le cycle entier / Any failure rolls back the whole cycle.
        """
        result = UpsertResult()
        try:
            async with session.begin():
                for row in rows:
                    if await cls.apply_row(session, row, refreshed_at):
                        result.inserted += 1
                    else:
                        result.updated += 1
        except Exception as exc:
            logger.exception("Country upsert rolled back after %d rows", result.inserted + result.updated)
            raise InternalError() from exc

        logger.info("Country upsert committed: %d inserted, %d updated", result.inserted, result.updated)
        return result
