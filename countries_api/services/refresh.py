"""
Pipeline de rafraichissement / Refresh pipeline.
Sources externes -> champs dérivés -> upsert atomique -> image (best-effort).
External sources -> derived fields -> atomic upsert -> image (best-effort).
"""

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from countries_api.exceptions import RefreshInProgress
from countries_api.services.derived_fields import coerce_population, compute_derived_fields
from countries_api.services.external_data import ExternalDataService, normalize_country
from countries_api.services.summary_image import SummaryImageService
from countries_api.services.upsert import CountryUpsertService, UpsertRow

logger = logging.getLogger(__name__)


class RefreshGuard:
    """Un seul rafraichissement à la fois / Single-flight refresh guard."""

    def __init__(self):
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self):
        # Refuser plutôt que mettre en file / Reject rather than queue
        if self._lock.locked():
            raise RefreshInProgress()
        async with self._lock:
            yield


refresh_guard = RefreshGuard()


@dataclass
class RefreshResult:
    last_refreshed_at: datetime
    inserted: int
    updated: int
    skipped: int
    image_path: str | None


class RefreshPipeline:
    """Orchestration d'un cycle de rafraichissement / One refresh cycle."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        external: ExternalDataService,
        summary: SummaryImageService,
        guard: RefreshGuard,
        rng: random.Random | None = None,
    ):
        self.session_factory = session_factory
        self.external = external
        self.summary = summary
        self.guard = guard
        self.rng = rng

    def build_rows(self, countries: list, rates: dict) -> tuple[list[UpsertRow], int]:
        """Normaliser et calculer chaque pays / Normalize and derive each country."""
        rows: list[UpsertRow] = []
        skipped = 0
        for raw in countries:
            record = normalize_country(raw)
            if record is None:
                skipped += 1
                logger.debug("Skipping upstream record without a usable name: %r", raw)
                continue
            derived = compute_derived_fields(record.population, record.currencies, rates, self.rng)
            rows.append(UpsertRow(
                record=record,
                population=coerce_population(record.population),
                derived=derived,
            ))
        return rows, skipped

    async def run(self) -> RefreshResult:
        """
        Exécuter le cycle complet / Run the full cycle.
        DataSourceUnavailable avant toute écriture, InternalError après rollback.
        DataSourceUnavailable before any write, InternalError after a rollback.
        """
        async with self.guard.hold():
            data = await self.external.fetch()
            rows, skipped = self.build_rows(data.countries, data.rates)
            refreshed_at = datetime.now(timezone.utc)

            async with self.session_factory() as session:
                outcome = await CountryUpsertService.upsert_all(session, rows, refreshed_at)

            image_path = await self.summary.generate(self.session_factory, refreshed_at)

        if skipped:
            logger.warning("Refresh skipped %d upstream records", skipped)
        return RefreshResult(
            last_refreshed_at=refreshed_at,
            inserted=outcome.inserted,
            updated=outcome.updated,
            skipped=skipped,
            image_path=image_path,
        )
