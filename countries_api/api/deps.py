"""
Dépendances injectées dans les routes via Depends() / Dependencies injected through Depends().
Les tests les remplacent par une base en mémoire et des sources factices.
Tests override them with an in-memory store and fake sources.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from countries_api.config import settings
from countries_api.database import get_session_factory
from countries_api.services.external_data import ExternalDataService
from countries_api.services.refresh import RefreshGuard, RefreshPipeline, refresh_guard
from countries_api.services.summary_image import SummaryImageService


def get_external_data_service() -> ExternalDataService:
    return ExternalDataService(
        countries_url=settings.COUNTRIES_API_URL,
        rates_url=settings.EXCHANGE_RATES_API_URL,
        timeout=settings.EXTERNAL_API_TIMEOUT,
    )


def get_summary_image_service() -> SummaryImageService:
    return SummaryImageService(settings.summary_image_path)


def get_refresh_guard() -> RefreshGuard:
    return refresh_guard


def get_refresh_pipeline(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    external: ExternalDataService = Depends(get_external_data_service),
    summary: SummaryImageService = Depends(get_summary_image_service),
    guard: RefreshGuard = Depends(get_refresh_guard),
) -> RefreshPipeline:
    """Assembler le pipeline / Assemble the refresh pipeline."""
    return RefreshPipeline(session_factory, external, summary, guard)
