"""Routes Pays / Country API routes."""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from countries_api.api.deps import get_refresh_pipeline, get_summary_image_service
from countries_api.config import settings
from countries_api.database import get_db
from countries_api.rate_limit import limiter
from countries_api.schemas.country import CountryRead, MessageResponse, RefreshResponse
from countries_api.services import country_query
from countries_api.services.refresh import RefreshPipeline
from countries_api.services.summary_image import SummaryImageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/refresh", response_model=RefreshResponse)
@limiter.limit(settings.RATE_LIMIT_REFRESH)
async def refresh_countries(request: Request, pipeline: RefreshPipeline = Depends(get_refresh_pipeline)):
    """Rafraichir le catalogue depuis les sources externes / Refresh the catalog from upstream."""
    result = await pipeline.run()
    logger.info(
        "Refresh done: %d inserted, %d updated, %d skipped",
        result.inserted, result.updated, result.skipped,
    )
    return RefreshResponse(message="Data refresh successful", last_refreshed_at=result.last_refreshed_at)


@router.get("", response_model=list[CountryRead])
async def list_countries(
    region: str | None = Query(default=None, description="Filter by region, e.g. Africa"),
    currency: str | None = Query(default=None, description="Filter by currency code, e.g. NGN"),
    sort: str | None = Query(
        default=None,
        description="gdp_desc, gdp_asc, name_asc, name_desc, population_desc, population_asc",
    ),
    db: AsyncSession = Depends(get_db),
):
    """Lister les pays / List countries."""
    return await country_query.list_countries(db, region=region, currency=currency, sort=sort)


# Déclarée avant /{name} / Declared before /{name}
@router.get("/image", response_class=FileResponse)
async def get_summary_image(summary: SummaryImageService = Depends(get_summary_image_service)):
    """Servir l'image de synthèse / Serve the summary image."""
    if not os.path.isfile(summary.image_path):
        raise HTTPException(status_code=404, detail="Summary image not found")
    return FileResponse(summary.image_path, media_type="image/png")


@router.get("/{name}", response_model=CountryRead)
async def get_country(name: str, db: AsyncSession = Depends(get_db)):
    """Obtenir un pays par nom / Get a country by name."""
    return await country_query.get_country(db, name)


@router.delete("/{name}", response_model=MessageResponse)
async def delete_country(name: str, db: AsyncSession = Depends(get_db)):
    """Supprimer un pays par nom / Delete a country by name."""
    deleted = await country_query.delete_country(db, name)
    logger.info("Country %s deleted", deleted)
    return MessageResponse(message="Country deleted")
