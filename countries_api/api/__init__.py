"""Routes API / API routes."""

from fastapi import APIRouter

from countries_api.api import countries, status

api_router = APIRouter()

api_router.include_router(countries.router, prefix="/countries", tags=["countries"])
api_router.include_router(status.router, prefix="/status", tags=["status"])
