"""Route Statut / Status route."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from countries_api.database import get_db
from countries_api.schemas.country import StatusRead
from countries_api.services import country_query

router = APIRouter()


@router.get("", response_model=StatusRead)
async def get_status(db: AsyncSession = Depends(get_db)):
    """Nombre de pays et dernier rafraichissement / Country count and last refresh."""
    return await country_query.get_status(db)
