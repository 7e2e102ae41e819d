"""Fixtures communes / Shared fixtures."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from countries_api.api.deps import (
    get_external_data_service,
    get_refresh_guard,
    get_summary_image_service,
)
from countries_api.database import get_db, get_session_factory, init_db
from countries_api.main import app
from countries_api.rate_limit import limiter
from countries_api.services.external_data import ExternalDataService
from countries_api.services.refresh import RefreshGuard
from countries_api.services.summary_image import SummaryImageService

COUNTRIES_URL = "https://countries.test/all"
RATES_URL = "https://rates.test/latest/USD"

SAMPLE_COUNTRIES = [
    {
        "name": "Nigeria",
        "capital": "Abuja",
        "region": "Africa",
        "population": 206139589,
        "flag": "https://flagcdn.com/ng.svg",
        "currencies": [{"code": "NGN", "name": "Nigerian naira", "symbol": "₦"}],
    },
    {
        "name": "Ghana",
        "capital": "Accra",
        "region": "Africa",
        "population": 31072945,
        "flag": "https://flagcdn.com/gh.svg",
        "currencies": [{"code": "GHS", "name": "Ghanaian cedi", "symbol": "₵"}],
    },
    {
        "name": "France",
        "capital": "Paris",
        "region": "Europe",
        "population": 67391582,
        "flag": "https://flagcdn.com/fr.svg",
        "currencies": [{"code": "EUR", "name": "Euro", "symbol": "€"}],
    },
    {
        "name": "Antarctica",
        "region": "Polar",
        "population": 1000,
        "flag": "https://flagcdn.com/aq.svg",
    },
    {
        "name": "Atlantis",
        "capital": "Poseidonia",
        "region": "Europe",
        "population": 5000,
        "currencies": [{"code": "ATL", "name": "Atlantean drachma"}],
    },
]

SAMPLE_RATES = {
    "result": "success",
    "base_code": "USD",
    "rates": {"USD": 1, "NGN": 1600.23, "GHS": 15.34, "EUR": 0.92},
}


class Upstream:
    """État des sources simulées / Simulated upstream state."""

    def __init__(self):
        self.countries = list(SAMPLE_COUNTRIES)
        self.rates = dict(SAMPLE_RATES)
        self.countries_status = 200
        self.rates_status = 200
        self.calls: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        if url == COUNTRIES_URL:
            return httpx.Response(self.countries_status, json=self.countries)
        if url == RATES_URL:
            return httpx.Response(self.rates_status, json=self.rates)
        return httpx.Response(404)

    def service(self) -> ExternalDataService:
        return ExternalDataService(
            countries_url=COUNTRIES_URL,
            rates_url=RATES_URL,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def image_path(tmp_path):
    return str(tmp_path / "cache" / "summary.png")


@pytest.fixture
def guard():
    return RefreshGuard()


@pytest.fixture
async def client(session_factory, upstream, image_path, guard):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_external_data_service] = upstream.service
    app.dependency_overrides[get_summary_image_service] = lambda: SummaryImageService(image_path)
    app.dependency_overrides[get_refresh_guard] = lambda: guard
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    limiter.enabled = True
