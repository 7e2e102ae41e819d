"""
Service des données externes / External data service.
Récupère les pays et les taux de change, valide les charges utiles.
Fetches countries and exchange rates, validates the payloads.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from countries_api.exceptions import DataSourceUnavailable

logger = logging.getLogger(__name__)

COUNTRIES_SOURCE = "Countries API"
RATES_SOURCE = "Exchange rates API"


@dataclass
class CountryRecord:
    """Enregistrement pays normalisé / Normalized upstream country record."""
    name: str
    capital: str | None = None
    region: str | None = None
    population: Any = None
    flag_url: str | None = None
    currencies: list[Any] = field(default_factory=list)


@dataclass
class ExternalData:
    countries: list[Any]
    rates: dict[str, Any]


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_country(raw: Any) -> CountryRecord | None:
    """
    Normaliser un enregistrement amont / Normalize one upstream record.
    Retourne None si le nom est absent ou vide / Returns None when the name is missing or blank.
    """
    if not isinstance(raw, dict):
        return None
    name = _optional_text(raw.get("name"))
    if name is None:
        return None
    currencies = raw.get("currencies")
    return CountryRecord(
        name=name,
        capital=_optional_text(raw.get("capital")),
        region=_optional_text(raw.get("region")),
        population=raw.get("population"),
        flag_url=_optional_text(raw.get("flag")),
        currencies=currencies if isinstance(currencies, list) else [],
    )


class ExternalDataService:
    """Agrégateur des deux sources amont / Aggregator of both upstream sources."""

    def __init__(
        self,
        countries_url: str,
        rates_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.countries_url = countries_url
        self.rates_url = rates_url
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"transport": self.transport}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return httpx.AsyncClient(**kwargs)

    async def _get_json(self, client: httpx.AsyncClient, url: str, source: str) -> Any:
        try:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as exc:
            logger.warning("%s unavailable: %s", source, exc)
            raise DataSourceUnavailable(source) from exc
        except ValueError as exc:
            logger.warning("%s returned a non-JSON body", source)
            raise DataSourceUnavailable(source) from exc

    async def fetch_countries(self, client: httpx.AsyncClient) -> list[Any]:
        """Liste des pays, non vide / Non-empty list of countries."""
        payload = await self._get_json(client, self.countries_url, COUNTRIES_SOURCE)
        if not isinstance(payload, list) or not payload:
            logger.warning("%s returned an empty or malformed payload", COUNTRIES_SOURCE)
            raise DataSourceUnavailable(COUNTRIES_SOURCE)
        return payload

    async def fetch_rates(self, client: httpx.AsyncClient) -> dict[str, Any]:
        """Table code -> taux relatif à la devise de base / Code -> rate against the base currency."""
        payload = await self._get_json(client, self.rates_url, RATES_SOURCE)
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict) or not rates:
            logger.warning("%s returned no rates mapping", RATES_SOURCE)
            raise DataSourceUnavailable(RATES_SOURCE)
        return rates

    async def fetch(self) -> ExternalData:
        """Récupérer les deux sources, séquentiellement / Fetch both sources, sequentially."""
        async with self._client() as client:
            countries = await self.fetch_countries(client)
            rates = await self.fetch_rates(client)
        return ExternalData(countries=countries, rates=rates)
