"""Schémas Pays / Country schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_serializer


def to_iso(value: datetime | None) -> str | None:
    """ISO-8601 en UTC; les dates naïves sont supposées UTC / Naive datetimes are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class CountryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    capital: str | None = None
    region: str | None = None
    population: int
    currency_code: str | None = None
    exchange_rate: float | None = None
    estimated_gdp: float | None = None
    flag_url: str | None = None
    last_refreshed_at: datetime | None = None

    @field_serializer("last_refreshed_at")
    def _serialize_refreshed_at(self, value: datetime | None) -> str | None:
        return to_iso(value)


class RefreshResponse(BaseModel):
    message: str
    last_refreshed_at: datetime

    @field_serializer("last_refreshed_at")
    def _serialize_refreshed_at(self, value: datetime) -> str | None:
        return to_iso(value)


class StatusRead(BaseModel):
    total_countries: int
    last_refreshed_at: datetime | None = None

    @field_serializer("last_refreshed_at")
    def _serialize_refreshed_at(self, value: datetime | None) -> str | None:
        return to_iso(value)


class MessageResponse(BaseModel):
    message: str
