"""Modèle Pays / Country model."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from countries_api.database import Base


class Country(Base):
    """Pays enrichi d'un PIB estimé / Country enriched with an estimated GDP."""
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    capital: Mapped[str | None] = mapped_column(String(255))
    region: Mapped[str | None] = mapped_column(String(255))
    population: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    currency_code: Mapped[str | None] = mapped_column(String(10))
    exchange_rate: Mapped[float | None] = mapped_column(Float)  # relatif à USD / relative to USD
    estimated_gdp: Mapped[float | None] = mapped_column(Float)  # 2 décimales / 2 decimals
    flag_url: Mapped[str | None] = mapped_column(String(512))
    last_refreshed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Country {self.name} ({self.currency_code})>"


# Unicité insensible à la casse / Case-insensitive uniqueness
Index("uq_countries_name_lower", func.lower(Country.name), unique=True)
