"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Country Currency Catalog"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./countries.db"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Sources externes / External data sources (taux relatifs à USD / rates relative to USD)
    COUNTRIES_API_URL: str = (
        "https://restcountries.com/v2/all?fields=name,capital,region,population,flag,currencies"
    )
    EXCHANGE_RATES_API_URL: str = "https://open.er-api.com/v6/latest/USD"
    # None = délai par défaut du transport / None = transport default timeout
    EXTERNAL_API_TIMEOUT: float | None = None

    # Image de synthèse / Summary image
    CACHE_DIR: str = "cache"
    SUMMARY_IMAGE_NAME: str = "summary.png"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REFRESH: str = "5/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def summary_image_path(self) -> str:
        """Chemin de l'image de synthèse / Summary image path."""
        return os.path.join(self.CACHE_DIR, self.SUMMARY_IMAGE_NAME)


settings = Settings()
