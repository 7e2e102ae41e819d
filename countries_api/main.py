"""
Point d'entree FastAPI / FastAPI entry point.
Catalogue des pays enrichi des taux de change / Country catalog enriched with exchange rates.
"""

import json
import logging
import os
import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from countries_api.api import api_router
from countries_api.config import settings
from countries_api.database import init_db
from countries_api.exceptions import register_exception_handlers
from countries_api.rate_limit import limiter

logger = logging.getLogger("countries_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialisation et fermeture / Startup and shutdown."""
    # Creer les tables au demarrage / Create tables on startup
    await init_db()
    os.makedirs(settings.CACHE_DIR, exist_ok=True)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Catalogue des pays et PIB estimé / Country catalog with estimated GDP",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Erreurs JSON {error, details} / JSON {error, details} errors
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With", "X-Request-ID"],
)


# Identifiant de requete courant / Current request ID, visible to every log record
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propage X-Request-ID dans la reponse et les logs / Propagate X-Request-ID to response and logs."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)

# Routes API
app.include_router(api_router)


@app.get("/")
async def root():
    """Health check."""
    return {"app": settings.APP_NAME, "version": settings.APP_VERSION, "status": "running"}


class RequestIDLogFilter(logging.Filter):
    """Ajoute request_id a chaque enregistrement / Attach request_id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """Une ligne JSON par enregistrement / One JSON line per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_json_logging(level: int = logging.INFO) -> logging.Handler:
    """Logging JSON structure en production / Structured JSON logging in production."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestIDLogFilter())
    handler.setFormatter(JSONFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(level)
    return handler


if not settings.DEBUG:
    configure_json_logging()
