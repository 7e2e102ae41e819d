"""
Erreurs métier et handlers FastAPI / Domain errors and FastAPI exception handlers.
Chaque erreur devient une réponse JSON {error, details?} sans trace d'appel.
Each error becomes a JSON {error, details?} response without a traceback.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Erreur de base du catalogue / Base catalog error."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class DataSourceUnavailable(CatalogError):
    """Source externe injoignable ou invalide / Upstream unreachable or invalid."""

    status_code = 503
    message = "External data source unavailable"

    def __init__(self, source: str, details: str | None = None):
        self.source = source
        super().__init__(details=details or f"Could not fetch data from {source}")


class ValidationError(CatalogError):
    """Entrée client invalide / Malformed client input."""

    status_code = 400
    message = "Validation failed"


class NotFound(CatalogError):
    status_code = 404
    message = "Country not found"


class RefreshInProgress(CatalogError):
    """Un rafraichissement est deja en cours / A refresh is already running."""

    status_code = 409
    message = "Refresh already in progress"

    def __init__(self):
        super().__init__(details="Retry once the current refresh has completed")


class InternalError(CatalogError):
    status_code = 500
    message = "Internal server error"


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = {
        ".".join(str(part) for part in err["loc"][1:]) or "request": err["msg"]
        for err in exc.errors()
    }
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": InternalError.message})


def register_exception_handlers(app: FastAPI) -> None:
    """Brancher les handlers sur l'application / Register handlers on the app."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
