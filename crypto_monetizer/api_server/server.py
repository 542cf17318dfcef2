"""
FastAPI server: settings CRUD and synthetic exchange rates.

create_app() wires the router, middleware and error handlers; the quote source
is built from settings unless one is passed in. Every domain error leaves the
API as {"code", "message"} with the status of its error class.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crypto_monetizer.api_server.middleware import RequestLoggingMiddleware
from crypto_monetizer.api_server.routes import router
from crypto_monetizer.config import Settings, get_settings
from crypto_monetizer.core.exceptions import ConfigurationError, MonetizerError, StorageError
from crypto_monetizer.database import init_db
from crypto_monetizer.exchange import FailureInjectionPolicy, QuoteSource, SyntheticQuoteSource
from crypto_monetizer.logging import get_logger

logger = get_logger(__name__)


def build_quote_source(settings: Settings) -> QuoteSource:
    policy = FailureInjectionPolicy(
        enabled=settings.failure_injection,
        probability=settings.failure_probability,
    )
    return SyntheticQuoteSource(policy=policy, base_price=settings.base_price)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create settings tables on startup. A missing backend only disables writes."""
    try:
        init_db()
    except ConfigurationError as e:
        logger.warning("settings_store_unconfigured", error=e.message)
    except StorageError as e:
        logger.warning("settings_store_init_skip", error=e.message)
    yield


# -----------------------------------------------------------------------------
# Error handlers
# -----------------------------------------------------------------------------


def monetizer_error_handler(request: Request, exc: MonetizerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("api_error", code=exc.code, error=exc.message, path=request.url.path)
    else:
        logger.info("api_rejected", code=exc.code, error=exc.message, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first: dict[str, Any] = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else "Invalid request"
    return JSONResponse(status_code=400, content={"code": "validation_error", "message": message})


def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api_unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"code": "internal_error", "message": "Internal error"})


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------


def create_app(quote_source: QuoteSource | None = None) -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Crypto Monetizer API",
        description="Payout settings per wallet and synthetic exchange rate comparison.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.quote_source = quote_source or build_quote_source(settings)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(MonetizerError, monetizer_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router, prefix="/api")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness check: API is up."""
        return {"status": "ok"}

    logger.info(
        "api_app_created",
        storage_profile=settings.storage_profile,
        failure_injection=settings.failure_injection,
    )
    return app


app = create_app()
