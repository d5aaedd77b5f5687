"""Entrypoint for the funnel dashboard FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from funnel_dashboard.config import AppSettings, get_settings
from funnel_dashboard.core.logging import setup_logging
from funnel_dashboard.core.telemetry import setup_telemetry
from funnel_dashboard.errors import DashboardError
from funnel_dashboard.ingest import DashboardLocks, SheetFetcher

from .admin import get_admin_router
from .auth import get_auth_router
from .database import Database
from .dependencies import BearerAuth
from .public import get_public_router
from .schemas import HealthResponse
from .security import AccessGate

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database):
    await db.create_all()
    yield


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DashboardError)
    async def _dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    db: Database | None = None,
    *,
    settings: AppSettings | None = None,
    fetcher: SheetFetcher | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    database_instance = db or Database(settings.database_url)
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    auth = BearerAuth(AccessGate(settings))
    sheet_fetcher = fetcher or SheetFetcher(timeout=settings.sheets_fetch_timeout_seconds)
    app.include_router(get_auth_router(database_instance, auth.gate))
    app.include_router(get_admin_router(database_instance, auth, sheet_fetcher, DashboardLocks()))
    app.include_router(get_public_router(database_instance, auth))

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=settings.telemetry_service_name)

    setup_telemetry(app, settings, engine=database_instance.engine)
    logger.debug("Application configured with %s", settings.dict_for_logging())
    return app


app = create_app()


__all__ = ["app", "create_app"]
