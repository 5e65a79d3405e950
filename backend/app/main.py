"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import api_router
from .core.config import AppSettings, get_settings
from .core.db import dispose_engine, init_models
from .core.errors import CompanyNotFoundError, InvalidFiltersError
from .core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging, create tables in dev and release the engine on exit."""

    settings = get_settings()
    setup_logging(settings.log_level)

    if settings.environment == "dev":
        await init_models()

    logger.info(
        "application.startup",
        environment=settings.environment,
        version=settings.version,
        page_size=settings.page_size,
        credentials=len(settings.credential_pool()),
        classifier_models=settings.classifier_models,
        min_confidence=settings.classifier_min_confidence,
        output_format=settings.classifier_output_format,
    )

    try:
        yield
    finally:
        await dispose_engine()
        logger.info("application.shutdown")


async def _company_not_found(request: Request, exc: CompanyNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _invalid_filters(request: Request, exc: InvalidFiltersError) -> JSONResponse:
    logger.info("request.invalid_filters", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build the directory API: routers under /v1, domain error mapping and CORS."""

    settings = settings or get_settings()

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        lifespan=lifespan,
    )
    application.add_exception_handler(CompanyNotFoundError, _company_not_found)
    application.add_exception_handler(InvalidFiltersError, _invalid_filters)

    # The browser client only reads and posts JSON and sends its device id.
    if settings.cors_allowed_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allowed_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "X-Device-Id"],
        )

    application.include_router(api_router, prefix="/v1")

    @application.get("/", tags=["meta"], summary="Service metadata")
    async def root() -> dict[str, str]:
        return {"service": settings.project_name, "version": settings.version, "docs": "/docs"}

    return application


app = create_app()
