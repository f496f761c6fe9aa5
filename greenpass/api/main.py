"""GreenPass ASGI app: logging setup, CORS, routers and the health and version endpoints."""

import logging

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from greenpass.api.data_mode import router as data_mode_router
from greenpass.api.dpp import public_router as public_dpp_router
from greenpass.api.dpp import router as dpp_router
from greenpass.api.materiality import router as materiality_router
from greenpass.config.settings import get_settings

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Console output in dev, JSON lines elsewhere.
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "dev"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)
logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# One app serves the tenant API and the unauthenticated public passport view.
app = FastAPI(
    title="GreenPass API",
    description="Digital Product Passport quality, circularity, materiality and audit service.",
    version=APP_VERSION,
)

# Browsers may call the API from any origin only in dev.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Passport, public view, materiality and data-mode routes.
app.include_router(dpp_router)
app.include_router(public_dpp_router)
app.include_router(materiality_router)
app.include_router(data_mode_router)


@app.get("/health")
async def health_check() -> dict:
    """Report API and database reachability.

    Always answers 200; an unreachable database marks the service degraded.
    """
    checks: dict[str, bool] = {"api": True}

    try:
        from greenpass.db.session import async_session_factory
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        logger.warning("health_database_unreachable")
        checks["database"] = False

    all_ok = all(checks.values())

    return {
        "status": "ok" if all_ok else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "checks": checks,
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Name and version of the running GreenPass build."""
    return {
        "name": "GreenPass",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
