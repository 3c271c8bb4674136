"""FastAPI application for the cardiovascular risk engine."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardiorisk import __version__
from cardiorisk.api import risk_router
from cardiorisk.core.config import settings
from cardiorisk.core.logging import configure_logging
from cardiorisk.services.risk_engine import get_risk_engine_service

logger = logging.getLogger(__name__)


def prewarm_services() -> dict[str, Any]:
    """Create the singleton services before accepting requests.

    Returns:
        Dictionary with service names and their stats.
    """
    start_time = time.perf_counter()
    services_loaded = {}

    svc = get_risk_engine_service()
    services_loaded["risk_engine"] = svc.get_stats()

    total_time_ms = (time.perf_counter() - start_time) * 1000

    return {
        "services_loaded": len(services_loaded),
        "total_prewarm_time_ms": round(total_time_ms, 2),
        "services": services_loaded,
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and pre-warms the engine service on startup.
    The engine holds no resources, so shutdown has nothing to release.
    """
    configure_logging("DEBUG" if settings.debug else settings.log_level)

    prewarm_stats = prewarm_services()
    logger.info(
        f"Services pre-warmed: {prewarm_stats['services_loaded']} services "
        f"in {prewarm_stats['total_prewarm_time_ms']}ms"
    )

    app.state.prewarm_stats = prewarm_stats
    yield


app = FastAPI(
    title=settings.app_name,
    description="API for ASCVD-style and PREVENT-style cardiovascular risk scoring with age-band routing and consolidated risk levels.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(risk_router, prefix=settings.api_v1_prefix)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint (liveness probe)."""
    return {
        "status": "healthy",
        "service": "cardiorisk",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, Any]:
    """Readiness check endpoint.

    The engine is stateless, so readiness only confirms the service
    singleton is available.
    """
    prewarm_stats = getattr(app.state, "prewarm_stats", {})

    return {
        "status": "ready",
        "service": "cardiorisk",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
        "risk_engine": get_risk_engine_service().get_stats(),
        "prewarmed_services": prewarm_stats.get("services_loaded", 0),
    }


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "service": "Cardiovascular Risk Engine API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
    }
