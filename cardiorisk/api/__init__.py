"""API routers for the cardiovascular risk engine."""

from cardiorisk.api.risk import router as risk_router

__all__ = [
    "risk_router",
]
