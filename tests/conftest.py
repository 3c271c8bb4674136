"""Pytest configuration and fixtures for risk engine tests."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from cardiorisk.main import app
from cardiorisk.schemas.base import Race, Sex
from cardiorisk.services.risk_engine import reset_risk_engine_service
from cardiorisk.services.risk_validation import RiskInput


@pytest.fixture
def adult_input() -> RiskInput:
    """Young adult whose PREVENT score stays below the 50% cap.

    ASCVD 0.0% (Low), PREVENT 13.2% (Intermediate), consolidated Moderate.
    """
    return RiskInput(
        age=18,
        sex=Sex.FEMALE,
        race=Race.WHITE,
        total_cholesterol=150,
        hdl_cholesterol=50,
        systolic_bp=100,
        egfr=120,
    )


@pytest.fixture
def pediatric_input() -> RiskInput:
    """Ten-year-old boy with only the pediatric fields set."""
    return RiskInput(age=10, sex=Sex.MALE, systolic_bp=100)


@pytest.fixture
def adult_payload() -> dict:
    """JSON body matching ``adult_input`` using the camelCase aliases."""
    return {
        "age": 18,
        "sex": "female",
        "race": "white",
        "totalCholesterol": 150,
        "hdlCholesterol": 50,
        "systolicBP": 100,
        "onBloodPressureMedication": False,
        "isDiabetic": False,
        "isSmoker": False,
        "egfr": 120,
    }


@pytest.fixture(autouse=True)
def _reset_engine_singleton():
    """Give every test a fresh service singleton."""
    reset_risk_engine_service()
    yield
    reset_risk_engine_service()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
