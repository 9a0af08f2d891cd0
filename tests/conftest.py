"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from app.main import app
from app.calculations.models import (
    ContributionFrequency,
    InvestmentParameters,
    LoanParameters,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def repayment_loan():
    """$300k repayment mortgage at 5% over 25 years."""
    return LoanParameters.from_years(
        25,
        principal=300000,
        annual_rate=5.0,
        start_date=date(2025, 1, 1),
    )


@pytest.fixture
def investment():
    """$10k lump sum plus $500 a month at 7% for 20 years."""
    return InvestmentParameters(
        initial_amount=10000,
        contribution=500,
        annual_rate=7.0,
        term_years=20,
        frequency=ContributionFrequency.MONTHLY,
    )
