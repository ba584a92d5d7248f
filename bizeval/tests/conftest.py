import pytest

from bizeval.config import Settings
from bizeval.models.profile import FinancialProfile
from bizeval.valuation.benchmarks import default_benchmarks


@pytest.fixture
def profile():
    return FinancialProfile(
        annual_revenue=1_000_000,
        annual_profit=200_000,
        asking_price=500_000,
        industry="Manufacturing",
        years_established=12,
    )


@pytest.fixture
def benchmarks():
    return default_benchmarks()


@pytest.fixture
def settings():
    return Settings()
