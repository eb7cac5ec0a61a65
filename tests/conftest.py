"""Pytest configuration and fixtures."""

import pytest

from cpamm.ledger import InMemoryAssetLedger
from cpamm.pool import Pool
from tests.helpers import OWNER, deposit, ledgers, make_pool

# Swap fees the property tests run under (basis points)
FEE_SETTINGS = [0, 5, 30, 100]


@pytest.fixture
def pool() -> Pool:
    """Empty zero-fee pool; OWNER holds 100,000 of each asset."""
    return make_pool()


@pytest.fixture
def ledger0(pool: Pool) -> InMemoryAssetLedger:
    return ledgers(pool)[0]


@pytest.fixture
def ledger1(pool: Pool) -> InMemoryAssetLedger:
    return ledgers(pool)[1]


@pytest.fixture
def seeded_pool(pool: Pool) -> Pool:
    """Zero-fee pool after OWNER deposited 1000 / 1000."""
    deposit(pool, OWNER, 1000, 1000)
    return pool


@pytest.fixture(params=FEE_SETTINGS, ids=lambda bps: f"fee_{bps}bps")
def fee_bps(request: pytest.FixtureRequest) -> int:
    return request.param
