"""Constant-product AMM liquidity pool."""

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import PoolError
from cpamm.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swapped
from cpamm.ledger import AssetLedger, InMemoryAssetLedger
from cpamm.pool import Pool

__version__ = "0.1.0"
__all__ = [
    "Pool",
    "PoolConfig",
    "DEFAULT_POOL_CONFIG",
    "PoolError",
    "AssetLedger",
    "InMemoryAssetLedger",
    "PoolEvent",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
    "__version__",
]
