"""Domain events emitted by pool operations.

Each successful operation appends exactly one event to the pool's log and
returns it, so callers and indexers see the same values.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LiquidityAdded:
    """Shares minted for a deposit."""

    provider: str
    amount0: int
    amount1: int
    minted_shares: int

    name = "LiquidityAdded"


@dataclass(frozen=True)
class LiquidityRemoved:
    """Assets returned for redeemed shares."""

    provider: str
    amount0: int
    amount1: int

    name = "LiquidityRemoved"


@dataclass(frozen=True)
class Swapped:
    """A completed exact-input swap."""

    trader: str
    token_in: str
    amount_in: int
    amount_out: int

    name = "Swapped"


PoolEvent = LiquidityAdded | LiquidityRemoved | Swapped
