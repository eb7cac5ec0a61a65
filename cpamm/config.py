"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from cpamm.constants import DEFAULT_FEE_NUMERATOR, FEE_DENOMINATOR


@dataclass(frozen=True)
class PoolConfig:
    """Swap fee policy for a pool.

    The fee is taken from the swap input and stays in the pool, so it accrues
    to liquidity providers. Deposits and withdrawals are never charged.

    Attributes:
        fee_numerator: Fee share of the input amount, in units of the denominator
        fee_denominator: Fee scale (default: 10,000, i.e. basis points)
    """

    fee_numerator: int = DEFAULT_FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive: {self.fee_denominator}")
        if not 0 <= self.fee_numerator < self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in [0, {self.fee_denominator}): {self.fee_numerator}"
            )

    @property
    def fee_multiplier(self) -> int:
        """Share of the input that is priced (fee_denominator - fee_numerator).

        For a 30 bps fee over 10,000 this returns 9970.
        """
        return self.fee_denominator - self.fee_numerator

    @property
    def is_fee_free(self) -> bool:
        return self.fee_numerator == 0

    @classmethod
    def from_bps(cls, fee_bps: int) -> PoolConfig:
        """Create a config from a fee in basis points (30 = 0.3%)."""
        return cls(fee_numerator=fee_bps, fee_denominator=FEE_DENOMINATOR)

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Read the fee from CPAMM_FEE_BPS (default: zero fee)."""
        raw = os.environ.get("CPAMM_FEE_BPS", str(DEFAULT_FEE_NUMERATOR))
        try:
            fee_bps = int(raw)
        except ValueError as err:
            raise ValueError(f"CPAMM_FEE_BPS must be an integer: '{raw}'") from err
        return cls.from_bps(fee_bps)


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
