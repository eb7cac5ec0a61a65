"""Constant-product swap pricing.

The pool keeps reserve_in * reserve_out from decreasing across a trade:

    effective_in = amount_in * (fee_denominator - fee_numerator) // fee_denominator
    amount_out   = reserve_out * effective_in // (reserve_in + effective_in)

The whole amount_in is added to reserve_in, so the fee stays in the pool.
Because effective_in <= amount_in and the division rounds down,
(reserve_in + amount_in) * (reserve_out - amount_out) >= reserve_in * reserve_out,
and amount_out < reserve_out for any finite input.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import InsufficientOutput
from cpamm.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapQuote:
    """Priced swap against a given reserve pair."""

    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int

    @property
    def new_reserve_in(self) -> int:
        return self.reserve_in + self.amount_in

    @property
    def new_reserve_out(self) -> int:
        return self.reserve_out - self.amount_out


class ConstantProduct:
    """Constant-product swap math for one fee policy.

    Formula: amount_out = (in * m // d) * res_out // (res_in + in * m // d)
    where m/d is the share of the input left after the fee.
    """

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    def effective_input(self, amount_in: int) -> int:
        """Input amount net of the swap fee, rounded down."""
        if self.config.is_fee_free:
            return amount_in
        return (
            S(amount_in) * S(self.config.fee_multiplier) // S(self.config.fee_denominator)
        ).value

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount for an exact input.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Output token amount (0 for empty reserves or non-positive input)
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0

        effective_in = S(self.effective_input(amount_in))
        numerator = S(reserve_out) * effective_in
        denominator = S(reserve_in) + effective_in
        if not denominator:
            return 0
        return (numerator // denominator).value

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate the smallest input that yields at least amount_out.

        Solves floor(res_out * e / (res_in + e)) >= out for the effective
        input e, then the fee step floor(in * m / d) >= e for the input:

            e  = ceil(res_in * out / (res_out - out))
            in = ceil(e * d / m)

        Args:
            amount_out: Desired output token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Required input token amount

        Raises:
            InsufficientOutput: If amount_out is not strictly inside (0, reserve_out)
                or reserve_in is empty
        """
        if amount_out <= 0:
            raise InsufficientOutput(f"Requested output must be positive: {amount_out}")
        if reserve_in <= 0 or amount_out >= reserve_out:
            raise InsufficientOutput(
                f"Requested output {amount_out} cannot be taken from reserves "
                f"({reserve_in}, {reserve_out})"
            )

        effective_in = (S(reserve_in) * S(amount_out)).ceiling_div(
            S(reserve_out) - S(amount_out)
        )
        if self.config.is_fee_free:
            return effective_in.value
        return (
            (effective_in * S(self.config.fee_denominator))
            .ceiling_div(self.config.fee_multiplier)
            .value
        )

    def quote(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
    ) -> SwapQuote:
        """Price an exact-input swap and check the never-drain rule.

        Raises:
            InsufficientOutput: If the output is zero or would empty reserve_out
        """
        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out)
        if amount_out == 0 or amount_out >= reserve_out:
            logger.debug(
                "swap_output_rejected",
                token_in=token_in,
                amount_in=amount_in,
                amount_out=amount_out,
                reserve_in=reserve_in,
                reserve_out=reserve_out,
            )
            raise InsufficientOutput(
                f"Swap of {amount_in} {token_in} yields {amount_out} {token_out} "
                f"from reserve {reserve_out}"
            )
        return SwapQuote(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )


__all__ = ["ConstantProduct", "SwapQuote"]
