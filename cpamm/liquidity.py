"""Liquidity share accounting.

Shares are a fungible claim on a proportional slice of both reserves.

First deposit:      minted = isqrt(amount0 * amount1)
Later deposits:     minted = min(amount0 * supply // reserve0,
                                 amount1 * supply // reserve1)
Redemption:         amount_i = shares * reserve_i // supply

Taking the minimum of the two ratios means a deposit that does not match the
current reserve ratio only earns shares for its smaller side; the excess is
donated to existing holders instead of diluting them. All divisions round
down, in the pool's favour.
"""

from __future__ import annotations

from cpamm.errors import InsufficientBalance, ReserveUnderflow
from cpamm.safe_int import S


def shares_to_mint(
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> int:
    """Calculate shares minted for depositing amount0 and amount1.

    Args:
        amount0: Deposit of asset0
        amount1: Deposit of asset1
        reserve0: Current reserve of asset0
        reserve1: Current reserve of asset1
        total_supply: Current outstanding shares

    Returns:
        Shares to mint (may be 0 for dust deposits)

    Raises:
        ReserveUnderflow: If shares are outstanding while a reserve is empty
    """
    if total_supply == 0:
        return (S(amount0) * S(amount1)).sqrt().value

    if reserve0 == 0 or reserve1 == 0:
        raise ReserveUnderflow(
            f"Empty reserve with {total_supply} shares outstanding: ({reserve0}, {reserve1})"
        )

    supply = S(total_supply)
    by_amount0 = S(amount0) * supply // S(reserve0)
    by_amount1 = S(amount1) * supply // S(reserve1)
    return by_amount0.min(by_amount1).value


def amounts_for_shares(
    shares: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> tuple[int, int]:
    """Calculate the assets returned for redeeming shares.

    Args:
        shares: Shares to redeem
        reserve0: Current reserve of asset0
        reserve1: Current reserve of asset1
        total_supply: Current outstanding shares

    Returns:
        Tuple of (amount0, amount1), each rounded down

    Raises:
        DivisionByZero: If total_supply is 0
    """
    supply = S(total_supply)
    amount0 = S(shares) * S(reserve0) // supply
    amount1 = S(shares) * S(reserve1) // supply
    return amount0.value, amount1.value


class ShareBook:
    """Per-participant share balances.

    Participants appear on their first credit and are removed when their
    balance returns to zero, so the book only lists actual holders.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def balance_of(self, participant: str) -> int:
        return self._balances.get(participant, 0)

    def credit(self, participant: str, shares: int) -> None:
        self._balances[participant] = (S(self.balance_of(participant)) + S(shares)).value

    def debit(self, participant: str, shares: int) -> None:
        """Remove shares from a participant.

        Raises:
            InsufficientBalance: If the participant holds fewer than shares
        """
        balance = self.balance_of(participant)
        if balance < shares:
            raise InsufficientBalance(
                f"Insufficient balance: {participant} holds {balance} shares, needs {shares}"
            )
        remaining = balance - shares
        if remaining == 0:
            del self._balances[participant]
        else:
            self._balances[participant] = remaining

    def total(self) -> int:
        return sum(self._balances.values())

    def holders(self) -> dict[str, int]:
        """Copy of all non-zero balances."""
        return dict(self._balances)

    def restore(self, balances: dict[str, int]) -> None:
        self._balances = dict(balances)

    def __len__(self) -> int:
        return len(self._balances)

    def __contains__(self, participant: object) -> bool:
        return participant in self._balances
