"""Reserve bookkeeping for a two-asset pool."""

from __future__ import annotations

from typing import NamedTuple

from cpamm.errors import ReserveOverflow, ReserveUnderflow
from cpamm.safe_int import S


class ReserveSnapshot(NamedTuple):
    """Immutable copy of the store, used to roll back a failed operation."""

    reserve0: int
    reserve1: int
    total_supply: int


class ReserveStore:
    """Current reserves of both assets and the outstanding share supply.

    Only the pool facade mutates a store, and only while holding the pool
    lock. Both primitives validate the full new state before assigning it,
    so a failed call changes nothing.
    """

    def __init__(self, reserve0: int = 0, reserve1: int = 0, total_supply: int = 0) -> None:
        for name, value in (
            ("reserve0", reserve0),
            ("reserve1", reserve1),
            ("total_supply", total_supply),
        ):
            if not S(value).is_uint256():
                raise ValueError(f"{name} must be a uint256: {value}")
        self._reserve0 = reserve0
        self._reserve1 = reserve1
        self._total_supply = total_supply

    @property
    def reserve0(self) -> int:
        return self._reserve0

    @property
    def reserve1(self) -> int:
        return self._reserve1

    @property
    def reserves(self) -> tuple[int, int]:
        return self._reserve0, self._reserve1

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def k(self) -> int:
        """Product of the reserves."""
        return (S(self._reserve0) * S(self._reserve1)).value

    def apply_delta(self, delta0: int, delta1: int) -> None:
        """Add signed deltas to both reserves in one step.

        Raises:
            ReserveUnderflow: If either reserve would go negative
            ReserveOverflow: If either reserve would exceed uint256
        """
        new0 = self._reserve0 + delta0
        new1 = self._reserve1 + delta1
        if new0 < 0 or new1 < 0:
            raise ReserveUnderflow(
                f"Reserve underflow: ({self._reserve0}, {self._reserve1}) + "
                f"({delta0}, {delta1}) = ({new0}, {new1})"
            )
        if not (S(new0).is_uint256() and S(new1).is_uint256()):
            raise ReserveOverflow(f"Reserve exceeds uint256: ({new0}, {new1})")
        self._reserve0, self._reserve1 = new0, new1

    def set_supply(self, new_total: int) -> None:
        """Replace the total share supply.

        Raises:
            ReserveUnderflow: If new_total is negative
            ReserveOverflow: If new_total exceeds uint256
        """
        if new_total < 0:
            raise ReserveUnderflow(f"Share supply cannot be negative: {new_total}")
        if not S(new_total).is_uint256():
            raise ReserveOverflow(f"Share supply exceeds uint256: {new_total}")
        self._total_supply = new_total

    def snapshot(self) -> ReserveSnapshot:
        return ReserveSnapshot(self._reserve0, self._reserve1, self._total_supply)

    def restore(self, snapshot: ReserveSnapshot) -> None:
        self._reserve0, self._reserve1, self._total_supply = snapshot

    def __repr__(self) -> str:
        return (
            f"ReserveStore(reserve0={self._reserve0}, reserve1={self._reserve1}, "
            f"total_supply={self._total_supply})"
        )
