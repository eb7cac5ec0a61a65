"""Asset ledger interface consumed by the pool.

The pool never creates or destroys asset balance. It moves funds only
through an AssetLedger: pulling deposits with transfer_from (which needs
the owner's prior approval) and paying out with transfer.

InMemoryAssetLedger is an ERC20-style reference ledger used by tests and by
the HTTP service.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

from cpamm.errors import AllowanceInsufficient, InvalidAmount, TransferFailed
from cpamm.safe_int import S

logger = structlog.get_logger()


@runtime_checkable
class AssetLedger(Protocol):
    """Transfer interface of one fungible asset."""

    @property
    def asset_id(self) -> str:
        """Identity of the asset this ledger tracks."""
        ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        """Move amount from owner to recipient using spender's allowance.

        Raises:
            AllowanceInsufficient: If owner approved less than amount to spender
            TransferFailed: If owner's balance is below amount
        """
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move amount from sender to recipient.

        Raises:
            TransferFailed: If sender's balance is below amount
        """
        ...


class InMemoryAssetLedger:
    """Balances and allowances of one asset, held in memory.

    Usage:
        usdc = InMemoryAssetLedger("USDC")
        usdc.mint("alice", 1_000)
        usdc.approve("alice", pool.address, 500)
    """

    def __init__(self, asset_id: str, balances: dict[str, int] | None = None) -> None:
        self._asset_id = asset_id
        self._balances: dict[str, int] = defaultdict(int)
        # (owner, spender) -> remaining allowance
        self._allowances: dict[tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()
        for account, amount in (balances or {}).items():
            self.mint(account, amount)

    @property
    def asset_id(self) -> str:
        return self._asset_id

    def __repr__(self) -> str:
        return f"InMemoryAssetLedger({self._asset_id!r})"

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def mint(self, account: str, amount: int) -> None:
        """Credit new units to account (test and bootstrap funding)."""
        _check_amount(amount)
        with self._lock:
            self._balances[account] += amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Set spender's allowance over owner's balance (replaces any previous value)."""
        _check_amount(amount)
        with self._lock:
            self._allowances[(owner, spender)] = amount
        logger.debug(
            "ledger_approve",
            asset=self._asset_id,
            owner=owner,
            spender=spender,
            amount=amount,
        )

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        _check_amount(amount)
        with self._lock:
            allowed = self._allowances.get((owner, spender), 0)
            if allowed < amount:
                raise AllowanceInsufficient(
                    f"{self._asset_id}: transfer amount exceeds allowance "
                    f"({amount} > {allowed})"
                )
            self._move(owner, recipient, amount)
            self._allowances[(owner, spender)] = (S(allowed) - S(amount)).value

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        _check_amount(amount)
        with self._lock:
            self._move(sender, recipient, amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise TransferFailed(
                f"{self._asset_id}: transfer amount exceeds balance ({amount} > {balance})"
            )
        self._balances[sender] = balance - amount
        self._balances[recipient] += amount


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be an integer, got {type(amount).__name__}")
    if not S(amount).is_uint256():
        raise InvalidAmount(f"Amount out of uint256 range: {amount}")
