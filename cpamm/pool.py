"""Two-asset constant-product liquidity pool.

Pool is the single entry point for deposits, withdrawals and swaps. Every
operation holds the pool exclusively in the order

    validate -> pull funds -> compute -> mutate reserves/shares -> push funds -> emit

so no caller ever observes a half-applied operation. A rejected operation
leaves reserves, supply, share balances and the event log untouched; funds
already pulled for it are refunded before the error propagates. An operation
started from inside another one on the same thread (a ledger calling back
into the pool) fails with PoolLocked instead of interleaving.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import (
    IdenticalAssets,
    InsufficientBalance,
    InvalidAmount,
    InvalidToken,
    LedgerError,
    PayoutFailed,
    PoolConsistencyError,
    PoolError,
    PoolLocked,
    SlippageExceeded,
    ZeroAmount,
    ZeroLiquidityMinted,
    ZeroOutput,
)
from cpamm.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swapped
from cpamm.ledger import AssetLedger
from cpamm.liquidity import ShareBook, amounts_for_shares, shares_to_mint
from cpamm.reserves import ReserveStore
from cpamm.safe_int import S
from cpamm.swap import ConstantProduct, SwapQuote

logger = structlog.get_logger()


class Pool:
    """Liquidity pool over two distinct assets.

    Usage:
        pool = Pool(token0_ledger, token1_ledger)
        token0_ledger.approve("alice", pool.address, 1000)
        token1_ledger.approve("alice", pool.address, 1000)
        pool.add_liquidity("alice", 1000, 1000)
        pool.get_reserves()  # (1000, 1000)
    """

    def __init__(
        self,
        ledger0: AssetLedger,
        ledger1: AssetLedger,
        *,
        address: str | None = None,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
    ) -> None:
        """Create an empty pool.

        Args:
            ledger0: Ledger of asset0
            ledger1: Ledger of asset1
            address: Account the pool holds its funds under on both ledgers
                (default: derived from the asset ids)
            config: Swap fee policy

        Raises:
            IdenticalAssets: If both ledgers track the same asset
        """
        if ledger0.asset_id == ledger1.asset_id:
            raise IdenticalAssets(f"Pool assets must differ, got {ledger0.asset_id} twice")

        self._token0 = ledger0.asset_id
        self._token1 = ledger1.asset_id
        self._ledgers: dict[str, AssetLedger] = {self._token0: ledger0, self._token1: ledger1}
        self.address = address or f"pool:{self._token0}/{self._token1}"
        self.config = config

        self._engine = ConstantProduct(config)
        self._store = ReserveStore()
        self._shares = ShareBook()
        self._events: list[PoolEvent] = []
        self._lock = threading.Lock()
        # Thread id of the operation holding _lock, None when idle
        self._owner: int | None = None

    def __repr__(self) -> str:
        return f"Pool({self._token0!r}, {self._token1!r}, address={self.address!r})"

    # --- Identity and queries ---

    @property
    def token0(self) -> str:
        return self._token0

    @property
    def token1(self) -> str:
        return self._token1

    @property
    def total_supply(self) -> int:
        with self._reading():
            return self._store.total_supply

    @property
    def events(self) -> list[PoolEvent]:
        """Copy of every event emitted so far, oldest first."""
        with self._reading():
            return list(self._events)

    def ledger_for(self, token: str) -> AssetLedger:
        """Ledger of one of the pool's assets.

        Raises:
            InvalidToken: If token is not a pool asset
        """
        self._token_out(token)
        return self._ledgers[token]

    def get_reserves(self) -> tuple[int, int]:
        """Return (reserve0, reserve1)."""
        with self._reading():
            return self._store.reserves

    def get_liquidity_balance(self, participant: str) -> int:
        """Return the shares held by participant (0 if none)."""
        with self._reading():
            return self._shares.balance_of(participant)

    def share_balances(self) -> dict[str, int]:
        """Copy of all non-zero share balances."""
        with self._reading():
            return self._shares.holders()

    def check_invariants(self) -> None:
        """Verify the share book agrees with the recorded supply.

        Raises:
            PoolConsistencyError: If total_supply != sum of share balances,
                or shares are outstanding against an empty reserve
        """
        with self._reading():
            supply = self._store.total_supply
            book_total = self._shares.total()
            if supply != book_total:
                raise PoolConsistencyError(
                    f"Share supply {supply} != sum of balances {book_total}"
                )
            reserve0, reserve1 = self._store.reserves
            if supply > 0 and (reserve0 == 0 or reserve1 == 0):
                raise PoolConsistencyError(
                    f"{supply} shares outstanding against reserves ({reserve0}, {reserve1})"
                )

    # --- Quotes (read-only) ---

    def quote_swap(self, token_in: str, amount_in: int) -> SwapQuote:
        """Price an exact-input swap against current reserves without executing it.

        Raises:
            InvalidToken: If token_in is not a pool asset
            ZeroAmount: If amount_in is 0
            InsufficientOutput: If the swap would yield nothing or drain the pool
        """
        token_out = self._token_out(token_in)
        _require_amount(amount_in, "amount_in")
        with self._reading():
            reserve_in, reserve_out = self._oriented_reserves(token_in)
            return self._engine.quote(token_in, token_out, amount_in, reserve_in, reserve_out)

    def quote_swap_exact_output(self, token_in: str, amount_out: int) -> int:
        """Smallest input of token_in that yields at least amount_out.

        Raises:
            InvalidToken: If token_in is not a pool asset
            InsufficientOutput: If amount_out cannot be taken from the pool
        """
        self._token_out(token_in)
        _require_amount(amount_out, "amount_out")
        with self._reading():
            reserve_in, reserve_out = self._oriented_reserves(token_in)
            return self._engine.get_amount_in(amount_out, reserve_in, reserve_out)

    def quote_remove_liquidity(self, shares: int) -> tuple[int, int]:
        """Assets that redeeming shares would return now.

        Raises:
            ZeroAmount: If shares is 0
            InsufficientBalance: If shares exceeds the total supply
        """
        _require_amount(shares, "shares")
        with self._reading():
            supply = self._store.total_supply
            if shares > supply:
                raise InsufficientBalance(f"Only {supply} shares outstanding, asked {shares}")
            return amounts_for_shares(shares, *self._store.reserves, supply)

    # --- Operations ---

    def add_liquidity(self, caller: str, amount0: int, amount1: int) -> LiquidityAdded:
        """Deposit both assets and mint shares to caller.

        The caller must have approved at least amount0 / amount1 to
        pool.address on the respective ledgers.

        Args:
            caller: Depositing participant
            amount0: Amount of asset0 to deposit
            amount1: Amount of asset1 to deposit

        Returns:
            The LiquidityAdded event

        Raises:
            ZeroAmount: If either amount is 0
            ZeroLiquidityMinted: If the deposit is too small to mint a share
            AllowanceInsufficient: If the caller approved too little
            TransferFailed: If the caller's balance is too low
            PoolLocked: If called from inside another operation on this pool
        """
        _require_amount(amount0, "amount0")
        _require_amount(amount1, "amount1")

        with self._exclusive():
            reserve0, reserve1 = self._store.reserves
            supply = self._store.total_supply

            minted = shares_to_mint(amount0, amount1, reserve0, reserve1, supply)
            if minted == 0:
                logger.warning(
                    "add_liquidity_rejected",
                    reason="zero_liquidity_minted",
                    caller=caller,
                    amount0=amount0,
                    amount1=amount1,
                    total_supply=supply,
                )
                raise ZeroLiquidityMinted(
                    f"Deposit ({amount0}, {amount1}) mints no shares at reserves "
                    f"({reserve0}, {reserve1}) and supply {supply}"
                )
            if not (
                S(reserve0 + amount0).is_uint256()
                and S(reserve1 + amount1).is_uint256()
                and S(supply + minted).is_uint256()
            ):
                raise InvalidAmount(f"Deposit ({amount0}, {amount1}) would overflow the pool")

            self._pull(self._token0, caller, amount0)
            try:
                self._pull(self._token1, caller, amount1)
            except PoolError:
                self._refund(self._token0, caller, amount0)
                raise

            self._store.apply_delta(amount0, amount1)
            self._store.set_supply(supply + minted)
            self._shares.credit(caller, minted)

            event = LiquidityAdded(
                provider=caller,
                amount0=amount0,
                amount1=amount1,
                minted_shares=minted,
            )
            self._events.append(event)

        logger.info(
            "liquidity_added",
            pool=self.address,
            provider=caller,
            amount0=amount0,
            amount1=amount1,
            minted_shares=minted,
        )
        return event

    def remove_liquidity(self, caller: str, shares: int) -> LiquidityRemoved:
        """Burn caller's shares and return the proportional reserves.

        Args:
            caller: Redeeming participant
            shares: Shares to burn

        Returns:
            The LiquidityRemoved event

        Raises:
            ZeroAmount: If shares is 0
            InsufficientBalance: If caller holds fewer than shares
            ZeroOutput: If both returned amounts round down to zero
            PayoutFailed: If the ledger refuses to pay out of the pool
            PoolLocked: If called from inside another operation on this pool
        """
        _require_amount(shares, "shares")

        with self._exclusive():
            balance = self._shares.balance_of(caller)
            if balance < shares:
                logger.warning(
                    "remove_liquidity_rejected",
                    reason="insufficient_balance",
                    caller=caller,
                    shares=shares,
                    balance=balance,
                )
                raise InsufficientBalance(
                    f"Insufficient balance: {caller} holds {balance} shares, needs {shares}"
                )

            supply = self._store.total_supply
            amount0, amount1 = amounts_for_shares(shares, *self._store.reserves, supply)
            if amount0 == 0 and amount1 == 0:
                logger.warning(
                    "remove_liquidity_rejected",
                    reason="zero_output",
                    caller=caller,
                    shares=shares,
                    total_supply=supply,
                )
                raise ZeroOutput(f"Redeeming {shares} of {supply} shares returns nothing")

            snapshot = self._store.snapshot()
            holders = self._shares.holders()
            self._shares.debit(caller, shares)
            self._store.set_supply(supply - shares)
            self._store.apply_delta(-amount0, -amount1)

            try:
                self._pay(self._token0, caller, amount0)
                self._pay(self._token1, caller, amount1)
            except PayoutFailed:
                self._store.restore(snapshot)
                self._shares.restore(holders)
                raise

            event = LiquidityRemoved(provider=caller, amount0=amount0, amount1=amount1)
            self._events.append(event)

        logger.info(
            "liquidity_removed",
            pool=self.address,
            provider=caller,
            shares=shares,
            amount0=amount0,
            amount1=amount1,
        )
        return event

    def swap(
        self,
        caller: str,
        token_in: str,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> Swapped:
        """Sell an exact amount of one asset for the other.

        Args:
            caller: Trader; must have approved amount_in of token_in to pool.address
            token_in: Asset being sold (token0 or token1)
            amount_in: Exact amount sold
            min_amount_out: Reject the trade if it would pay out less (default: 0)

        Returns:
            The Swapped event

        Raises:
            InvalidToken: If token_in is not a pool asset
            ZeroAmount: If amount_in is 0
            AllowanceInsufficient: If the caller approved too little
            TransferFailed: If the caller's balance is too low
            InsufficientOutput: If the output is zero or would drain the pool
            SlippageExceeded: If the output is below min_amount_out
            PayoutFailed: If the ledger refuses to pay out of the pool
            PoolLocked: If called from inside another operation on this pool
        """
        if token_in not in self._ledgers:
            logger.warning(
                "swap_rejected", reason="invalid_token", caller=caller, token_in=token_in
            )
            raise InvalidToken(f"Invalid token: {token_in} is not in {self!r}")
        _require_amount(amount_in, "amount_in")
        _require_uint(min_amount_out, "min_amount_out")
        token_out = self._token_out(token_in)

        with self._exclusive():
            self._pull(token_in, caller, amount_in)

            try:
                reserve_in, reserve_out = self._oriented_reserves(token_in)
                quote = self._engine.quote(token_in, token_out, amount_in, reserve_in, reserve_out)
                if quote.amount_out < min_amount_out:
                    raise SlippageExceeded(
                        f"Swap output {quote.amount_out} below minimum {min_amount_out}"
                    )
                if not S(quote.new_reserve_in).is_uint256():
                    raise InvalidAmount(f"Swap input {amount_in} would overflow the reserve")
            except PoolError as err:
                logger.warning(
                    "swap_rejected",
                    reason=err.kind,
                    caller=caller,
                    token_in=token_in,
                    amount_in=amount_in,
                )
                self._refund(token_in, caller, amount_in)
                raise

            snapshot = self._store.snapshot()
            if token_in == self._token0:
                self._store.apply_delta(amount_in, -quote.amount_out)
            else:
                self._store.apply_delta(-quote.amount_out, amount_in)

            try:
                self._pay(token_out, caller, quote.amount_out)
            except PayoutFailed:
                self._store.restore(snapshot)
                self._refund(token_in, caller, amount_in)
                raise

            event = Swapped(
                trader=caller,
                token_in=token_in,
                amount_in=amount_in,
                amount_out=quote.amount_out,
            )
            self._events.append(event)

        logger.info(
            "swapped",
            pool=self.address,
            trader=caller,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            amount_out=quote.amount_out,
        )
        return event

    # --- Internals ---

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Hold the pool for one operation.

        Raises:
            PoolLocked: If this thread is already inside an operation on the
                pool (a ledger calling back into it)
        """
        thread_id = threading.get_ident()
        if self._owner == thread_id:
            logger.warning("pool_reentry_rejected", pool=self.address)
            raise PoolLocked(f"{self!r} is already running an operation on this thread")
        with self._lock:
            self._owner = thread_id
            try:
                yield
            finally:
                self._owner = None

    @contextmanager
    def _reading(self) -> Iterator[None]:
        """Consistent view for queries; inline when called from inside an operation."""
        if self._owner == threading.get_ident():
            yield
            return
        with self._lock:
            yield

    def _token_out(self, token_in: str) -> str:
        if token_in == self._token0:
            return self._token1
        if token_in == self._token1:
            return self._token0
        raise InvalidToken(f"Invalid token: {token_in} is not in {self!r}")

    def _oriented_reserves(self, token_in: str) -> tuple[int, int]:
        """Reserves ordered as (reserve_in, reserve_out)."""
        reserve0, reserve1 = self._store.reserves
        if token_in == self._token0:
            return reserve0, reserve1
        return reserve1, reserve0

    def _pull(self, token: str, owner: str, amount: int) -> None:
        try:
            self._ledgers[token].transfer_from(self.address, owner, self.address, amount)
        except LedgerError as err:
            logger.warning(
                "transfer_in_rejected",
                asset=token,
                owner=owner,
                amount=amount,
                reason=err.kind,
                detail=str(err),
            )
            raise

    def _pay(self, token: str, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        try:
            self._ledgers[token].transfer(self.address, recipient, amount)
        except (LedgerError, PoolLocked) as err:
            logger.error(
                "payout_failed",
                pool=self.address,
                asset=token,
                recipient=recipient,
                amount=amount,
                detail=str(err),
            )
            raise PayoutFailed(
                f"Pool could not pay {amount} {token} to {recipient}: {err}"
            ) from err

    def _refund(self, token: str, owner: str, amount: int) -> None:
        """Return funds pulled for an operation that was then rejected."""
        self._pay(token, owner, amount)
        logger.debug("transfer_in_refunded", asset=token, owner=owner, amount=amount)


def _require_uint(amount: int, name: str) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"{name} must be an integer, got {type(amount).__name__}")
    if not S(amount).is_uint256():
        raise InvalidAmount(f"{name} out of uint256 range: {amount}")


def _require_amount(amount: int, name: str) -> None:
    _require_uint(amount, name)
    if amount == 0:
        raise ZeroAmount(f"{name} must be positive")
