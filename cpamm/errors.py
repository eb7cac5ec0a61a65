"""Pool error classes.

Every failure aborts the whole operation and leaves the pool unchanged.
The class name is the failure kind reported to callers.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    @property
    def kind(self) -> str:
        """Stable failure identifier (the class name)."""
        return type(self).__name__


class IdenticalAssets(PoolError):
    """A pool needs two distinct assets."""

    pass


class InvalidToken(PoolError):
    """Asset is not one of the pool's two assets."""

    pass


class InvalidAmount(PoolError):
    """Amount is not an integer in the uint256 range."""

    pass


class ZeroAmount(InvalidAmount):
    """Amount must be positive."""

    pass


class ZeroLiquidityMinted(PoolError):
    """Deposit is too small to mint any shares."""

    pass


class ZeroOutput(PoolError):
    """Withdrawal is too small to return any assets."""

    pass


class InsufficientBalance(PoolError):
    """Withdrawal exceeds the caller's share balance."""

    pass


class InsufficientOutput(PoolError):
    """Swap output is zero or would drain the output reserve."""

    pass


class SlippageExceeded(PoolError):
    """Swap output is below the caller's minimum."""

    pass


class PoolLocked(PoolError):
    """An operation was started from inside another operation on the same pool."""

    pass


class LedgerError(PoolError):
    """The asset ledger rejected a transfer."""

    pass


class AllowanceInsufficient(LedgerError):
    """Owner authorized less than the requested amount."""

    pass


class TransferFailed(LedgerError):
    """Sender balance is too low for the transfer."""

    pass


class PoolConsistencyError(PoolError):
    """Internal accounting no longer matches custody. Fatal."""

    pass


class ReserveUnderflow(PoolConsistencyError):
    """A reserve or the share supply would go negative."""

    pass


class ReserveOverflow(PoolConsistencyError):
    """A reserve would exceed uint256."""

    pass


class PayoutFailed(PoolConsistencyError):
    """The ledger refused to pay out of the pool's own balance."""

    pass
