"""Test helpers module for shared test utilities.

- constants: Asset ids, accounts and common amounts
- factories: Pool construction and approve-then-act shortcuts
"""

from tests.helpers.constants import INITIAL_BALANCE, OTHER, OWNER, TOKEN0, TOKEN1, UNRELATED
from tests.helpers.factories import approve, deposit, fund, ledgers, make_pool, trade

__all__ = [
    # Constants
    "TOKEN0",
    "TOKEN1",
    "UNRELATED",
    "OWNER",
    "OTHER",
    "INITIAL_BALANCE",
    # Factories
    "make_pool",
    "ledgers",
    "fund",
    "approve",
    "deposit",
    "trade",
]
