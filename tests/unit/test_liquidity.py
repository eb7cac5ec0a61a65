"""Tests for liquidity share math and the share book."""

import pytest

from cpamm.errors import InsufficientBalance, ReserveUnderflow
from cpamm.liquidity import ShareBook, amounts_for_shares, shares_to_mint
from cpamm.safe_int import UINT256_MAX, DivisionByZero


class TestSharesToMint:
    """Tests for shares minted on deposit."""

    def test_first_deposit_is_geometric_mean(self):
        """Depositing 1000/1000 into an empty pool mints sqrt(1000 * 1000)."""
        assert shares_to_mint(1000, 1000, 0, 0, 0) == 1000

    def test_first_deposit_rounds_down(self):
        # sqrt(2 * 1000) = 44.72...
        assert shares_to_mint(2, 1000, 0, 0, 0) == 44

    def test_first_deposit_dust_mints_zero(self):
        """A deposit whose product is below 1 share mints nothing."""
        assert shares_to_mint(1, 0, 0, 0, 0) == 0

    def test_first_deposit_at_uint256_max(self):
        """The product is computed without overflow."""
        assert shares_to_mint(UINT256_MAX, UINT256_MAX, 0, 0, 0) == UINT256_MAX

    def test_proportional_deposit(self):
        """Matching the reserve ratio mints shares pro rata."""
        assert shares_to_mint(500, 1000, 1000, 2000, 1414) == 707

    def test_unbalanced_deposit_uses_smaller_side(self):
        """Excess on one side earns nothing."""
        # asset0 side: 1000 * 1000 // 1000 = 1000; asset1 side: 10 * 1000 // 1000 = 10
        assert shares_to_mint(1000, 10, 1000, 1000, 1000) == 10

    def test_later_dust_deposit_mints_zero(self):
        assert shares_to_mint(1, 1, 10**6, 10**6, 1) == 0

    def test_empty_reserve_with_supply_raises(self):
        with pytest.raises(ReserveUnderflow):
            shares_to_mint(100, 100, 0, 100, 100)


class TestAmountsForShares:
    """Tests for assets returned on redemption."""

    def test_full_redemption_returns_reserves(self):
        assert amounts_for_shares(1000, 1500, 667, 1000) == (1500, 667)

    def test_partial_redemption_rounds_down(self):
        # 1 * 1500 // 1000 = 1, 1 * 667 // 1000 = 0
        assert amounts_for_shares(1, 1500, 667, 1000) == (1, 0)

    def test_tiny_redemption_returns_zero(self):
        assert amounts_for_shares(1, 10, 10, 1000) == (0, 0)

    def test_zero_supply_raises(self):
        with pytest.raises(DivisionByZero):
            amounts_for_shares(1, 10, 10, 0)


class TestShareBook:
    """Tests for per-participant balances."""

    def test_unknown_participant_has_zero(self):
        assert ShareBook().balance_of("nobody") == 0

    def test_credit_and_debit(self):
        book = ShareBook()
        book.credit("alice", 100)
        book.credit("alice", 50)
        book.debit("alice", 30)
        assert book.balance_of("alice") == 120
        assert book.total() == 120

    def test_zero_balance_is_removed(self):
        """Participants drop out of the book when they hold nothing."""
        book = ShareBook()
        book.credit("alice", 100)
        book.debit("alice", 100)
        assert "alice" not in book
        assert len(book) == 0
        assert book.holders() == {}

    def test_debit_more_than_balance_raises(self):
        book = ShareBook()
        book.credit("alice", 10)
        with pytest.raises(InsufficientBalance):
            book.debit("alice", 11)
        assert book.balance_of("alice") == 10

    def test_debit_unknown_participant_raises(self):
        with pytest.raises(InsufficientBalance):
            ShareBook().debit("bob", 1)

    def test_restore(self):
        book = ShareBook()
        book.credit("alice", 10)
        saved = book.holders()
        book.credit("bob", 5)
        book.restore(saved)
        assert book.holders() == {"alice": 10}

    def test_holders_is_a_copy(self):
        book = ShareBook()
        book.credit("alice", 10)
        book.holders()["alice"] = 0
        assert book.balance_of("alice") == 10
