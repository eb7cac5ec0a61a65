"""Tests for constant-product swap pricing."""

import pytest

from cpamm.config import PoolConfig
from cpamm.errors import InsufficientOutput
from cpamm.safe_int import UINT256_MAX
from cpamm.swap import ConstantProduct


class TestConstantProductMath:
    """Tests for get_amount_out."""

    def test_zero_fee_example(self):
        """500 into (1000, 1000) without fee yields floor(1000 * 500 / 1500)."""
        assert ConstantProduct().get_amount_out(500, 1000, 1000) == 333

    def test_fee_reduces_output(self):
        """A 0.3% fee prices 498 of the 500 input."""
        amm = ConstantProduct(PoolConfig.from_bps(30))
        assert amm.effective_input(500) == 498
        # 1000 * 498 // 1498
        assert amm.get_amount_out(500, 1000, 1000) == 332

    def test_zero_input(self):
        assert ConstantProduct().get_amount_out(0, 100, 100) == 0

    def test_empty_reserves(self):
        amm = ConstantProduct()
        assert amm.get_amount_out(100, 0, 100) == 0
        assert amm.get_amount_out(100, 100, 0) == 0

    def test_output_never_reaches_reserve(self):
        """Even a huge input leaves something in reserve_out."""
        amount_out = ConstantProduct().get_amount_out(UINT256_MAX, 1000, 1000)
        assert amount_out == 999

    def test_large_reserves_do_not_overflow(self):
        """reserve_out * amount_in exceeds uint256 and is still exact."""
        reserve = 2**200
        amount_out = ConstantProduct().get_amount_out(2**200, reserve, reserve)
        assert amount_out == reserve // 2

    @pytest.mark.parametrize("fee_bps", [0, 5, 30, 100])
    @pytest.mark.parametrize(
        "amount_in,reserve_in,reserve_out",
        [(1, 1000, 1000), (500, 1000, 1000), (10**18, 10**20, 3 * 10**9), (7, 3, 11)],
    )
    def test_product_never_decreases(self, fee_bps, amount_in, reserve_in, reserve_out):
        amm = ConstantProduct(PoolConfig.from_bps(fee_bps))
        amount_out = amm.get_amount_out(amount_in, reserve_in, reserve_out)
        before = reserve_in * reserve_out
        after = (reserve_in + amount_in) * (reserve_out - amount_out)
        assert after >= before


class TestGetAmountIn:
    """Tests for exact-output quotes."""

    @pytest.mark.parametrize("fee_bps", [0, 30, 100])
    @pytest.mark.parametrize("amount_out", [1, 100, 333, 900, 999])
    def test_is_smallest_sufficient_input(self, fee_bps, amount_out):
        """get_amount_in is the least input whose output covers amount_out."""
        amm = ConstantProduct(PoolConfig.from_bps(fee_bps))
        amount_in = amm.get_amount_in(amount_out, 1000, 1000)
        assert amm.get_amount_out(amount_in, 1000, 1000) >= amount_out
        assert amm.get_amount_out(amount_in - 1, 1000, 1000) < amount_out

    def test_zero_fee_example(self):
        assert ConstantProduct().get_amount_in(333, 1000, 1000) == 500

    def test_output_equal_to_reserve_raises(self):
        with pytest.raises(InsufficientOutput):
            ConstantProduct().get_amount_in(1000, 1000, 1000)

    def test_zero_output_raises(self):
        with pytest.raises(InsufficientOutput):
            ConstantProduct().get_amount_in(0, 1000, 1000)


class TestQuote:
    """Tests for quote validation."""

    def test_quote(self):
        quote = ConstantProduct().quote("TK0", "TK1", 500, 1000, 1000)
        assert quote.amount_out == 333
        assert quote.new_reserve_in == 1500
        assert quote.new_reserve_out == 667

    def test_zero_output_rejected(self):
        """A trade too small to move one unit out is rejected."""
        with pytest.raises(InsufficientOutput):
            ConstantProduct().quote("TK0", "TK1", 1, 1000, 1000)

    def test_empty_pool_rejected(self):
        with pytest.raises(InsufficientOutput):
            ConstantProduct().quote("TK0", "TK1", 500, 0, 0)
