"""Tests for serialized access from concurrent callers."""

from concurrent.futures import ThreadPoolExecutor

from cpamm.errors import PoolError
from tests.helpers import approve, deposit, fund, ledgers, make_pool

TRADERS = [f"trader_{i}" for i in range(8)]
SWAPS_PER_TRADER = 50


class TestConcurrentSwaps:
    """Operations from many threads behave like some serial order."""

    def test_concurrent_swaps_keep_custody_consistent(self):
        pool = make_pool(fee_bps=30)
        deposit(pool, "owner", 50_000, 50_000)
        for trader in TRADERS:
            fund(pool, trader, 10**6, 10**6)

        def run(trader: str) -> int:
            completed = 0
            for i in range(SWAPS_PER_TRADER):
                token_in = pool.token0 if i % 2 == 0 else pool.token1
                approve(pool, trader, token_in, 100)
                try:
                    pool.swap(trader, token_in, 100)
                    completed += 1
                except PoolError:
                    pass
            return completed

        with ThreadPoolExecutor(max_workers=len(TRADERS)) as executor:
            completed = sum(executor.map(run, TRADERS))

        ledger0, ledger1 = ledgers(pool)
        assert pool.get_reserves() == (
            ledger0.balance_of(pool.address),
            ledger1.balance_of(pool.address),
        )
        swaps = [e for e in pool.events if e.name == "Swapped"]
        assert len(swaps) == completed
        pool.check_invariants()

    def test_concurrent_deposits_and_withdrawals(self):
        pool = make_pool(funded={})
        providers = [f"lp_{i}" for i in range(6)]
        for provider in providers:
            fund(pool, provider, 10**6, 10**6)

        def run(provider: str) -> None:
            for _ in range(20):
                deposit(pool, provider, 1000, 1000)
                pool.remove_liquidity(provider, pool.get_liquidity_balance(provider) // 2)

        with ThreadPoolExecutor(max_workers=len(providers)) as executor:
            list(executor.map(run, providers))

        assert pool.total_supply == sum(pool.share_balances().values())
        pool.check_invariants()
