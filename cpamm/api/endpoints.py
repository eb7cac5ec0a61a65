"""API endpoints for the liquidity pool."""

import os
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from cpamm.config import PoolConfig
from cpamm.errors import InvalidToken
from cpamm.ledger import InMemoryAssetLedger
from cpamm.models.api import (
    AddLiquidityRequest,
    ApproveRequest,
    LiquidityAddedResponse,
    LiquidityBalanceResponse,
    LiquidityRemovedResponse,
    PoolInfo,
    QuoteResponse,
    RemoveLiquidityRequest,
    ReservesResponse,
    SwappedResponse,
    SwapRequest,
)
from cpamm.pool import Pool

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_pool() -> Pool:
    """Create the process-wide pool backed by in-memory ledgers.

    Assets come from CPAMM_ASSET0 / CPAMM_ASSET1 (default: TK0 / TK1) and the
    fee from CPAMM_FEE_BPS.

    Returns:
        The shared Pool instance
    """
    asset0 = os.environ.get("CPAMM_ASSET0", "TK0")
    asset1 = os.environ.get("CPAMM_ASSET1", "TK1")
    config = PoolConfig.from_env()
    pool = Pool(InMemoryAssetLedger(asset0), InMemoryAssetLedger(asset1), config=config)
    logger.info(
        "pool_created",
        address=pool.address,
        token0=pool.token0,
        token1=pool.token1,
        fee_numerator=config.fee_numerator,
        fee_denominator=config.fee_denominator,
    )
    return pool


def get_pool() -> Pool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a prepared pool:
        app.dependency_overrides[get_pool] = lambda: pool

    Returns:
        The pool to operate on.
    """
    return get_default_pool()


@router.get("/pool")
def pool_info(pool: Pool = Depends(get_pool)) -> PoolInfo:
    """Pool identity, reserves, share supply and fee."""
    reserve0, reserve1 = pool.get_reserves()
    return PoolInfo(
        address=pool.address,
        token0=pool.token0,
        token1=pool.token1,
        reserve0=reserve0,
        reserve1=reserve1,
        total_supply=pool.total_supply,
        fee_numerator=pool.config.fee_numerator,
        fee_denominator=pool.config.fee_denominator,
    )


@router.get("/reserves")
def reserves(pool: Pool = Depends(get_pool)) -> ReservesResponse:
    reserve0, reserve1 = pool.get_reserves()
    return ReservesResponse(reserve0=reserve0, reserve1=reserve1)


@router.get("/liquidity/{participant}")
def liquidity_balance(
    participant: str, pool: Pool = Depends(get_pool)
) -> LiquidityBalanceResponse:
    return LiquidityBalanceResponse(
        participant=participant,
        shares=pool.get_liquidity_balance(participant),
    )


@router.get("/quote")
def quote(
    token_in: str = Query(alias="tokenIn"),
    amount_in: int = Query(alias="amountIn", ge=0),
    pool: Pool = Depends(get_pool),
) -> QuoteResponse:
    """Price an exact-input swap without executing it."""
    result = pool.quote_swap(token_in, amount_in)
    return QuoteResponse(
        token_in=result.token_in,
        token_out=result.token_out,
        amount_in=result.amount_in,
        amount_out=result.amount_out,
    )


# Operations are sync handlers: FastAPI runs them in its threadpool and the
# pool lock serializes them.


@router.post("/liquidity/add")
def add_liquidity(
    request: AddLiquidityRequest, pool: Pool = Depends(get_pool)
) -> LiquidityAddedResponse:
    event = pool.add_liquidity(request.caller, int(request.amount0), int(request.amount1))
    return LiquidityAddedResponse.from_event(event)


@router.post("/liquidity/remove")
def remove_liquidity(
    request: RemoveLiquidityRequest, pool: Pool = Depends(get_pool)
) -> LiquidityRemovedResponse:
    event = pool.remove_liquidity(request.caller, int(request.shares))
    return LiquidityRemovedResponse.from_event(event)


@router.post("/swap")
def swap(request: SwapRequest, pool: Pool = Depends(get_pool)) -> SwappedResponse:
    event = pool.swap(
        request.caller,
        request.token_in,
        int(request.amount_in),
        min_amount_out=int(request.min_amount_out),
    )
    return SwappedResponse.from_event(event)


@router.post("/approve", status_code=204)
def approve(request: ApproveRequest, pool: Pool = Depends(get_pool)) -> None:
    """Set the pool's allowance over owner's balance of asset.

    Only available when the pool runs on in-memory ledgers; real ledgers
    take approvals through their own interface.
    """
    try:
        ledger = pool.ledger_for(request.asset)
    except InvalidToken as err:
        raise HTTPException(status_code=404, detail=str(err)) from err
    if not isinstance(ledger, InMemoryAssetLedger):
        raise HTTPException(status_code=501, detail="Ledger does not accept approvals here")
    ledger.approve(request.owner, pool.address, int(request.amount))
