"""Pydantic models for the pool HTTP API.

Amounts travel as uint256 decimal strings and field names are camelCase on
the wire, snake_case in Python.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from cpamm.events import LiquidityAdded, LiquidityRemoved, Swapped
from cpamm.models.types import Identifier, Uint256


class AddLiquidityRequest(BaseModel):
    """Deposit both pool assets."""

    caller: Identifier
    amount0: Uint256
    amount1: Uint256


class RemoveLiquidityRequest(BaseModel):
    """Redeem liquidity shares."""

    caller: Identifier
    shares: Uint256


class SwapRequest(BaseModel):
    """Sell an exact amount of one pool asset."""

    caller: Identifier
    token_in: Identifier = Field(alias="tokenIn")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(
        default="0",
        alias="minAmountOut",
        description="Reject the swap if it would pay out less than this.",
    )

    model_config = {"populate_by_name": True}


class ApproveRequest(BaseModel):
    """Authorize the pool to pull an asset from owner."""

    owner: Identifier
    asset: Identifier
    amount: Uint256


class ReservesResponse(BaseModel):
    reserve0: Uint256
    reserve1: Uint256


class PoolInfo(BaseModel):
    """Pool identity, state and fee policy."""

    address: str
    token0: str
    token1: str
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")
    fee_numerator: int = Field(alias="feeNumerator")
    fee_denominator: int = Field(alias="feeDenominator")

    model_config = {"populate_by_name": True}


class LiquidityBalanceResponse(BaseModel):
    participant: str
    shares: Uint256


class QuoteResponse(BaseModel):
    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class LiquidityAddedResponse(BaseModel):
    event: str = LiquidityAdded.name
    provider: str
    amount0: Uint256
    amount1: Uint256
    minted_shares: Uint256 = Field(alias="mintedShares")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_event(cls, event: LiquidityAdded) -> LiquidityAddedResponse:
        return cls(
            provider=event.provider,
            amount0=event.amount0,
            amount1=event.amount1,
            minted_shares=event.minted_shares,
        )


class LiquidityRemovedResponse(BaseModel):
    event: str = LiquidityRemoved.name
    provider: str
    amount0: Uint256
    amount1: Uint256

    @classmethod
    def from_event(cls, event: LiquidityRemoved) -> LiquidityRemovedResponse:
        return cls(provider=event.provider, amount0=event.amount0, amount1=event.amount1)


class SwappedResponse(BaseModel):
    event: str = Swapped.name
    trader: str
    token_in: str = Field(alias="tokenIn")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_event(cls, event: Swapped) -> SwappedResponse:
        return cls(
            trader=event.trader,
            token_in=event.token_in,
            amount_in=event.amount_in,
            amount_out=event.amount_out,
        )


class ErrorResponse(BaseModel):
    """Body returned for a rejected pool operation."""

    error: str = Field(description="Failure kind, e.g. InsufficientBalance")
    detail: str
