"""Wire models for the pool HTTP API."""

from cpamm.models.api import (
    AddLiquidityRequest,
    ApproveRequest,
    ErrorResponse,
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
from cpamm.models.types import Uint256, validate_uint256

__all__ = [
    "AddLiquidityRequest",
    "ApproveRequest",
    "ErrorResponse",
    "LiquidityAddedResponse",
    "LiquidityBalanceResponse",
    "LiquidityRemovedResponse",
    "PoolInfo",
    "QuoteResponse",
    "RemoveLiquidityRequest",
    "ReservesResponse",
    "SwapRequest",
    "SwappedResponse",
    "Uint256",
    "validate_uint256",
]
