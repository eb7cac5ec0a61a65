"""FastAPI application exposing the liquidity pool.

Note: Caller identity is taken from the request body as-is. Authentication
belongs to the infrastructure in front of this service.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import router
from cpamm.errors import (
    InsufficientBalance,
    InvalidAmount,
    InvalidToken,
    LedgerError,
    PoolConsistencyError,
    PoolError,
    PoolLocked,
)

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPAMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("CPAMM_PORT", "8000"))
DEBUG = os.environ.get("CPAMM_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="cpamm",
    description="Constant-product AMM liquidity pool",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            size = int(content_length)
        except ValueError:
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length"})
        if size > MAX_REQUEST_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


def status_for(error: PoolError) -> int:
    """HTTP status for a rejected pool operation."""
    if isinstance(error, PoolConsistencyError):
        return 500
    if isinstance(error, (InvalidToken, InvalidAmount)):
        return 422
    if isinstance(error, (InsufficientBalance, LedgerError, PoolLocked)):
        return 409
    return 400


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "pool_operation_rejected",
        path=request.url.path,
        error=exc.kind,
        detail=str(exc),
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content={"error": exc.kind, "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug/reload mode (default: false)
    - CPAMM_ASSET0 / CPAMM_ASSET1: Pool asset ids (default: TK0 / TK1)
    - CPAMM_FEE_BPS: Swap fee in basis points (default: 0)
    """
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
