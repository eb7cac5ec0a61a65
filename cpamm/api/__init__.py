"""HTTP API for the liquidity pool."""
