"""Shared test constants: asset ids, accounts and common amounts."""

# Pool assets
TOKEN0 = "TK0"
TOKEN1 = "TK1"

# An asset the pool does not trade
UNRELATED = "0x0000000000000000000000000000000000000000"

# Accounts
OWNER = "owner"
OTHER = "other_account"

# Initial funding minted to OWNER on both ledgers
INITIAL_BALANCE = 100_000
