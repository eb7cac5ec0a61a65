"""Pool constants.

Centralizes fee defaults.
"""

# Fees are expressed as fee_numerator / fee_denominator of the input amount
# Basis points: 30 / 10_000 = 0.3%
FEE_DENOMINATOR = 10_000

# Zero-fee pool by default
DEFAULT_FEE_NUMERATOR = 0
