"""Numeric constants for the pool core.

Centralizes the fixed-point scales and backing widths of every value type.
"""

# Fractional digits carried by each value type
TOKEN_AMOUNT_SCALE = 0
LIQUIDITY_SCALE = 2
PRICE_SCALE = 24
PERCENTAGE_SCALE = 6
RATIO_SCALE = 9

# Backing widths (bits) of the raw integers
U64 = 64
U128 = 128
U256 = 256
U512 = 512

# Default swap fee as raw Percentage (3000 = 0.3%)
DEFAULT_FEE_RAW = 3_000
