"""AMM (Automated Market Maker) implementations."""

from cfmm.amm.base import LiquidityChange, SwapResult
from cfmm.amm.constant_product import ConstantProductPool
from cfmm.amm.errors import AmmError, EmptyPoolError, InvalidWithdrawal

__all__ = [
    # Pool
    "ConstantProductPool",
    # Results
    "LiquidityChange",
    "SwapResult",
    # Errors
    "AmmError",
    "EmptyPoolError",
    "InvalidWithdrawal",
]
