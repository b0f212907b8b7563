"""Deterministic fixed-point constant product pool core."""

from cfmm.amm import (
    AmmError,
    ConstantProductPool,
    EmptyPoolError,
    InvalidWithdrawal,
    LiquidityChange,
    SwapResult,
)
from cfmm.config import DEFAULT_POOL_CONFIG, PoolConfig, load_config_from_env
from cfmm.safe_int import DivideByZero, FixedPointError, Overflow, Underflow
from cfmm.types import Liquidity, Percentage, Price, Ratio, TokenAmount

__version__ = "0.1.0"
__all__ = [
    # Pool
    "ConstantProductPool",
    "LiquidityChange",
    "SwapResult",
    # Values
    "Liquidity",
    "Percentage",
    "Price",
    "Ratio",
    "TokenAmount",
    # Configuration
    "DEFAULT_POOL_CONFIG",
    "PoolConfig",
    "load_config_from_env",
    # Errors
    "AmmError",
    "DivideByZero",
    "EmptyPoolError",
    "FixedPointError",
    "InvalidWithdrawal",
    "Overflow",
    "Underflow",
    "__version__",
]
