"""Pool error classes.

Arithmetic failures (DivideByZero, Underflow, Overflow) live in
cfmm.safe_int; these errors cover pool-level rejections.
"""


class AmmError(Exception):
    """Base error for pool operations."""

    pass


class InvalidWithdrawal(AmmError):
    """Withdrawal of 100% or more of a reserve, more liquidity than exists,
    or an amount too small to register at Ratio precision."""

    pass


class EmptyPoolError(AmmError):
    """Operation requires an active pool (non-zero reserves)."""

    pass
