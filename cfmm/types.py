"""Concrete fixed-point value types used by the pool.

Each type fixes its scale and backing width; see cfmm.constants.
"""

from cfmm.constants import (
    LIQUIDITY_SCALE,
    PERCENTAGE_SCALE,
    PRICE_SCALE,
    RATIO_SCALE,
    TOKEN_AMOUNT_SCALE,
    U64,
    U128,
    U256,
    U512,
)
from cfmm.math.fixed_point import ScaledValue


class TokenAmount(ScaledValue):
    """Smallest indivisible traded unit (scale 0)."""

    SCALE = TOKEN_AMOUNT_SCALE
    BITS = U128
    WIDE_BITS = U256
    __slots__ = ()


class Liquidity(ScaledValue):
    """Liquidity-provider share unit (scale 2)."""

    SCALE = LIQUIDITY_SCALE
    BITS = U128
    WIDE_BITS = U256
    __slots__ = ()


class Price(ScaledValue):
    """Ratio of the Y reserve to the X reserve (scale 24)."""

    SCALE = PRICE_SCALE
    BITS = U256
    WIDE_BITS = U512
    __slots__ = ()


class Percentage(ScaledValue):
    """Fee rate (scale 6). Conceptually in [0, 1]; the type does not enforce it."""

    SCALE = PERCENTAGE_SCALE
    BITS = U64
    WIDE_BITS = U128
    __slots__ = ()


class Ratio(ScaledValue):
    """Dimensionless intermediate for proportional math (scale 9)."""

    # 10^9 * 10^n must stay below 2^128 for the token amounts it divides
    SCALE = RATIO_SCALE
    BITS = U128
    WIDE_BITS = U256
    __slots__ = ()
