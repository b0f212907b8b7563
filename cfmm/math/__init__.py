"""Mathematical utilities for the pool core.

This package provides the fixed-point primitives for pool calculations:
- ScaledValue: base class of the scaled decimal value family
- The conversion engine (wide_multiply, rescale_*, divide_*, mul_*)
"""

from cfmm.math.fixed_point import (
    ScaledValue,
    Wide,
    divide_down,
    divide_up,
    mul_down,
    mul_up,
    rescale_down,
    rescale_up,
    wide_multiply,
)

__all__ = [
    "ScaledValue",
    "Wide",
    "wide_multiply",
    "rescale_down",
    "rescale_up",
    "divide_down",
    "divide_up",
    "mul_down",
    "mul_up",
]
