"""Shared type definitions for serialized pool values.

Fixed-point values are serialized as their raw backing integer alone, as a
decimal string. The scale is reconstructed from the receiving type.
"""

from typing import Annotated, Any, Callable

from pydantic import BeforeValidator, Field

from cfmm.constants import U64, U128
from cfmm.safe_int import width_max


def raw_uint_validator(bits: int) -> Callable[[Any], str]:
    """Build a validator for a raw unsigned integer of ``bits`` bits.

    The returned callable accepts an int or a decimal string and returns
    the decimal string.
    """

    def validate(value: Any) -> str:
        # Accept int directly
        if isinstance(value, int) and not isinstance(value, bool):
            int_value = value
        elif isinstance(value, str):
            try:
                int_value = int(value)
            except ValueError as err:
                raise ValueError(f"Raw value must be a decimal integer string: '{value}'") from err
        else:
            raise ValueError(f"Raw value must be string or int, got {type(value).__name__}")

        if int_value < 0:
            raise ValueError(f"Raw value cannot be negative: {value}")
        if int_value > width_max(bits):
            raise ValueError(f"Raw value overflow: {value} > 2^{bits}-1")
        return str(int_value)

    return validate


# 128-bit raw value (TokenAmount, Liquidity) as decimal string
RawU128 = Annotated[
    str,
    BeforeValidator(raw_uint_validator(U128)),
    Field(description="128-bit unsigned raw value as decimal string"),
]

# 64-bit raw value (Percentage) as decimal string
RawU64 = Annotated[
    str,
    BeforeValidator(raw_uint_validator(U64)),
    Field(description="64-bit unsigned raw value as decimal string"),
]
