"""Checked integer wrapper for fixed-point raw values.

This module provides SafeInt, a lightweight wrapper that makes arithmetic
on raw fixed-point integers safe by default:
- Division by zero raises DivideByZero
- Subtraction below zero raises Underflow
- Exceeding a backing width raises Overflow on conversion

Usage pattern:
    from cfmm.safe_int import SafeInt, S

    def scaled_quotient(a: int, b: int, unit: int) -> int:
        # Wrap at entry
        sa, sb = S(a), S(b)

        # Natural arithmetic - automatically safe
        result = (sa * unit) // sb   # Raises if b == 0
        rest = sa - sb               # Raises if b > a

        # Unwrap at exit, checking the backing width
        return result.to_width(128)
"""

from __future__ import annotations


def width_max(bits: int) -> int:
    """Largest unsigned integer representable in ``bits`` bits."""
    return (1 << bits) - 1


class FixedPointError(ArithmeticError):
    """Base class for fixed-point arithmetic errors."""

    pass


class DivideByZero(FixedPointError):
    """Division by a zero raw value."""

    pass


class Underflow(FixedPointError):
    """Subtraction would produce a negative result."""

    pass


class Overflow(FixedPointError):
    """Value exceeds the backing width of its representation."""

    pass


class SafeInt:
    """Integer with safe arithmetic operations.

    Wraps an integer and provides arithmetic operators that raise
    descriptive errors instead of producing invalid results:
    - Division by zero raises DivideByZero
    - Negative results from subtraction raise Underflow
    - Values exceeding a backing width raise Overflow on to_width()

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division.

        Raises:
            DivideByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivideByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds any non-zero remainder up).

        Equivalent to: (self + other - 1) // other for non-negative operands.

        Raises:
            DivideByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivideByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def to_width(self, bits: int) -> int:
        """Convert to int, validating that it fits ``bits`` unsigned bits.

        Raises:
            Overflow: If value is negative or exceeds 2^bits - 1
        """
        if self._value < 0:
            raise Overflow(f"Negative value cannot be unsigned: {self._value}")
        if self._value > width_max(bits):
            raise Overflow(f"Value exceeds {bits}-bit max: {self._value}")
        return self._value

    def fits(self, bits: int) -> bool:
        """Check if value fits ``bits`` unsigned bits without raising."""
        return 0 <= self._value <= width_max(bits)


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
