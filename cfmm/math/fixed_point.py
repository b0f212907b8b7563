"""Scaled decimal fixed-point math.

This module implements the fixed-point value family used by the pool and
the conversion engine that combines values of different scales. A value of
scale S is a non-negative integer count of 10^-S units, stored in an
unsigned integer of a fixed backing width.

All arithmetic is integer-only. Products are formed exactly in a wide
intermediate (``Wide``) and then rescaled once, with the rounding direction
chosen explicitly by the caller:

    >>> from cfmm.types import Ratio, TokenAmount
    >>> ratio = divide_down(TokenAmount(10), TokenAmount(100), into=Ratio)
    >>> mul_up(TokenAmount(7), Ratio.one() + ratio)
    TokenAmount(8)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import ClassVar, TypeVar, Union

from cfmm.constants import U128, U256
from cfmm.safe_int import DivideByZero, Overflow, S, SafeInt, width_max

__all__ = [
    # Classes
    "ScaledValue",
    "Wide",
    # Engine
    "wide_multiply",
    "rescale_down",
    "rescale_up",
    "divide_down",
    "divide_up",
    "mul_down",
    "mul_up",
]

V = TypeVar("V", bound="ScaledValue")


# =============================================================================
# Wide intermediate
# =============================================================================


@dataclass(frozen=True)
class Wide:
    """Exact intermediate product of two scaled values.

    Attributes:
        value: Raw integer at ``scale``
        scale: Sum of the operand scales
        bits: Width the raw integer is bounded by
    """

    value: int
    scale: int
    bits: int


# =============================================================================
# ScaledValue base class
# =============================================================================


class ScaledValue:
    """Non-negative fixed-point number with a static scale.

    Subclasses set SCALE (fractional digits), BITS (backing width of the raw
    integer) and WIDE_BITS (width of intermediates the type takes part in).
    Example: a Liquidity of 1.5 at scale 2 is stored as 150.

    Values are immutable. Comparison is only defined between values of the
    same type and works on the raw integers; there is no implicit rescale.
    """

    SCALE: ClassVar[int] = 0
    BITS: ClassVar[int] = U128
    WIDE_BITS: ClassVar[int] = U256
    ONE: ClassVar[int] = 1

    __slots__ = ("_value",)
    _value: int

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.ONE = 10**cls.SCALE

    def __init__(self, value: int | SafeInt) -> None:
        """Create from a raw value (already scaled by 10^SCALE).

        Raises:
            Overflow: If value is negative or does not fit BITS
        """
        self._value = S(value).to_width(self.BITS)

    @property
    def value(self) -> int:
        """The raw backing integer."""
        return self._value

    @property
    def scale(self) -> int:
        return self.SCALE

    # --- Construction ---

    @classmethod
    def from_integer(cls: type[V], n: int) -> V:
        """Create from a whole number (will be scaled by 10^SCALE)."""
        return cls(S(n) * cls.ONE)

    @classmethod
    def from_scale(cls: type[V], value: int, scale: int) -> V:
        """Create from ``value * 10^-scale``, truncating excess digits.

        Example: Percentage.from_scale(1, 2) is 1% (raw 10000 at scale 6).
        """
        return rescale_down(Wide(value, scale, cls.WIDE_BITS), cls)

    @classmethod
    def from_decimal(cls: type[V], other: ScaledValue | Wide) -> V:
        """Rescale a value of any scale to this type, rounding down."""
        return rescale_down(other, cls)

    @classmethod
    def from_decimal_up(cls: type[V], other: ScaledValue | Wide) -> V:
        """Rescale a value of any scale to this type, rounding up."""
        return rescale_up(other, cls)

    @classmethod
    def from_str(cls: type[V], text: str) -> V:
        """Parse a decimal string exactly.

        Raises:
            ValueError: If the text is not a non-negative decimal number,
                carries more fractional digits than SCALE, or has an exponent
                far beyond the backing width
        """
        try:
            parsed = Decimal(text.strip())
        except InvalidOperation as err:
            raise ValueError(f"{cls.__name__} must be a decimal string: '{text}'") from err
        if not parsed.is_finite():
            raise ValueError(f"{cls.__name__} must be finite, got '{text}'")
        sign, digits, exponent = parsed.as_tuple()
        if sign and any(digits):
            raise ValueError(f"{cls.__name__} requires non-negative input, got '{text}'")
        coefficient = int("".join(map(str, digits)) or "0")
        if coefficient == 0:
            return cls(0)
        shift = int(exponent) + cls.SCALE
        if shift >= 0:
            if shift > len(str(width_max(cls.BITS))):
                raise ValueError(f"{cls.__name__} is out of range: '{text}'")
            return cls(coefficient * 10**shift)
        if -shift > len(digits):
            raise ValueError(f"{cls.__name__} carries at most {cls.SCALE} decimals, got '{text}'")
        unit = 10**-shift
        if coefficient % unit:
            raise ValueError(f"{cls.__name__} carries at most {cls.SCALE} decimals, got '{text}'")
        return cls(coefficient // unit)

    @classmethod
    def zero(cls: type[V]) -> V:
        return cls(0)

    @classmethod
    def one(cls: type[V]) -> V:
        return cls(cls.ONE)

    @classmethod
    def max(cls: type[V]) -> V:
        """Largest representable value."""
        return cls((1 << cls.BITS) - 1)

    def is_zero(self) -> bool:
        return self._value == 0

    # --- Same-type arithmetic ---

    def checked_add(self: V, other: V) -> V:
        """Add a value of the same type.

        Raises:
            Overflow: If the sum does not fit BITS
        """
        self._require_same_type(other)
        return type(self)(S(self._value) + other._value)

    def checked_sub(self: V, other: V) -> V:
        """Subtract a value of the same type.

        Raises:
            Underflow: If other is larger than self
        """
        self._require_same_type(other)
        return type(self)(S(self._value) - other._value)

    def __add__(self: V, other: V) -> V:
        if type(other) is not type(self):
            return NotImplemented
        return self.checked_add(other)

    def __sub__(self: V, other: V) -> V:
        if type(other) is not type(self):
            return NotImplemented
        return self.checked_sub(other)

    # --- Cross-scale arithmetic (see module-level engine) ---

    def mul_down(self: V, other: ScaledValue, into: type[ScaledValue] | None = None) -> ScaledValue:
        """self * other rounded down, at the scale of ``into`` (default: self)."""
        return mul_down(self, other, into)

    def mul_up(self: V, other: ScaledValue, into: type[ScaledValue] | None = None) -> ScaledValue:
        """self * other rounded up, at the scale of ``into`` (default: self)."""
        return mul_up(self, other, into)

    def div_down(self: V, other: ScaledValue, into: type[ScaledValue] | None = None) -> ScaledValue:
        """self / other rounded down, at the scale of ``into`` (default: self)."""
        return divide_down(self, other, into)

    def div_up(self: V, other: ScaledValue, into: type[ScaledValue] | None = None) -> ScaledValue:
        """self / other rounded up, at the scale of ``into`` (default: self)."""
        return divide_up(self, other, into)

    # --- Comparison ---

    def _require_same_type(self, other: object) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot combine {type(self).__name__} with {type(other).__name__} "
                "without an explicit rescale"
            )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value  # type: ignore[attr-defined]

    def __lt__(self: V, other: V) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value < other._value

    def __le__(self: V, other: V) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value <= other._value

    def __gt__(self: V, other: V) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value > other._value

    def __ge__(self: V, other: V) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value >= other._value

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return Decimal(f"{self._value}e-{self.SCALE}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"

    def __str__(self) -> str:
        return str(self.to_decimal())


Operand = Union[ScaledValue, Wide]


# =============================================================================
# Conversion engine
# =============================================================================


def _intermediate_bits(*operands: Operand | type[ScaledValue]) -> int:
    bits = 0
    for operand in operands:
        if isinstance(operand, Wide):
            bits = max(bits, operand.bits)
        else:
            bits = max(bits, operand.WIDE_BITS)
    return bits


def _result_type(a: Operand, into: type[V] | None) -> type[ScaledValue]:
    if into is not None:
        return into
    if isinstance(a, Wide):
        raise ValueError("A target type is required when the left operand is a Wide intermediate")
    return type(a)


def wide_multiply(a: Operand, b: Operand) -> Wide:
    """Exact product of two values at scale ``Sa + Sb``.

    Raises:
        Overflow: If the product exceeds the wider operand intermediate width
    """
    bits = _intermediate_bits(a, b)
    product = (S(a.value) * b.value).to_width(bits)
    return Wide(product, a.scale + b.scale, bits)


def rescale_down(v: Operand, target: type[V]) -> V:
    """Rescale to ``target``'s scale, truncating excess fractional digits.

    Raises:
        Overflow: If the result does not fit the target backing width
    """
    diff = target.SCALE - v.scale
    if diff >= 0:
        return target(S(v.value) * 10**diff)
    return target(S(v.value) // 10**-diff)


def rescale_up(v: Operand, target: type[V]) -> V:
    """Rescale to ``target``'s scale, rounding any non-zero remainder up.

    Raises:
        Overflow: If the result does not fit the target backing width
    """
    diff = target.SCALE - v.scale
    if diff >= 0:
        return target(S(v.value) * 10**diff)
    return target(S(v.value).ceiling_div(10**-diff))


def _division_terms(
    a: Operand, b: ScaledValue, target: type[ScaledValue]
) -> tuple[SafeInt, SafeInt]:
    if b.value == 0:
        raise DivideByZero(f"Division by zero: {a.value} / {type(b).__name__}(0)")
    bits = _intermediate_bits(a, b, target)
    shift = target.SCALE - a.scale + b.scale
    numerator = S(a.value)
    denominator = S(b.value)
    if shift >= 0:
        numerator = numerator * 10**shift
    else:
        denominator = denominator * 10**-shift
    if not (numerator.fits(bits) and denominator.fits(bits)):
        raise Overflow(f"Division terms exceed {bits}-bit intermediate: {a.value} / {b.value}")
    return numerator, denominator


def divide_down(a: Operand, b: ScaledValue, into: type[V] | None = None) -> V:
    """Floor of ``a / b`` at the scale of ``into`` (default: type of ``a``).

    Raises:
        DivideByZero: If b is zero
        Overflow: If an intermediate or the result exceeds its width
    """
    target = _result_type(a, into)
    numerator, denominator = _division_terms(a, b, target)
    return target(numerator // denominator)  # type: ignore[return-value]


def divide_up(a: Operand, b: ScaledValue, into: type[V] | None = None) -> V:
    """Ceiling of ``a / b`` at the scale of ``into`` (default: type of ``a``).

    Raises:
        DivideByZero: If b is zero
        Overflow: If an intermediate or the result exceeds its width
    """
    target = _result_type(a, into)
    numerator, denominator = _division_terms(a, b, target)
    return target(numerator.ceiling_div(denominator))  # type: ignore[return-value]


def mul_down(a: Operand, b: Operand, into: type[V] | None = None) -> V:
    """``a * b`` rescaled to ``into`` (default: type of ``a``), rounding down."""
    return rescale_down(wide_multiply(a, b), _result_type(a, into))  # type: ignore[return-value]


def mul_up(a: Operand, b: Operand, into: type[V] | None = None) -> V:
    """``a * b`` rescaled to ``into`` (default: type of ``a``), rounding up."""
    return rescale_up(wide_multiply(a, b), _result_type(a, into))  # type: ignore[return-value]
