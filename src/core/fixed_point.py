"""
Fixed-width integer and Q112.112 fixed-point arithmetic.

Everything here is integer-only. Python ints are unbounded, so the fixed
widths of the pool's accumulators are modelled explicitly:
- timestamps live in u32 space and wrap at 2**32,
- cumulative price accumulators live in u256 space and wrap at 2**256,
- prices are unsigned Q112.112 values packed into 224 bits.

Wrapping is expected behaviour for the accumulator and the timestamp, so the
`wrapping_*` helpers never raise. Overflow of a *product* is a caller error
and raises `FixedPointOverflow`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


RESOLUTION = 112
Q112 = 1 << RESOLUTION

UINT32_MOD = 1 << 32
UINT32_MAX = UINT32_MOD - 1
HALF_U32_RANGE = 1 << 31
UINT112_MAX = (1 << 112) - 1
UINT144_MAX = (1 << 144) - 1
UINT224_MAX = (1 << 224) - 1
UINT256_MOD = 1 << 256
UINT256_MAX = UINT256_MOD - 1


class FixedPointOverflow(ArithmeticError):
    """Raised when a fixed-point product does not fit its target width."""


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_uint(name: str, value: int, max_value: int) -> None:
    _require_int(name, value)
    if value < 0 or value > max_value:
        raise ValueError(f"{name} out of range: {value}")


# -- Wrapping arithmetic -----------------------------------------------------

def to_u32(value: int) -> int:
    """Reduce a non-negative timestamp into u32 space (``value mod 2**32``)."""
    _require_int("value", value)
    if value < 0:
        raise ValueError(f"timestamp must be non-negative: {value}")
    return value & UINT32_MAX


def wrapping_sub_u32(a: int, b: int) -> int:
    """``(a - b) mod 2**32``."""
    _require_int("a", a)
    _require_int("b", b)
    return (a - b) & UINT32_MAX


def is_at_or_after_u32(a: int, b: int) -> bool:
    """True when u32 timestamp ``a`` is not earlier than ``b`` (within half the u32 range)."""
    return wrapping_sub_u32(a, b) < HALF_U32_RANGE


def wrapping_sub_u256(a: int, b: int) -> int:
    """``(a - b) mod 2**256``."""
    _require_int("a", a)
    _require_int("b", b)
    return (a - b) & UINT256_MAX


def wrapping_add_u256(a: int, b: int) -> int:
    """``(a + b) mod 2**256``."""
    _require_int("a", a)
    _require_int("b", b)
    return (a + b) & UINT256_MAX


# -- Roots / division --------------------------------------------------------

def isqrt(value: int) -> int:
    """Floor square root of a non-negative int (exact, no float)."""
    _require_int("value", value)
    if value < 0:
        raise ValueError(f"isqrt of negative value: {value}")
    return math.isqrt(value)


def fdiv(numerator: int, denominator: int) -> int:
    """Fixed-point division: ``numerator * 2**112 // denominator``."""
    _require_int("numerator", numerator)
    _require_int("denominator", denominator)
    if denominator <= 0:
        raise ZeroDivisionError("fdiv denominator must be positive")
    if numerator < 0:
        raise ValueError(f"numerator must be non-negative: {numerator}")
    return (numerator * Q112) // denominator


# -- Fixed-point types -------------------------------------------------------

@dataclass(frozen=True)
class UQ144x112:
    """Unsigned Q144.112 product, held in 256 bits."""

    raw: int = 0

    def __post_init__(self) -> None:
        _require_uint("raw", self.raw, UINT256_MAX)

    def decode144(self) -> int:
        """Integer part of the product (fits in 144 bits)."""
        return self.raw >> RESOLUTION


@dataclass(frozen=True)
class UQ112x112:
    """Unsigned Q112.112 value: 112 integer bits and 112 fractional bits."""

    raw: int = 0

    def __post_init__(self) -> None:
        _require_uint("raw", self.raw, UINT224_MAX)

    @classmethod
    def encode(cls, value: int) -> "UQ112x112":
        _require_uint("value", value, UINT112_MAX)
        return cls(value << RESOLUTION)

    @classmethod
    def fraction(cls, numerator: int, denominator: int) -> "UQ112x112":
        """``numerator / denominator`` for u112 operands."""
        _require_uint("numerator", numerator, UINT112_MAX)
        _require_uint("denominator", denominator, UINT112_MAX)
        if denominator == 0:
            raise ZeroDivisionError("fraction denominator must be non-zero")
        return cls((numerator << RESOLUTION) // denominator)

    @classmethod
    def from_truncated(cls, value: int) -> "UQ112x112":
        """Reinterpret the low 224 bits of a non-negative int as Q112.112."""
        _require_int("value", value)
        if value < 0:
            raise ValueError(f"value must be non-negative: {value}")
        return cls(value & UINT224_MAX)

    def mul(self, y: int) -> UQ144x112:
        """Multiply by an unsigned integer; the product must fit in 256 bits."""
        _require_int("y", y)
        if y < 0:
            raise ValueError(f"multiplier must be non-negative: {y}")
        z = self.raw * y
        if z > UINT256_MAX:
            raise FixedPointOverflow("mul overflow: product exceeds 256 bits")
        return UQ144x112(z)

    def decode(self) -> int:
        return self.raw >> RESOLUTION

    @property
    def is_zero(self) -> bool:
        return self.raw == 0
