"""Immutable double-precision complex number.

Equality and hashing use the exact bit pattern of both parts, so values can be
used as dictionary keys and ``0.0``/``-0.0`` stay distinguishable. Use
:meth:`Complex.is_zero` for the numeric "exactly zero" test.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from numbers import Real
from typing import Union

import numpy as np

Number = Union["Complex", complex, float, int]


def _ieee_div(a: float, b: float) -> float:
    # Python floats raise on x / 0.0, numpy follows IEEE 754.
    if b == 0.0:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(a) / np.float64(b))
    return a / b


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


@dataclass(frozen=True, eq=False)
class Complex:
    re: float
    im: float = 0.0

    def __post_init__(self):
        if type(self.re) is not float:
            object.__setattr__(self, "re", float(self.re))
        if type(self.im) is not float:
            object.__setattr__(self, "im", float(self.im))

    @classmethod
    def of(cls, value: Number) -> "Complex":
        if isinstance(value, Complex):
            return value
        if isinstance(value, complex):
            return cls(float(value.real), float(value.imag))
        if isinstance(value, Real):
            return cls(float(value), 0.0)
        raise TypeError(f"cannot convert {type(value).__name__} to Complex")

    @classmethod
    def from_polar(cls, magnitude: float, angle: float) -> "Complex":
        return cls(magnitude * math.cos(angle), magnitude * math.sin(angle))

    # -- arithmetic -------------------------------------------------------

    def __add__(self, op):
        if isinstance(op, Complex):
            return Complex(self.re + op.re, self.im + op.im)
        if isinstance(op, Real):
            return Complex(self.re + op, self.im)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, op):
        if isinstance(op, Complex):
            return Complex(self.re - op.re, self.im - op.im)
        if isinstance(op, Real):
            return Complex(self.re - op, self.im)
        return NotImplemented

    def __rsub__(self, op):
        if isinstance(op, Real):
            return Complex(op - self.re, -self.im)
        return NotImplemented

    def __mul__(self, op):
        if isinstance(op, Complex):
            return Complex(self.re * op.re - self.im * op.im,
                           self.re * op.im + self.im * op.re)
        if isinstance(op, Real):
            return Complex(self.re * op, self.im * op)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, op):
        if isinstance(op, Complex):
            num = self * op.conjugate()
            denom = op.re * op.re + op.im * op.im
            return Complex(_ieee_div(num.re, denom), _ieee_div(num.im, denom))
        if isinstance(op, Real):
            return Complex(_ieee_div(self.re, float(op)), _ieee_div(self.im, float(op)))
        return NotImplemented

    def __rtruediv__(self, op):
        if isinstance(op, Real):
            return Complex(float(op)) / self
        return NotImplemented

    def __neg__(self) -> "Complex":
        return Complex(-self.re, -self.im)

    def __abs__(self) -> float:
        return math.hypot(self.re, self.im)

    def __pow__(self, x):
        if isinstance(x, Real):
            return self.pow(float(x))
        return NotImplemented

    # -- polar helpers ------------------------------------------------------

    def theta(self) -> float:
        """Argument in (-pi, pi], ``atan2(im, re)``."""
        return math.atan2(self.im, self.re)

    def conjugate(self) -> "Complex":
        return Complex(self.re, -self.im)

    def pow(self, x: float) -> "Complex":
        """Raise to a real power through the polar form ``exp(x log r) cis(x arg)``."""
        modulus = abs(self)
        if modulus == 0.0:
            if x > 0:
                return ZERO
            if x == 0:
                return ONE
            return Complex(math.inf, 0.0)
        return Complex.from_polar(_exp(x * math.log(modulus)), x * self.theta())

    def integer_root(self, k: int) -> "Complex":
        """Return the k-th root with the smallest non-negative argument.

        ``k == 0`` gives 1 and a negative ``k`` gives ``1 / integer_root(-k)``.
        """
        neg = k < 0
        k = abs(k)
        if k == 0:
            a, b = 1.0, 0.0
        elif k == 1:
            a, b = self.re, self.im
        else:
            angle = self.theta()
            if angle < 0:
                angle += 2 * math.pi
            root = Complex.from_polar(abs(self) ** (1.0 / k), angle / k)
            a, b = root.re, root.im
        if neg:
            denom = a * a + b * b
            a, b = _ieee_div(a, denom), _ieee_div(-b, denom)
        return Complex(a, b)

    def sqrt(self) -> "Complex":
        return self.integer_root(2)

    # -- predicates ---------------------------------------------------------

    def is_zero(self) -> bool:
        return self.re == 0.0 and self.im == 0.0

    def is_real(self) -> bool:
        return self.im == 0.0

    def is_finite(self) -> bool:
        return math.isfinite(self.re) and math.isfinite(self.im)

    # -- identity -------------------------------------------------------------

    def _bits(self) -> bytes:
        return struct.pack("<dd", self.re, self.im)

    def __eq__(self, other) -> bool:
        # only other Complex values; wrap scalars with Complex.of first
        if not isinstance(other, Complex):
            return NotImplemented
        return self._bits() == other._bits()

    def __hash__(self) -> int:
        return hash(self._bits())

    def __complex__(self) -> complex:
        return complex(self.re, self.im)

    def __str__(self) -> str:
        if self.re == 0:
            if self.im == 0:
                return "0"
            return f"{self.im}i"
        if self.im == 0:
            return str(self.re)
        if self.im < 0:
            return f"{self.re} - {abs(self.im)}i"
        return f"{self.re} + {self.im}i"


ZERO = Complex(0.0, 0.0)
ONE = Complex(1.0, 0.0)
