"""Equations of a single complex variable."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Tuple

from rootfractal.numeric.complex_number import ONE, ZERO, Complex, Number


class Equation:
    """Something that can evaluate f(x) and, on request, f'(x).

    ``str()`` is expected to give a display form of the equation.
    """

    def f(self, x: Complex, derivative: bool = False) -> Tuple[Complex, Optional[Complex]]:
        """Return ``(f(x), f'(x))``; the derivative is ``None`` unless requested."""
        raise NotImplementedError

    def __call__(self, x: Complex) -> Complex:
        return self.f(x)[0]


class Polynomial(Equation):
    """Polynomial with coefficients ``a[i]`` for ``x**i``.

    Leading zero coefficients are kept, so ``order`` may overstate the
    effective degree.
    """

    def __init__(self, coefficients: Iterable[Number]):
        a = tuple(Complex.of(c) for c in coefficients)
        if not a:
            raise ValueError("a polynomial needs at least one coefficient")
        self._a = a

    @property
    def order(self) -> int:
        return len(self._a) - 1

    @property
    def coefficients(self) -> Tuple[Complex, ...]:
        return self._a

    def a(self, i: int) -> Complex:
        return self._a[i]

    def f(self, x: Complex, derivative: bool = False) -> Tuple[Complex, Optional[Complex]]:
        # Horner's method; z tracks f'(x) and must be updated from the previous y.
        a = self._a
        n = len(a) - 1
        y = a[n]
        if not derivative:
            for j in range(n - 1, -1, -1):
                y = x * y + a[j]
            return y, None

        z = ZERO
        for j in range(n - 1, -1, -1):
            z = x * z + y
            y = x * y + a[j]
        return y, z

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._a == other._a

    def __hash__(self) -> int:
        return hash(self._a)

    def __repr__(self) -> str:
        return f"Polynomial({[str(c) for c in self._a]})"

    def __str__(self) -> str:
        parts = []
        for i in range(len(self._a) - 1, -1, -1):
            coeff = self._a[i]
            if coeff.is_zero():
                continue
            negative = coeff.is_real() and coeff.re < 0.0
            if negative:
                coeff = Complex(-coeff.re, 0.0)
            if parts:
                parts.append(" - " if negative else " + ")
            elif negative:
                parts.append("-")
            if i == 0:
                parts.append(str(coeff))
                continue
            if coeff != ONE:
                parts.append(f"({coeff})")
            parts.append("x" if i == 1 else f"x^{i}")
        return "".join(parts) or "0"


class FunctionEquation(Equation):
    """Wrap plain callables as an :class:`Equation`.

    Without a ``derivative`` callable the derivative is reported as ``None``,
    which derivative-based finders treat as a singular step.
    """

    def __init__(
        self,
        func: Callable[[Complex], Complex],
        derivative: Optional[Callable[[Complex], Complex]] = None,
        label: Optional[str] = None,
    ):
        self.func = func
        self.derivative = derivative
        self.label = label or getattr(func, "__name__", "f(x)")

    def f(self, x: Complex, derivative: bool = False) -> Tuple[Complex, Optional[Complex]]:
        fx = Complex.of(self.func(x))
        if derivative and self.derivative is not None:
            return fx, Complex.of(self.derivative(x))
        return fx, None

    def __str__(self) -> str:
        return self.label
