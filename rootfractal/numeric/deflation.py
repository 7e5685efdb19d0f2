"""Find every root of a polynomial by repeated root finding and deflation.

Roots are found numerically while the degree is 3 or more; each root is
divided out of the polynomial and the last quadratic is solved in closed form.

Known limitation: the first finder failure aborts the whole deflation. The
roots found up to that point are returned with the failure so the caller can
decide to retry with other seeds; nothing is retried here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from rootfractal.numeric.complex_number import Complex
from rootfractal.numeric.equation import Polynomial
from rootfractal.numeric.finders import Found, RootFinder, RootResult
from rootfractal.util.logging_setup import get_logger


@dataclass(frozen=True)
class DeflationResult:
    roots: Tuple[Complex, ...] = field(default_factory=tuple)
    failure: Optional[RootResult] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def __len__(self) -> int:
        return len(self.roots)


def quadratic_roots(a2: Complex, a1: Complex, a0: Complex) -> Tuple[Complex, Complex]:
    """Return the ``+`` and ``-`` roots of ``a2 x^2 + a1 x + a0``."""
    disc = (a1 * a1 - a2 * a0 * 4.0).sqrt()
    bottom = a2 * 2.0
    return (-a1 + disc) / bottom, (-a1 - disc) / bottom


def synthetic_division(poly: Polynomial, root: Complex) -> Polynomial:
    """Divide ``poly`` by ``(x - root)`` and drop the remainder."""
    b = poly.coefficients
    n = len(b) - 1
    q = [None] * n
    y = b[n]
    q[n - 1] = y
    for j in range(n - 1, 0, -1):
        y = root * y + b[j]
        q[j - 1] = y
    return Polynomial(q)


def deflate(
    poly: Polynomial,
    x0: Complex,
    x1: Complex,
    x2: Complex,
    tolerance: float,
    max_iterations: int,
    finder: RootFinder,
) -> DeflationResult:
    logger = get_logger()
    order = poly.order

    if order == 2:
        if not poly.a(2).is_zero():
            return DeflationResult(quadratic_roots(poly.a(2), poly.a(1), poly.a(0)))
        # actually first order
        order = 1

    if order == 1:
        if poly.a(1).is_zero():
            return DeflationResult()
        return DeflationResult((-poly.a(0) / poly.a(1),))

    if order < 1:
        return DeflationResult()

    roots = []
    eq = poly
    for degree in range(order, 2, -1):
        result = finder.find(x0, x1, x2, tolerance, max_iterations, eq)
        if not isinstance(result, Found):
            logger.debug("Deflation of %s stopped at degree %s: %s", poly, degree, result)
            return DeflationResult(tuple(roots), result)
        roots.append(result.root)
        eq = synthetic_division(eq, result.root)

    plus, minus = quadratic_roots(eq.a(2), eq.a(1), eq.a(0))
    roots.append(minus)
    roots.append(plus)
    return DeflationResult(tuple(roots))
