"""Iterative root finders and the registry that names them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type, Union

from rootfractal.numeric.complex_number import Complex
from rootfractal.numeric.equation import Equation

# Iteration counts reported for the two failure outcomes.
NOT_CONVERGED_COUNT = 0
SINGULAR_DIVISION_COUNT = -1


@dataclass(frozen=True)
class Found:
    root: Complex
    iterations: int

    @property
    def iteration_count(self) -> int:
        return self.iterations


@dataclass(frozen=True)
class NotConverged:
    """The iteration limit was reached before the tolerance was met."""

    @property
    def iteration_count(self) -> int:
        return NOT_CONVERGED_COUNT


@dataclass(frozen=True)
class SingularDivision:
    """An intermediate divisor was exactly zero."""

    @property
    def iteration_count(self) -> int:
        return SINGULAR_DIVISION_COUNT


RootResult = Union[Found, NotConverged, SingularDivision]

NOT_CONVERGED = NotConverged()
SINGULAR_DIVISION = SingularDivision()


class RootFinder:
    """Strategy interface; implementations hold no state."""

    name = "abstract"

    def find(
        self,
        x0: Complex,
        x1: Complex,
        x2: Complex,
        tolerance: float,
        max_iterations: int,
        equation: Equation,
    ) -> RootResult:
        """Find the root nearest the approximations ``x0``, ``x1``, ``x2``."""
        raise NotImplementedError

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NewtonsMethod(RootFinder):
    """Newton-Raphson from ``x0``; the other two seeds are ignored."""

    name = "newton"

    def find(self, x0, x1, x2, tolerance, max_iterations, equation):
        p0 = x0
        for i in range(1, max_iterations + 1):
            fx, dfx = equation.f(p0, derivative=True)
            if dfx is None or dfx.is_zero():
                return SINGULAR_DIVISION
            p = p0 - fx / dfx
            if abs(p - p0) < tolerance:
                return Found(p, i)
            p0 = p
        return NOT_CONVERGED


class MullersMethod(RootFinder):
    """Muller's method: fit a parabola through three points and step to its root.

    The setup of the first secant slopes counts as iteration 1, so the first
    possible success is reported as 2 iterations.
    """

    name = "muller"

    def find(self, x0, x1, x2, tolerance, max_iterations, equation):
        h1 = x1 - x0
        h2 = x2 - x1
        if h1.is_zero() or h2.is_zero() or (h1 + h2).is_zero():
            return SINGULAR_DIVISION
        f0, f1, f2 = equation(x0), equation(x1), equation(x2)
        delta1 = (f1 - f0) / h1
        delta2 = (f2 - f1) / h2
        d = (delta2 - delta1) / (h2 + h1)

        for i in range(2, max_iterations + 1):
            b = delta2 + h2 * d
            disc = (b * b - f2 * d * 4.0).sqrt()
            # keep whichever denominator is larger in magnitude
            if abs(b - disc) < abs(b + disc):
                e = b + disc
            else:
                e = b - disc
            if e.is_zero():
                return SINGULAR_DIVISION

            h = f2 * -2.0 / e
            p = x2 + h
            if abs(h) < tolerance:
                return Found(p, i)

            x0, x1, x2 = x1, x2, p
            h1 = x1 - x0
            h2 = x2 - x1
            if h1.is_zero() or h2.is_zero() or (h1 + h2).is_zero():
                return SINGULAR_DIVISION
            f0, f1, f2 = f1, f2, equation(x2)
            delta1 = (f1 - f0) / h1
            delta2 = (f2 - f1) / h2
            d = (delta2 - delta1) / (h2 + h1)

        return NOT_CONVERGED


class FinderKind(str, Enum):
    NEWTON = "newton"
    MULLER = "muller"


_FINDERS: Dict[FinderKind, Type[RootFinder]] = {
    FinderKind.NEWTON: NewtonsMethod,
    FinderKind.MULLER: MullersMethod,
}

_ALIASES = {
    "newtons": FinderKind.NEWTON,
    "mueller": FinderKind.MULLER,
    "muellers": FinderKind.MULLER,
    "mullers": FinderKind.MULLER,
}


def finder_names():
    return sorted([k.value for k in FinderKind] + list(_ALIASES))


def get_root_finder(kind: Union[str, FinderKind]) -> RootFinder:
    """Build the finder registered under ``kind`` (case-insensitive)."""
    if not isinstance(kind, FinderKind):
        key = str(kind).strip().lower()
        try:
            kind = _ALIASES.get(key) or FinderKind(key)
        except ValueError:
            raise ValueError(
                f"unknown root finder '{kind}', expected one of: {', '.join(finder_names())}"
            ) from None
    return _FINDERS[kind]()
