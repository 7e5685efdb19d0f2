"""Sampling grid definition shared by the runners."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Optional, Tuple

from rootfractal.numeric.complex_number import Complex
from rootfractal.numeric.equation import Equation
from rootfractal.numeric.finders import NewtonsMethod, RootFinder

DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 400
DEFAULT_START_COORD = -2.0
DEFAULT_END_COORD = 2.0
DEFAULT_TOLERANCE = 0.001
DEFAULT_MAX_ITERATIONS = 50

# The second and third seeds sit this far left of the sample point.
SEED_OFFSETS = (Complex(0.1, 0.0), Complex(0.2, 0.0))

# callback(i, j, iteration_count)
PointCallback = Callable[[int, int, int], None]


@dataclass(frozen=True)
class SampleGridConfig:
    """A pixel grid laid over a rectangle of the complex plane.

    Pixel ``(i, j)`` samples ``start_x + i * step_x`` on the real axis and
    ``start_y + j * step_y`` on the imaginary axis.
    """

    equation: Equation
    finder: RootFinder = field(default_factory=NewtonsMethod)
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    start_x: float = DEFAULT_START_COORD
    end_x: float = DEFAULT_END_COORD
    start_y: float = DEFAULT_START_COORD
    end_y: float = DEFAULT_END_COORD
    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    def __post_init__(self):
        if self.width < 0:
            raise ValueError(f"illegal width {self.width}, must be >= 0")
        if self.height < 0:
            raise ValueError(f"illegal height {self.height}, must be >= 0")
        if not self.tolerance > 0.0:
            raise ValueError(f"illegal tolerance {self.tolerance}, must be > 0")
        if self.max_iterations <= 0:
            raise ValueError(f"illegal max_iterations {self.max_iterations}, must be > 0")

    @property
    def step_x(self) -> float:
        if self.width == 0:
            return 0.0
        return (self.end_x - self.start_x) / self.width

    @property
    def step_y(self) -> float:
        if self.height == 0:
            return 0.0
        return (self.end_y - self.start_y) / self.height

    @property
    def size(self) -> int:
        return self.width * self.height

    def rebuild(self, **changes) -> "SampleGridConfig":
        """Return a copy with ``changes`` applied and validated again."""
        return replace(self, **changes)

    def sample_point(self, i: int, j: int) -> Complex:
        return Complex(self.start_x + i * self.step_x, self.start_y + j * self.step_y)

    def describe(self) -> str:
        return (
            f"f(x) = {self.equation} finder={self.finder.name} "
            f"x={self.start_x} to {self.end_x} by {self.step_x} "
            f"y={self.start_y} to {self.end_y} by {self.step_y} "
            f"size={self.width}x{self.height} tol={self.tolerance} max_iter={self.max_iterations}"
        )


def seeds_for(point: Complex) -> Tuple[Complex, Complex, Complex]:
    return point, point - SEED_OFFSETS[0], point - SEED_OFFSETS[1]


def solve_point(config: SampleGridConfig, i: int, j: int) -> int:
    """Run the finder for pixel ``(i, j)`` and return its iteration count.

    Positive counts are successes, 0 means not converged and a negative
    count means a singular division.
    """
    x0, x1, x2 = seeds_for(config.sample_point(i, j))
    result = config.finder.find(x0, x1, x2, config.tolerance, config.max_iterations, config.equation)
    return result.iteration_count


class RunStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class RunOutcome:
    status: RunStatus
    reported: int
    error: Optional[BaseException] = None

    @property
    def completed(self) -> bool:
        return self.status is RunStatus.COMPLETED


class GridRunner:
    """Drive :func:`solve_point` over every pixel of a config.

    ``cancel`` is any object with an ``is_set()`` method, usually a
    :class:`threading.Event`. Callbacks may arrive in any order; each pixel is
    reported at most once.
    """

    name = "abstract"

    def run(self, config: SampleGridConfig, callback: PointCallback, cancel=None) -> RunOutcome:
        raise NotImplementedError


def is_cancelled(cancel) -> bool:
    return cancel is not None and cancel.is_set()
