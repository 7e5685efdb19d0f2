"""Root-finding iteration maps over the complex plane."""

from .grid import GridRunner, RunOutcome, RunStatus, SampleGridConfig, solve_point
from .numeric.complex_number import Complex
from .numeric.deflation import DeflationResult, deflate
from .numeric.equation import Equation, FunctionEquation, Polynomial
from .numeric.finders import (
    FinderKind,
    Found,
    MullersMethod,
    NewtonsMethod,
    NotConverged,
    RootFinder,
    SingularDivision,
    get_root_finder,
)
from .runners.pool import PoolRunner
from .runners.sequential import SequentialRunner

__all__ = [
    "Complex",
    "DeflationResult",
    "Equation",
    "FinderKind",
    "Found",
    "FunctionEquation",
    "GridRunner",
    "MullersMethod",
    "NewtonsMethod",
    "NotConverged",
    "Polynomial",
    "PoolRunner",
    "RootFinder",
    "RunOutcome",
    "RunStatus",
    "SampleGridConfig",
    "SequentialRunner",
    "SingularDivision",
    "deflate",
    "get_root_finder",
    "solve_point",
]
