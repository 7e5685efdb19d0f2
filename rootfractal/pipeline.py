from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

import numpy as np
from PIL import Image

from rootfractal.color import Palette
from rootfractal.grid import GridRunner, RunOutcome, RunStatus, SampleGridConfig
from rootfractal.runners.pool import PoolRunner
from rootfractal.runners.sequential import SequentialRunner
from rootfractal.util.logging_setup import get_logger

RUNNERS = ("auto", "sequential", "pool")

# Below this many points the pool start-up costs more than it saves.
_POOL_MIN_POINTS = 64 * 64


class IterationGrid:
    """Collect callback results into a 2D array indexed ``[j, i]``.

    Statistics are reduced from the array after the run rather than counted
    inside the callback.
    """

    UNREPORTED = np.iinfo(np.int32).min

    def __init__(self, width: int, height: int, on_point: Optional[Callable[[], None]] = None):
        self.counts = np.full((height, width), self.UNREPORTED, dtype=np.int32)
        self._on_point = on_point
        self.outcome: Optional[RunOutcome] = None

    def __call__(self, i: int, j: int, count: int) -> None:
        self.counts[j, i] = count
        if self._on_point is not None:
            self._on_point()

    @property
    def reported(self) -> np.ndarray:
        return self.counts != self.UNREPORTED

    def summary(self) -> Dict[str, Any]:
        reported = self.reported
        values = self.counts[reported]
        found = values[values > 0]
        return {
            "points": int(self.counts.size),
            "reported": int(reported.sum()),
            "found": int(found.size),
            "not_converged": int((values == 0).sum()),
            "singular": int((values < 0).sum()),
            "max_iterations_used": int(found.max()) if found.size else 0,
            "mean_iterations": float(found.mean()) if found.size else 0.0,
        }


def choose_runner(*, runner: str, config: SampleGridConfig, workers: Optional[int] = None,
                  band_height: int = 16, log_queue=None, log_level: int = logging.INFO) -> GridRunner:
    if runner not in RUNNERS:
        raise ValueError(f"runner must be one of: {', '.join(RUNNERS)}")
    if runner == "auto":
        single = workers == 1 or (workers is None and (os.cpu_count() or 1) == 1)
        runner = "sequential" if single or config.size < _POOL_MIN_POINTS else "pool"
    if runner == "sequential":
        return SequentialRunner()
    return PoolRunner(workers=workers, band_height=band_height, log_queue=log_queue, log_level=log_level)


def render_iterations(config: SampleGridConfig, runner: GridRunner, *, cancel=None,
                      on_point: Optional[Callable[[], None]] = None) -> IterationGrid:
    """Run the grid and return the collected counts.

    Raises ``RuntimeError`` if the run failed; a cancelled run returns the
    partial grid (unvisited points stay ``UNREPORTED``).
    """
    logger = get_logger()
    logger.info("x=%s to %s by %s", config.start_x, config.end_x, config.step_x)
    logger.info("y=%s to %s by %s", config.start_y, config.end_y, config.step_y)

    grid = IterationGrid(config.width, config.height, on_point)
    outcome: RunOutcome = runner.run(config, grid, cancel)
    grid.outcome = outcome
    if outcome.status is RunStatus.FAILED:
        raise RuntimeError(f"{runner.name} run failed after {outcome.reported} points") from outcome.error
    logger.info("Run %s: %s", outcome.status.value, grid.summary())
    return grid


def to_image(grid: IterationGrid, palette: Palette) -> Image.Image:
    counts = np.where(grid.reported, grid.counts, 0)
    return Image.fromarray(palette.colors_for(counts))


def save_image(img: Image.Image, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    img.save(path, format="PNG", optimize=True)
    return path
