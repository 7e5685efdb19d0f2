import threading

import numpy as np
import pytest
from PIL import Image

from rootfractal.color import GradientPalette
from rootfractal.grid import GridRunner, RunOutcome, RunStatus, SampleGridConfig
from rootfractal.numeric.equation import Polynomial
from rootfractal.pipeline import IterationGrid, choose_runner, render_iterations, save_image, to_image
from rootfractal.runners.pool import PoolRunner
from rootfractal.runners.sequential import SequentialRunner


def _config(**kw):
    base = dict(equation=Polynomial([-1, 0, 0, 1]), width=8, height=6, tolerance=1e-6, max_iterations=40)
    base.update(kw)
    return SampleGridConfig(**base)


class FailingRunner(GridRunner):
    name = "failing"

    def run(self, config, callback, cancel=None):
        return RunOutcome(RunStatus.FAILED, 0, ValueError("bad point"))


def test_iteration_grid_summary():
    grid = IterationGrid(3, 2)
    grid(0, 0, 5)
    grid(1, 0, 0)
    grid(2, 0, -1)
    grid(0, 1, 9)
    summary = grid.summary()
    assert summary == {
        "points": 6,
        "reported": 4,
        "found": 2,
        "not_converged": 1,
        "singular": 1,
        "max_iterations_used": 9,
        "mean_iterations": 7.0,
    }
    assert grid.counts[1, 0] == 9


def test_render_iterations_fills_grid():
    seen = []
    grid = render_iterations(_config(), SequentialRunner(), on_point=lambda: seen.append(1))
    assert grid.outcome.status is RunStatus.COMPLETED
    assert grid.reported.all()
    assert len(seen) == 48
    assert grid.summary()["found"] > 0


def test_render_iterations_cancelled_returns_partial_grid():
    cancel = threading.Event()
    cancel.set()
    grid = render_iterations(_config(), SequentialRunner(), cancel=cancel)
    assert grid.outcome.status is RunStatus.CANCELLED
    assert not grid.reported.any()


def test_render_iterations_raises_on_failure():
    with pytest.raises(RuntimeError, match="failing run failed") as info:
        render_iterations(_config(), FailingRunner())
    assert isinstance(info.value.__cause__, ValueError)


def test_choose_runner():
    small = _config()
    assert isinstance(choose_runner(runner="auto", config=small), SequentialRunner)
    assert isinstance(choose_runner(runner="auto", config=_config(width=400, height=400), workers=1), SequentialRunner)
    assert isinstance(choose_runner(runner="pool", config=small, workers=2), PoolRunner)
    assert isinstance(choose_runner(runner="sequential", config=small), SequentialRunner)
    with pytest.raises(ValueError):
        choose_runner(runner="gpu", config=small)


def test_image_round_trip(tmp_path):
    cfg = _config()
    grid = render_iterations(cfg, SequentialRunner())
    img = to_image(grid, GradientPalette(cfg.max_iterations))
    assert img.size == (8, 6)

    path = save_image(img, str(tmp_path / "out" / "map.png"))
    with Image.open(path) as loaded:
        assert loaded.size == (8, 6)
        assert loaded.mode == "RGB"
        pixels = np.asarray(loaded)
    assert np.array_equal(pixels, np.asarray(img))
