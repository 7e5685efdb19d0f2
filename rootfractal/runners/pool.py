from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from typing import Dict, List, Optional, Tuple

import numpy as np

from rootfractal.grid import GridRunner, PointCallback, RunOutcome, RunStatus, SampleGridConfig, is_cancelled, solve_point
from rootfractal.util.logging_setup import configure_worker_logging, get_logger

_G = {}


def _init_worker(config, log_queue, log_level):
    _G["config"] = config
    configure_worker_logging(log_queue, level=log_level)


def _solve_band(y0_y1: Tuple[int, int]) -> Tuple[int, np.ndarray]:
    y0, y1 = y0_y1
    config: SampleGridConfig = _G["config"]

    band = np.zeros((y1 - y0, config.width), dtype=np.int32)
    for yi, j in enumerate(range(y0, y1)):
        for i in range(config.width):
            band[yi, i] = solve_point(config, i, j)

    get_logger().debug("Solved rows %s..%s", y0, y1)
    return y0, band


def _report_band(config, y0, band, callback, cancel) -> int:
    """Invoke the callback for a solved band; stops early when cancelled."""
    count = 0
    for yi in range(band.shape[0]):
        for i in range(config.width):
            if is_cancelled(cancel):
                return count
            callback(i, y0 + yi, int(band[yi, i]))
            count += 1
    return count


def split_bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands


class PoolRunner(GridRunner):
    """Solve row bands in a process pool and report them from the calling process.

    The callback is only ever invoked from the calling thread. The config must
    be picklable. Cancellation drops bands that have not started; bands already
    running finish but are not reported.
    """

    name = "pool"

    def __init__(
        self,
        *,
        workers: Optional[int] = None,
        band_height: int = 16,
        log_queue=None,
        log_level: int = logging.INFO,
    ):
        if band_height <= 0:
            raise ValueError("band_height must be > 0")
        self.workers = workers
        self.band_height = band_height
        self.log_queue = log_queue
        self.log_level = log_level

    def run(self, config: SampleGridConfig, callback: PointCallback, cancel=None) -> RunOutcome:
        logger = get_logger()
        bands = split_bands(config.height, self.band_height)
        logger.info("Pool run start bands=%s workers=%s %s", len(bands), self.workers or "auto", config.describe())

        reported = 0
        if not bands or config.width == 0:
            return RunOutcome(RunStatus.COMPLETED, reported)
        if is_cancelled(cancel):
            return RunOutcome(RunStatus.CANCELLED, reported)

        pool = ProcessPoolExecutor(
            max_workers=self.workers,
            initializer=_init_worker,
            initargs=(config, self.log_queue, self.log_level),
        )
        status = RunStatus.COMPLETED
        error: Optional[BaseException] = None
        try:
            pending: Dict[Future, Tuple[int, int]] = {pool.submit(_solve_band, b): b for b in bands}
            while pending and status is RunStatus.COMPLETED:
                done, _ = wait(pending, timeout=0.1, return_when=FIRST_COMPLETED)
                for fut in done:
                    del pending[fut]
                    y0, band = fut.result()
                    count = _report_band(config, y0, band, callback, cancel)
                    reported += count
                    if count < band.size:
                        status = RunStatus.CANCELLED
                        break
                if pending and is_cancelled(cancel):
                    status = RunStatus.CANCELLED
        except Exception as e:
            logger.exception("Pool run failed after %s points", reported)
            status, error = RunStatus.FAILED, e
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        if status is RunStatus.CANCELLED:
            logger.info("Pool run cancelled after %s points", reported)
        elif status is RunStatus.COMPLETED:
            logger.info("Pool run done points=%s", reported)
        return RunOutcome(status, reported, error)
