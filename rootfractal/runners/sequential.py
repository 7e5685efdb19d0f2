from __future__ import annotations

from rootfractal.grid import GridRunner, PointCallback, RunOutcome, RunStatus, SampleGridConfig, is_cancelled, solve_point
from rootfractal.util.logging_setup import get_logger


class SequentialRunner(GridRunner):
    """Row-major pass over the grid in the calling thread."""

    name = "sequential"

    def __init__(self, *, progress_every: int = 50):
        self.progress_every = max(1, int(progress_every))

    def run(self, config: SampleGridConfig, callback: PointCallback, cancel=None) -> RunOutcome:
        logger = get_logger()
        logger.info("Sequential run start %s", config.describe())

        reported = 0
        try:
            for j in range(config.height):
                for i in range(config.width):
                    if is_cancelled(cancel):
                        logger.info("Sequential run cancelled at row %s/%s after %s points", j, config.height, reported)
                        return RunOutcome(RunStatus.CANCELLED, reported)
                    callback(i, j, solve_point(config, i, j))
                    reported += 1
                if j % self.progress_every == 0:
                    logger.debug("Solved row %s/%s", j, config.height)
        except Exception as e:
            logger.exception("Sequential run failed after %s points", reported)
            return RunOutcome(RunStatus.FAILED, reported, e)

        logger.info("Sequential run done points=%s", reported)
        return RunOutcome(RunStatus.COMPLETED, reported)
