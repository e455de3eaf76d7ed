"""
Stage implementation.

A Stage wraps one filter in a pipeline and keeps timing statistics for it.
The filter itself stays stateless; everything that changes from call to call
lives here.
"""

import time
import math
import logging

from .filters import Filter, make_filter
from .grid import P_FILTER

logger = logging.getLogger(__name__)


class Stage:
    """One step of a pipeline"""

    def __init__(self, filt):
        self.filter  = make_filter(filt)
        self.sum_t   = 0
        self.sum_t2  = 0
        self.count   = 0

    def __repr__(self):
        return f"<Stage {self.filter.describe()}>"

    @property
    def name(self):
        return self.filter.name

    def run(self, grid, executor=None):
        """Apply the filter to the whole grid, in this thread or through executor.
        Does not return until every row has been written."""
        t0 = time.time()
        if executor is None:
            self.filter.apply(grid)
        else:
            executor.run(grid, self.filter)
        t = time.time() - t0
        self.sum_t  += t
        self.sum_t2 += (t*t)
        self.count  += 1
        grid.add_history(P_FILTER, self.filter.describe())
        logger.debug("%s done in %.4fs", self, t)
        return grid

    @property
    def t_mean(self):
        return self.sum_t / self.count if self.count>0 else float("nan")

    @property
    def t2_mean(self):
        return self.sum_t2 / self.count if self.count>0 else float("nan")

    @property
    def t_variance(self):
        return max(0.0, self.t2_mean - self.t_mean * self.t_mean)

    @property
    def t_stddev(self):
        return math.sqrt(self.t_variance)


def make_stages(filters):
    return [f if isinstance(f, Stage) else Stage(f) for f in filters]


def validate_stage(stage):
    if not isinstance(stage, Stage) or not isinstance(stage.filter, Filter):
        raise RuntimeError(str(stage) + " is not a pipeline stage")
