"""
Pipeline

A pipeline is an ordered list of stages. apply() runs each stage over the
whole grid and waits for it to finish before starting the next, so stage N+1
never sees a partial write from stage N. The output of each stage is the
only input of the next.
"""

import sys
import logging
from abc import ABC,abstractmethod

from .constants import C
from .executor import RowPartitionedExecutor
from .stage import make_stages,validate_stage


logger = logging.getLogger(__name__)

class Pipeline(ABC):
    """Base pipeline class"""
    def __init__(self, filters=(), verbose=False, debug=False, out=sys.stdout):
        self.stages = []
        self.count  = 0
        self.running = False
        self.verbose = verbose
        self.debug   = debug
        self.out     = out
        if debug:
            logger.setLevel(logging.DEBUG)
        elif verbose:
            logger.setLevel(logging.INFO)
        else:
            logger.setLevel(logging.WARNING)
        self.addLinearPipeline(filters)

    def addLinearPipeline(self, filters):
        """Append filters (Filter objects, Stages or config entries) in order"""
        stages = make_stages(filters)
        for stage in stages:
            validate_stage(stage)
        self.stages.extend(stages)

    @property
    def filters(self):
        return [stage.filter for stage in self.stages]

    def apply(self, grid):
        """Run grid through every stage in order. Returns grid, modified in place.
        An empty pipeline returns grid unchanged."""
        self.count += 1
        logger.info("== apply %s to %s", [s.filter.describe() for s in self.stages], grid)
        for stage in self.stages:
            logger.debug("<%s> processing %s", stage.name, grid)
            self.run_stage(stage, grid)
        return grid

    def process_list(self, grids):
        return [self.apply(grid) for grid in grids]

    @abstractmethod
    def run_stage(self, stage, grid):
        """Run one stage to completion"""

    def print_stats(self, out=sys.stdout):
        for stage in self.stages:
            print(f"{stage.filter.describe()}: calls: {stage.count}  mean: {stage.t_mean:.2}s  stddev: {stage.t_stddev:.2}",
                  file=out)

    def __enter__(self):
        self.running = True
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if self.verbose or self.debug:
            self.print_stats(out=self.out)
        self.running = False
        return False


class SingleThreadedPipeline(Pipeline):
    """Runs every stage in the caller's thread."""
    def run_stage(self, stage, grid):
        stage.run(grid)


class MultiThreadedPipeline(Pipeline):
    """Runs every stage with a RowPartitionedExecutor.
    The executor joins its workers before returning, which is the barrier
    between stages. A grid with fewer rows than workers raises InvalidPartition."""
    def __init__(self, filters=(), workers=C.DEFAULT_WORKERS, **kwargs):
        super().__init__(filters, **kwargs)
        self.workers = workers

    def run_stage(self, stage, grid):
        stage.run(grid, RowPartitionedExecutor(self.workers))


def apply(grid, filters):
    """Apply filters to grid in order, in this thread."""
    return SingleThreadedPipeline(filters).apply(grid)
