"""
Run a filter over a grid with one thread per contiguous row range.

The rows [0, height) are split into worker_count ranges of
floor(height/worker_count) rows each; the last range also takes the
remainder. Each thread filters only its own rows. For neighbourhood
filters a single read-only snapshot is taken before any thread starts and
shared by all of them, so the result does not depend on the partition.

Threads are created for each call and joined before it returns; there is
no persistent pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from .errors import InvalidPartition

logger = logging.getLogger(__name__)


def partition(height, worker_count):
    """Returns a list of (start_row, end_row) half-open ranges, one per worker."""
    if worker_count <= 0 or worker_count > height:
        raise InvalidPartition(height, worker_count)
    rows_per_worker = height // worker_count
    ranges = []
    for i in range(worker_count):
        start_row = i * rows_per_worker
        end_row = height if i == worker_count - 1 else (i + 1) * rows_per_worker
        ranges.append((start_row, end_row))
    return ranges


class RowPartitionedExecutor:
    """Applies filters to a grid using worker_count threads"""
    def __init__(self, worker_count):
        self.worker_count = worker_count

    def __repr__(self):
        return f"<{self.__class__.__name__} workers={self.worker_count}>"

    def run(self, grid, filt):
        """Apply filt to all of grid. Returns grid once every worker has finished.
        If any worker raises, the exception is re-raised here."""
        ranges = partition(grid.height, self.worker_count)
        snapshot = grid.snapshot() if filt.needs_snapshot else None
        logger.debug("%s %s over %s", self, filt, ranges)
        with ThreadPoolExecutor(max_workers=len(ranges),
                                thread_name_prefix=f"pixpipe-{filt.name}") as pool:
            futures = [pool.submit(filt.apply, grid, start_row, end_row, snapshot)
                       for (start_row, end_row) in ranges]
            # result() re-raises a worker's exception; the with block joins the rest
            for future in futures:
                future.result()
        return grid


def run(grid, worker_count, filt):
    return RowPartitionedExecutor(worker_count).run(grid, filt)
