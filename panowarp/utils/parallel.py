"""
Row-band dispatch for data-parallel image loops.

Every pixel loop in this package is safe to run concurrently over
disjoint row ranges: a worker reads only shared read-only inputs and
writes only its own rows of a freshly allocated output. numpy releases
the GIL inside its kernels, so a thread pool is enough.
"""

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Tuple

from dotenv import load_dotenv
from tqdm import tqdm

load_dotenv()

logger = logging.getLogger(__name__)

# Below this many rows the pool overhead outweighs the work.
MIN_ROWS_PER_BAND = 16


def default_workers() -> int:
    env = os.getenv("PARALLEL_WORKERS")
    if env:
        return max(1, int(env))
    return os.cpu_count() or 1


def show_progress_default() -> bool:
    return os.getenv("SHOW_PROGRESS", "0").lower() in ("1", "true", "yes")


def row_bands(n_rows: int, workers: int) -> List[Tuple[int, int]]:
    """Split [0, n_rows) into at most `workers` contiguous (lo, hi) ranges."""
    if n_rows <= 0:
        return []
    n_bands = max(1, min(workers, n_rows // MIN_ROWS_PER_BAND or 1))
    chunk = (n_rows + n_bands - 1) // n_bands
    return [(lo, min(lo + chunk, n_rows)) for lo in range(0, n_rows, chunk)]


def run_row_bands(
    n_rows: int,
    worker: Callable[[int, int], None],
    *,
    workers: Optional[int] = None,
    desc: str = "rows",
    show_progress: Optional[bool] = None,
) -> None:
    """
    Call worker(lo, hi) for every band of rows, concurrently.

    The worker must only write rows [lo, hi) of its output. Exceptions
    raised by a worker propagate to the caller.
    """
    workers = workers or default_workers()
    if show_progress is None:
        show_progress = show_progress_default()
    ranges = row_bands(n_rows, workers)

    if len(ranges) <= 1:
        for lo, hi in ranges:
            worker(lo, hi)
        return

    logger.debug("Dispatching %d rows as %d bands (%s)", n_rows, len(ranges), desc)
    with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
        futures: List[Future[None]] = [pool.submit(worker, lo, hi) for lo, hi in ranges]
        for fut in tqdm(as_completed(futures), total=len(futures), desc=desc,
                        ncols=70, disable=not show_progress):
            fut.result()
