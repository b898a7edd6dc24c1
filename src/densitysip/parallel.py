from __future__ import annotations
import concurrent.futures as cf
import logging
import multiprocessing as mp
from typing import Callable, Iterable, List, Optional, TypeVar, Union

from .config import CPU_FRACTION, MAX_WORKERS_CAP

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def default_workers() -> int:
    # more than 60 workers causes problems for ProcessPoolExecutor on windows
    n = round(mp.cpu_count() * CPU_FRACTION)
    return max(1, min(n, MAX_WORKERS_CAP))


def parallel_map(func: Callable[[T], R], items: Iterable[T],
                 parallel: Union[bool, int] = False,
                 max_workers: Optional[int] = None) -> List[R]:
    """
    Apply func to every item and return the results in input order.

    With parallel falsy (or at most one item) this is a plain loop; otherwise
    the items are fanned out to a process pool and collected once all have
    finished. An int `parallel` sets the worker count. func and the items
    must be picklable.
    """
    items = list(items)
    if not parallel or len(items) < 2:
        return [func(item) for item in items]

    if max_workers is None:
        max_workers = parallel if (isinstance(parallel, int) and not isinstance(parallel, bool)) else default_workers()
    max_workers = max(1, min(int(max_workers), MAX_WORKERS_CAP, len(items)))
    logger.debug("Dispatching %d tasks to %d worker processes", len(items), max_workers)
    with cf.ProcessPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))
