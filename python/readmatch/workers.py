"""
Workers - Fixed-size thread pool with one file per task.

Both engine phases dispatch each file as its own task so concurrent
decompression buffers stay bounded by the worker count. `run_per_file`
returns only once every task has finished: that join is the barrier
between the build and query phases.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, List, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_per_file(
    func: Callable[[T], R],
    items: Iterable[T],
    threads: int,
    thread_name_prefix: str = "worker",
) -> List[R]:
    """
    Run `func` on every item in a pool of `threads` workers.

    The first failing task aborts the phase: tasks that have not started
    are cancelled, running ones are allowed to finish (there is no
    cancellation inside a file), then the error is re-raised.

    Args:
        func: Per-file work
        items: Files to process, one task each
        threads: Pool size
        thread_name_prefix: Name prefix for worker threads

    Returns:
        Task results in completion order
    """
    executor = ThreadPoolExecutor(
        max_workers=threads,
        thread_name_prefix=thread_name_prefix,
    )
    results: List[R] = []
    try:
        futures = [executor.submit(func, item) for item in items]
        for future in as_completed(futures):
            results.append(future.result())
    except Exception:
        logger.debug(f"{thread_name_prefix} task failed, cancelling pending tasks")
        raise
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
    return results
