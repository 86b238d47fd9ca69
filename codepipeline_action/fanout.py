"""Concurrent per-artifact fan-out with ordered results."""

from __future__ import annotations

import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

MAX_WORKERS = 16


def run_all(tasks: Sequence[Callable[[], T]], max_workers: Optional[int] = None) -> List[T]:
    """
    Run every task concurrently and return their results in task order.

    Raises the exception of the task that failed first as soon as any task
    fails; tasks that have not started yet are cancelled and running ones
    are abandoned.
    """
    if not tasks:
        return []

    lock = threading.Lock()
    failure_order: List[int] = []

    def tracked(index: int, task: Callable[[], T]) -> T:
        try:
            return task()
        except BaseException:
            # Recorded before the future completes, so wait() never sees an unrecorded failure.
            with lock:
                failure_order.append(index)
            raise

    executor = ThreadPoolExecutor(max_workers=max_workers or min(len(tasks), MAX_WORKERS))
    futures: List[Future] = [executor.submit(tracked, index, task) for index, task in enumerate(tasks)]
    try:
        wait(futures, return_when=FIRST_EXCEPTION)
        with lock:
            first_failed = failure_order[0] if failure_order else None
        if first_failed is not None:
            raise futures[first_failed].exception()
        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
