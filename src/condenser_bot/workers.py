"""Shared worker pool for blocking work.

Command handlers run on the Slack listener thread and must not block on
network I/O. They hand jobs to the single process-wide pool defined here
and return straight away; each job reports its own outcome.

Usage:
    init_worker_pool()            # once, at startup
    run_on_worker(job.run)        # from any thread
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from .errors import WorkerPoolError, WorkerPoolFull
from .log import get_logger
from .resources import ThreadLocalFactory

logger = get_logger("workers")

THREAD_NAME_PREFIX = "condenser-worker"


class WorkerPool:
    def __init__(
        self,
        max_workers: Optional[int] = None,
        queue_limit: Optional[int] = None,
        thread_name_prefix: str = THREAD_NAME_PREFIX,
    ):
        self.max_workers = max_workers or os.cpu_count() or 1
        self.queue_limit = queue_limit
        try:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix=thread_name_prefix,
            )
        except (ValueError, RuntimeError) as e:
            raise WorkerPoolError(f"Unable to build worker pool: {e}") from e

        # Without a limit, work queues unboundedly while all workers are busy.
        self._slots = threading.BoundedSemaphore(queue_limit) if queue_limit else None

        logger.info(
            f"Worker pool ready: {self.max_workers} threads, "
            f"queue limit {queue_limit or 'unbounded'}"
        )

    def submit(self, work: Callable[[], None]) -> None:
        """
        Schedules `work` on a worker thread and returns immediately.
        Raises WorkerPoolFull when a queue limit is set and reached.
        """
        if self._slots is not None and not self._slots.acquire(blocking=False):
            raise WorkerPoolFull(f"Worker queue is full ({self.queue_limit} jobs)")

        try:
            future = self._executor.submit(work)
        except RuntimeError as e:
            if self._slots is not None:
                self._slots.release()
            raise WorkerPoolError(f"Worker pool is shut down: {e}") from e

        future.add_done_callback(self._job_done)

    def _job_done(self, future: Future) -> None:
        if self._slots is not None:
            self._slots.release()
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Unhandled error in worker job", exc_info=exc)

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down worker pool...")
        self._executor.shutdown(wait=wait)


class _PoolProvider:
    """Owns the one WorkerPool of the process and builds it on first use."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pool: Optional[WorkerPool] = None

    def init(self, max_workers: Optional[int] = None, queue_limit: Optional[int] = None) -> WorkerPool:
        with self._lock:
            if self._pool is None:
                logger.info("Building worker thread pool.")
                self._pool = WorkerPool(max_workers=max_workers, queue_limit=queue_limit)
            return self._pool

    def handle(self) -> WorkerPool:
        logger.debug("Generating new worker pool handle.")
        return self.init()

    def reset(self) -> Optional[WorkerPool]:
        with self._lock:
            pool, self._pool = self._pool, None
            return pool


_provider = _PoolProvider()
_handles: ThreadLocalFactory[WorkerPool] = ThreadLocalFactory(_provider.handle)


def init_worker_pool(max_workers: Optional[int] = None, queue_limit: Optional[int] = None) -> WorkerPool:
    """
    Builds the process-wide pool. Call once at startup so a failure stops the process
    before any command is accepted. Later calls return the existing pool.
    """
    return _provider.init(max_workers=max_workers, queue_limit=queue_limit)


def worker_pool() -> WorkerPool:
    """Returns this thread's cached handle to the shared pool."""
    return _handles.get()


def run_on_worker(work: Callable[[], None]) -> None:
    worker_pool().submit(work)


def shutdown_worker_pool(wait: bool = True) -> None:
    pool = _provider.reset()
    _handles.clear()
    if pool is not None:
        pool.shutdown(wait=wait)
