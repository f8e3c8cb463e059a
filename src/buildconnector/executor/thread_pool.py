"""
Managed thread pools for job execution and output draining.

The dispatcher owns two of these: a single-slot pool that serializes
asynchronous jobs, and a pool dedicated to draining process output streams.
Both have an explicit start/shutdown lifecycle and keep simple usage
statistics.
"""

import logging
import threading
import concurrent.futures
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set

from ..validation import handle_error, ErrorSeverity

logger = logging.getLogger(__name__)


@dataclass
class ThreadPoolConfig:
    """Configuration for a managed thread pool."""

    max_workers: int = 4
    thread_name_prefix: str = "ConnectorWorker"
    shutdown_timeout: float = 10.0


class ManagedThreadPoolExecutor:
    """
    ThreadPoolExecutor wrapper with lifecycle checks and task statistics.

    With ``max_workers=1`` the pool is a FIFO queue of one: tasks run one at
    a time in submission order.
    """

    def __init__(self, config: ThreadPoolConfig):
        """
        Initialize the managed thread pool executor.

        Args:
            config: Thread pool configuration
        """
        self.config = config
        self.executor: Optional[ThreadPoolExecutor] = None
        self.active_futures: Set[Future] = set()
        self.is_shutdown = False
        self._lock = threading.Lock()

        self.stats = {
            "tasks_submitted": 0,
            "tasks_completed": 0,
            "tasks_failed": 0,
            "threads_created": 0,
        }

    @property
    def is_running(self) -> bool:
        return self.executor is not None and not self.is_shutdown

    def start(self) -> None:
        """
        Start the thread pool executor.

        Raises:
            RuntimeError: If already started
        """
        if self.executor is not None:
            raise RuntimeError("Thread pool already started")
        if self.config.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.config.max_workers}")

        self.executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix=self.config.thread_name_prefix,
            initializer=self._thread_initializer,
        )
        self.is_shutdown = False
        logger.debug(
            f"Started thread pool '{self.config.thread_name_prefix}' with {self.config.max_workers} workers"
        )

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """
        Submit a task to the thread pool.

        Args:
            fn: Function to execute
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Future representing the task

        Raises:
            RuntimeError: If executor is not started or is shutdown
        """
        if self.executor is None:
            raise RuntimeError("Thread pool not started")
        if self.is_shutdown:
            raise RuntimeError("Thread pool is shutdown")

        try:
            future = self.executor.submit(fn, *args, **kwargs)
        except Exception as e:
            with self._lock:
                self.stats["tasks_failed"] += 1
            handle_error(
                error=e,
                context=f"submitting task to thread pool '{self.config.thread_name_prefix}'",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )

        with self._lock:
            self.stats["tasks_submitted"] += 1
            self.active_futures.add(future)
        future.add_done_callback(self._task_completed)
        return future

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every submitted task has finished.

        Args:
            timeout: Maximum seconds to wait, None for no limit

        Returns:
            True if no task is pending any more
        """
        with self._lock:
            pending = list(self.active_futures)
        if not pending:
            return True
        _, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """
        Shutdown the thread pool executor.

        Args:
            wait: Whether to wait for running and queued tasks
            cancel_futures: Whether to cancel tasks that have not started
        """
        if self.executor is None or self.is_shutdown:
            return

        try:
            self.is_shutdown = True
            self.executor.shutdown(wait=wait, cancel_futures=cancel_futures)
            logger.debug(
                f"Thread pool '{self.config.thread_name_prefix}' shutdown "
                f"{'completed' if wait else 'initiated'}"
            )
        except Exception as e:
            handle_error(
                error=e,
                context="shutting down thread pool",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
        finally:
            self.executor = None
            with self._lock:
                self.active_futures.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get current thread pool statistics.

        Returns:
            Dictionary containing usage statistics
        """
        with self._lock:
            stats = self.stats.copy()
            stats["active_futures"] = len(self.active_futures)

        stats["is_shutdown"] = self.is_shutdown
        stats["success_rate"] = (
            stats["tasks_completed"] / max(1, stats["tasks_submitted"]) * 100
        )
        return stats

    def _thread_initializer(self) -> None:
        """Count worker threads as the executor creates them."""
        with self._lock:
            self.stats["threads_created"] += 1

    def _task_completed(self, future: Future) -> None:
        """
        Callback executed when a task completes.

        Args:
            future: The completed future
        """
        with self._lock:
            self.active_futures.discard(future)

            if future.cancelled():
                return
            if future.exception() is not None:
                self.stats["tasks_failed"] += 1
            else:
                self.stats["tasks_completed"] += 1

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown(wait=True)
