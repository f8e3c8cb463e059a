"""
Unit tests for thread pool management functionality.

Tests the thread pool configuration, lifecycle management,
task execution and statistics.
"""

import threading
import time

import pytest

from buildconnector.executor.thread_pool import (
    ThreadPoolConfig,
    ManagedThreadPoolExecutor,
)


@pytest.mark.unit
class TestThreadPoolConfig:
    """Test cases for ThreadPoolConfig."""

    def test_thread_pool_config_defaults(self):
        """Test ThreadPoolConfig default values."""
        config = ThreadPoolConfig()

        assert config.max_workers == 4
        assert config.thread_name_prefix == "ConnectorWorker"
        assert config.shutdown_timeout == 10.0

    def test_thread_pool_config_custom_values(self):
        """Test ThreadPoolConfig with custom values."""
        config = ThreadPoolConfig(
            max_workers=8,
            thread_name_prefix="CustomWorker",
            shutdown_timeout=5.0,
        )

        assert config.max_workers == 8
        assert config.thread_name_prefix == "CustomWorker"
        assert config.shutdown_timeout == 5.0


@pytest.mark.unit
class TestManagedThreadPoolExecutor:
    """Test cases for ManagedThreadPoolExecutor."""

    def test_managed_thread_pool_initialization(self):
        """Test ManagedThreadPoolExecutor initialization."""
        config = ThreadPoolConfig(max_workers=2)
        executor = ManagedThreadPoolExecutor(config)

        assert executor.config == config
        assert executor.executor is None
        assert executor.is_shutdown is False
        assert executor.is_running is False
        assert executor.stats["tasks_submitted"] == 0

    def test_managed_thread_pool_start(self):
        """Test starting the managed thread pool."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=2))

        executor.start()

        assert executor.executor is not None
        assert executor.is_running is True

        # Clean up
        executor.shutdown(wait=True)

    def test_managed_thread_pool_start_already_started(self):
        """Test starting an already started thread pool."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()

        # Should raise RuntimeError on second start
        with pytest.raises(RuntimeError, match="already started"):
            executor.start()

        # Clean up
        executor.shutdown(wait=True)

    def test_managed_thread_pool_start_invalid_workers(self):
        """Test that a pool without workers cannot be started."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=0))

        with pytest.raises(ValueError, match="max_workers"):
            executor.start()
        assert executor.executor is None

    def test_managed_thread_pool_submit_task(self):
        """Test submitting tasks to the thread pool."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=2))
        executor.start()

        def test_function(x):
            return x * 2

        future = executor.submit(test_function, 5)
        assert future.result(timeout=1.0) == 10

        executor.shutdown(wait=True)

        # Done callbacks have run once the workers are joined
        assert executor.stats["tasks_submitted"] == 1
        assert executor.stats["tasks_completed"] == 1
        assert executor.stats["tasks_failed"] == 0

    def test_managed_thread_pool_failed_task_counted(self):
        """Test that a raising task is counted as failed and its error kept."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()

        def failing():
            raise ValueError("boom")

        future = executor.submit(failing)
        with pytest.raises(ValueError, match="boom"):
            future.result(timeout=1.0)

        executor.shutdown(wait=True)
        assert executor.stats["tasks_failed"] == 1
        assert executor.stats["tasks_completed"] == 0

    def test_managed_thread_pool_submit_not_started(self):
        """Test submitting task to non-started thread pool."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))

        with pytest.raises(RuntimeError, match="not started"):
            executor.submit(lambda: None)

    def test_managed_thread_pool_submit_after_shutdown(self):
        """Test submitting task after shutdown."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()
        executor.shutdown(wait=True)

        with pytest.raises(RuntimeError, match="not started"):
            executor.submit(lambda: None)

    def test_single_worker_runs_tasks_in_submission_order(self):
        """Test that a one-worker pool runs tasks one at a time, FIFO."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()

        order = []
        running = []
        overlap = []

        def task(n):
            running.append(n)
            if len(running) > 1:
                overlap.append(n)
            time.sleep(0.01)
            order.append(n)
            running.remove(n)

        for n in range(10):
            executor.submit(task, n)
        executor.shutdown(wait=True)

        assert order == list(range(10))
        assert overlap == []

    def test_wait_idle(self):
        """Test waiting for outstanding tasks without shutting down."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()
        release = threading.Event()

        executor.submit(release.wait, 5.0)
        assert executor.wait_idle(timeout=0.05) is False

        release.set()
        assert executor.wait_idle(timeout=5.0) is True
        assert executor.is_running is True

        executor.shutdown(wait=True)

    def test_wait_idle_without_tasks(self):
        """Test that an idle pool reports idle immediately."""
        with ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1)) as executor:
            assert executor.wait_idle(timeout=0) is True

    def test_managed_thread_pool_shutdown(self):
        """Test thread pool shutdown."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.start()

        future = executor.submit(lambda: time.sleep(0.1))

        executor.shutdown(wait=True)

        assert executor.is_shutdown is True
        assert executor.is_running is False
        assert future.done()

    def test_managed_thread_pool_shutdown_is_idempotent(self):
        """Test that repeated and premature shutdowns are no-ops."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))
        executor.shutdown(wait=True)

        executor.start()
        executor.shutdown(wait=True)
        executor.shutdown(wait=True)

        assert executor.is_shutdown is True

    def test_managed_thread_pool_thread_names(self):
        """Test that worker threads carry the configured name prefix."""
        config = ThreadPoolConfig(max_workers=1, thread_name_prefix="JobWorker")

        with ManagedThreadPoolExecutor(config) as executor:
            name = executor.submit(lambda: threading.current_thread().name).result()

        assert name.startswith("JobWorker")
        assert executor.stats["threads_created"] == 1

    def test_managed_thread_pool_get_stats(self):
        """Test statistics reporting."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=2))
        executor.start()

        for i in range(4):
            executor.submit(lambda x: x, i)
        executor.shutdown(wait=True)

        stats = executor.get_stats()
        assert stats["tasks_submitted"] == 4
        assert stats["tasks_completed"] == 4
        assert stats["active_futures"] == 0
        assert stats["is_shutdown"] is True
        assert stats["success_rate"] == 100.0

    def test_managed_thread_pool_context_manager(self):
        """Test using ManagedThreadPoolExecutor as context manager."""
        executor = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=1))

        with executor:
            future = executor.submit(lambda: 42)
            assert future.result() == 42

        # Should be shutdown after context exit
        assert executor.is_shutdown is True
