"""
Build tool process execution for the buildconnector package.

This module provides the process runner, the output drains it attaches to
the process's streams, and the managed thread pools both run on.
"""

from .output_drain import OutputDrain
from .process_runner import ProcessRunner
from .thread_pool import ManagedThreadPoolExecutor, ThreadPoolConfig

__all__ = [
    "OutputDrain",
    "ProcessRunner",
    "ManagedThreadPoolExecutor",
    "ThreadPoolConfig",
]
