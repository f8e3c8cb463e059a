"""
Orchestration of build tool jobs.

Components:
- JobDispatcher: accepts jobs, runs them and raises their lifecycle events
- LogRotationStore: bounded set of timestamped output log files
- context: correlation id captured at submission and restored on the
  thread that runs the job
"""

from .context import context_scope, get_current_context_id, set_current_context_id
from .dispatcher import JobDispatcher
from .log_rotation import TIMESTAMP_FORMAT, LogRotationStore

__all__ = [
    "JobDispatcher",
    "LogRotationStore",
    "TIMESTAMP_FORMAT",
    "context_scope",
    "get_current_context_id",
    "set_current_context_id",
]
