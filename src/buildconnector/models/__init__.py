"""
Data models for the connector.

Configuration Models:
- Connector settings and project definitions

Job Models:
- Jobs submitted to the dispatcher, their event kind and execution mode
- Immutable outcomes produced by the process runner
"""

from .config import MAX_LOG_FILES, AppConfig, ConnectorConfig, ProjectConfig
from .job import EventKind, ExecutionMode, Job, JobId, Outcome

__all__ = [
    # Configuration
    "MAX_LOG_FILES",
    "AppConfig",
    "ConnectorConfig",
    "ProjectConfig",
    # Jobs
    "EventKind",
    "ExecutionMode",
    "Job",
    "JobId",
    "Outcome",
]
