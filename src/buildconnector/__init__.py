"""
buildconnector: run a command-line build tool and report job lifecycle events.

The package is organized into specialized modules:
- models: jobs, outcomes and configuration data structures
- events: lifecycle event types and the event sink interface
- executor: process runner, output drains and managed thread pools
- orchestration: job dispatcher, log rotation and correlation context
- system: executable resolution, command lines, artifact versions
- config: TOML configuration loading and validation
- validation: input validation and error handling
- cli: command-line interface

Usage:
    From command line:
        buildconnector -d path/to/project -c "clean compile" --sync

    Programmatically:
        from buildconnector import JobDispatcher, Job, ConnectorConfig
        config = ConnectorConfig(executable="/usr/bin/mvn", command="clean compile")
        with JobDispatcher(config, sink) as dispatcher:
            dispatcher.submit(Job.create(config.command, "path/to/project"))
"""

from .models import (
    MAX_LOG_FILES,
    AppConfig,
    ConnectorConfig,
    EventKind,
    ExecutionMode,
    Job,
    JobId,
    Outcome,
    ProjectConfig,
)
from .events import (
    EventRouter,
    EventSink,
    FailureEvent,
    LoggingEventSink,
    StartEvent,
    SuccessEvent,
)
from .executor import OutputDrain, ProcessRunner
from .orchestration import JobDispatcher, LogRotationStore, context_scope
from .connector import AliveState, BuildToolConnector
from .config import get_config, clear_config_cache, set_config_path
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    # Models
    "MAX_LOG_FILES",
    "AppConfig",
    "ConnectorConfig",
    "ProjectConfig",
    "EventKind",
    "ExecutionMode",
    "Job",
    "JobId",
    "Outcome",
    # Events
    "EventSink",
    "EventRouter",
    "LoggingEventSink",
    "StartEvent",
    "SuccessEvent",
    "FailureEvent",
    # Engine
    "OutputDrain",
    "ProcessRunner",
    "JobDispatcher",
    "LogRotationStore",
    "context_scope",
    "AliveState",
    "BuildToolConnector",
    # Configuration
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "ValidationError",
]
