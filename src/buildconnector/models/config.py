"""
Configuration data models.

This module contains the configuration structures for the connector and the
projects it runs against, loaded from `config.toml`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .job import EventKind

# Maximum number of retained output log files.
MAX_LOG_FILES = 5


@dataclass
class ConnectorConfig:
    """
    Settings for a dispatcher instance, loaded from the `[connector]` table.
    """

    # Resolved path (or PATH-resolvable name) of the build tool executable.
    executable: str
    # Default argument template, split on whitespace at dispatch time.
    command: str
    # Run jobs inline on the caller's thread instead of the background worker.
    synchronous: bool = False
    # Copy captured stdout into a rotating log file.
    use_log_file: bool = True
    log_dir: Path = Path("log")
    log_prefix: str = "maven"
    max_log_files: int = MAX_LOG_FILES
    # Size of the pool that drains process output streams.
    drain_workers: int = 8
    # Seconds between progress warnings while shutdown waits for accepted jobs.
    shutdown_timeout: float = 30.0


@dataclass
class ProjectConfig:
    """
    A project directory the connector can run against, from `[[projects]]`.
    """

    name: str
    dir: Path
    kind: EventKind = EventKind.BUILD
    # Overrides ConnectorConfig.command for this project.
    command: Optional[str] = None


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    connector: ConnectorConfig
    projects: List[ProjectConfig] = field(default_factory=list)
