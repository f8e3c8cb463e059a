"""
Configuration validation utilities.

This module turns raw TOML data into validated configuration models.
Relative paths are resolved against the directory holding the config file.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.config import MAX_LOG_FILES, ConnectorConfig, ProjectConfig
from ..models.job import EventKind
from ..system.commands import DEFAULT_TOOL_NAME
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_command_template,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_project_name,
)

logger = logging.getLogger(__name__)

EVENT_KIND_CHOICES = [kind.value for kind in EventKind]


def _resolve_path(value: Any, base_dir: Optional[Path], field_name: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty path string",
            field_name=field_name,
            value=value,
        )
    path = Path(value).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


def validate_connector_config(
    connector_data: Dict[str, Any], base_dir: Optional[Path] = None
) -> ConnectorConfig:
    """
    Validate and create a ConnectorConfig from the raw [connector] table.

    Args:
        connector_data: Raw connector configuration from TOML
        base_dir: Directory relative paths are resolved against

    Returns:
        Validated ConnectorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    executable = connector_data.get("executable", DEFAULT_TOOL_NAME)
    if not isinstance(executable, str) or not executable.strip():
        raise ValidationError(
            "connector.executable must be a non-empty string",
            field_name="connector.executable",
            value=executable,
        )

    command = validate_command_template(
        connector_data.get("command", ""), field_name="connector.command"
    )

    synchronous = validate_boolean(
        connector_data.get("synchronous", False), field_name="connector.synchronous"
    )
    use_log_file = validate_boolean(
        connector_data.get("use_log_file", True), field_name="connector.use_log_file"
    )

    log_dir = _resolve_path(
        connector_data.get("log_dir", "log"), base_dir, "connector.log_dir"
    )

    log_prefix = connector_data.get("log_prefix", "maven")
    if not isinstance(log_prefix, str) or not log_prefix.strip() or "/" in log_prefix:
        raise ValidationError(
            "connector.log_prefix must be a non-empty file name prefix",
            field_name="connector.log_prefix",
            value=log_prefix,
        )

    max_log_files = validate_positive_integer(
        connector_data.get("max_log_files", MAX_LOG_FILES),
        min_value=1,
        max_value=1000,
        field_name="connector.max_log_files",
    )

    # stdout and stderr of a job are drained at the same time.
    drain_workers = validate_positive_integer(
        connector_data.get("drain_workers", 8),
        min_value=2,
        max_value=256,
        field_name="connector.drain_workers",
    )

    shutdown_timeout = validate_positive_float(
        connector_data.get("shutdown_timeout", 30.0),
        min_value=0.1,
        max_value=86400.0,
        field_name="connector.shutdown_timeout",
    )

    return ConnectorConfig(
        executable=executable.strip(),
        command=command,
        synchronous=synchronous,
        use_log_file=use_log_file,
        log_dir=log_dir,
        log_prefix=log_prefix.strip(),
        max_log_files=max_log_files,
        drain_workers=drain_workers,
        shutdown_timeout=shutdown_timeout,
    )


def validate_projects_config(
    projects_data: List[Dict[str, Any]], base_dir: Optional[Path] = None
) -> List[ProjectConfig]:
    """
    Validate the [[projects]] entries.

    Project directories are not required to exist at load time; a missing
    directory surfaces as a failure event when the job runs.

    Raises:
        ValidationError: If an entry is malformed or a name is duplicated
    """
    if not isinstance(projects_data, list):
        raise ValidationError(
            "projects must be an array of tables",
            field_name="projects",
            value=projects_data,
        )

    projects: List[ProjectConfig] = []
    for i, entry in enumerate(projects_data):
        prefix = f"projects[{i}]"
        if not isinstance(entry, dict):
            raise ValidationError(f"{prefix} must be a table", field_name=prefix, value=entry)

        name = validate_project_name(
            entry.get("name", ""),
            existing_names=[p.name for p in projects],
            field_name=f"{prefix}.name",
        )
        project_dir = _resolve_path(entry.get("dir"), base_dir, f"{prefix}.dir")
        kind = validate_enum_choice(
            entry.get("kind", EventKind.BUILD.value),
            valid_choices=EVENT_KIND_CHOICES,
            field_name=f"{prefix}.kind",
            case_sensitive=False,
        )
        command = entry.get("command")
        if command is not None:
            command = validate_command_template(command, field_name=f"{prefix}.command")

        projects.append(
            ProjectConfig(name=name, dir=project_dir, kind=EventKind(kind), command=command)
        )

    logger.debug(f"Validated {len(projects)} project entries")
    return projects
