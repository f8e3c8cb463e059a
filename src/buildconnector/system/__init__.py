"""
System interaction for the buildconnector package.

- commands: executable resolution and argument vector construction
- artifacts: project descriptor inspection (artifact versions)
- processes: process tree termination
"""

from .artifacts import resolve_artifact_version
from .commands import (
    DEFAULT_TOOL_NAME,
    build_argument_vector,
    resolve_executable,
    script_suffix,
    split_command_template,
)
from .processes import terminate_process_tree

__all__ = [
    "DEFAULT_TOOL_NAME",
    "build_argument_vector",
    "resolve_executable",
    "script_suffix",
    "split_command_template",
    "resolve_artifact_version",
    "terminate_process_tree",
]
