"""
Command line preparation for the build tool.

This module resolves the build tool executable and turns a command template
into the argument vector handed to the process runner.
"""

import logging
import os
import shutil
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TOOL_NAME = "mvn"


def script_suffix() -> str:
    """Return the launcher script suffix the build tool uses on this platform."""
    return ".bat" if os.name == "nt" else ""


def resolve_executable(tool: str = DEFAULT_TOOL_NAME) -> str:
    """Resolve the build tool to an executable path.

    Explicit paths are returned untouched. Bare tool names get the platform
    script suffix and are looked up on PATH.

    Args:
        tool: Tool name (e.g. 'mvn') or a path to the executable.

    Returns:
        The resolved executable path, or the suffixed name when it cannot be
        found on PATH. Launching an unresolvable name fails later and is
        reported as a failure event rather than raised here.
    """
    if os.path.dirname(tool):
        return tool

    name = tool
    suffix = script_suffix()
    if suffix and not name.lower().endswith(suffix):
        name = f"{name}{suffix}"

    resolved = shutil.which(name)
    if resolved is None:
        logger.warning(f"Build tool '{name}' not found on PATH")
        return name
    logger.debug(f"Resolved build tool '{tool}' to {resolved}")
    return resolved


def split_command_template(template: str) -> List[str]:
    """Split a command template into arguments on runs of whitespace.

    There is no quoting or escaping: an argument cannot contain a space.

    Examples:
        >>> split_command_template("  clean   compile ")
        ['clean', 'compile']
    """
    return template.split()


def build_argument_vector(executable: str, template: Optional[str]) -> List[str]:
    """Prefix the split command template with the executable path.

    Examples:
        >>> build_argument_vector("/usr/bin/mvn", "clean compile")
        ['/usr/bin/mvn', 'clean', 'compile']
    """
    return [executable] + split_command_template(template or "")
