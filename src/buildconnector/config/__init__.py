"""
Configuration management for the buildconnector package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file, with the loaded configuration cached.
"""

from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

from .loader import (
    get_connector_section,
    get_project_entries,
    load_main_config,
    load_toml_file,
)
from .validators import (
    validate_connector_config,
    validate_projects_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "get_connector_section",
    "get_project_entries",
    "validate_connector_config",
    "validate_projects_config",
]
