"""
Validation and error handling for the buildconnector package.

This module provides input validation and error handling with consistent
error reporting across the application.
"""

from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_file_error,
    handle_subprocess_error,
    handle_cli_error,
)

from .validators import (
    validate_boolean,
    validate_command_template,
    validate_directory,
    validate_enum_choice,
    validate_path_exists,
    validate_positive_float,
    validate_positive_integer,
    validate_project_name,
)

__all__ = [
    # Error handling
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_file_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Validators
    "validate_boolean",
    "validate_command_template",
    "validate_directory",
    "validate_enum_choice",
    "validate_path_exists",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_project_name",
]
