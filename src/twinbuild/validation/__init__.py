"""
Validation and error handling for the twinbuild package.

This module provides input validation, the exception hierarchy, and
error handling with consistent error reporting across the application.
"""

from .exceptions import (
    CompilerError,
    CompilerStateError,
    ErrorSeverity,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)
from .validators import (
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_string_list,
    validate_string_mapping,
)

__all__ = [
    # Exceptions
    "CompilerError",
    "CompilerStateError",
    "ErrorSeverity",
    "ValidationError",
    # Error handling
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    # Validators
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_string_list",
    "validate_string_mapping",
]
