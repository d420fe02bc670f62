"""
Configuration management for the twinbuild package.

This module provides a clean interface for loading, validating, and accessing
a project's ``twinbuild.toml`` and its legacy ``package.json`` metadata.
"""

# Main configuration interface
from .manager import (
    clear_settings_cache,
    get_build_settings,
    is_settings_loaded,
)

# For advanced usage - direct access to loaders and validators
from .loader import (
    PACKAGE_METADATA_FILENAME,
    PROJECT_CONFIG_FILENAME,
    load_package_metadata,
    load_project_config,
    load_toml_file,
)
from .validators import validate_build_settings, validate_target_settings

__all__ = [
    # Main interface
    "get_build_settings",
    "clear_settings_cache",
    "is_settings_loaded",
    # Advanced interface
    "PACKAGE_METADATA_FILENAME",
    "PROJECT_CONFIG_FILENAME",
    "load_toml_file",
    "load_project_config",
    "load_package_metadata",
    "validate_build_settings",
    "validate_target_settings",
]
