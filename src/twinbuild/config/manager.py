"""
Configuration management and caching.

Settings are loaded once per project root and reused by every Compiler
created for that root until the cache is cleared.
"""

import logging
from pathlib import Path
from typing import Dict

from ..models.config import BuildSettings
from ..validation import handle_config_error, ErrorSeverity
from .loader import load_project_config
from .validators import validate_build_settings

logger = logging.getLogger(__name__)

# Loaded settings, keyed by resolved project root.
_SETTINGS_CACHE: Dict[Path, BuildSettings] = {}


def clear_settings_cache() -> None:
    """
    Clear the cached settings, forcing a reload on next access.

    Useful for testing or after ``twinbuild.toml`` has been edited.
    """
    _SETTINGS_CACHE.clear()
    logger.debug("Settings cache cleared")


def is_settings_loaded(root: Path) -> bool:
    return Path(root).resolve() in _SETTINGS_CACHE


def get_build_settings(root: Path) -> BuildSettings:
    """
    Get the validated build settings for a project root.

    Args:
        root: Project root directory

    Returns:
        BuildSettings for the project, defaults when it has no config file

    Raises:
        ValidationError: If the configuration is invalid
        tomllib.TOMLDecodeError: If the configuration is malformed
    """
    resolved_root = Path(root).resolve()
    cached = _SETTINGS_CACHE.get(resolved_root)
    if cached is not None:
        return cached

    try:
        settings = validate_build_settings(load_project_config(resolved_root))
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"loading settings for {resolved_root}",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise

    _SETTINGS_CACHE[resolved_root] = settings
    logger.info(f"Loaded build settings for {resolved_root}")
    return settings
