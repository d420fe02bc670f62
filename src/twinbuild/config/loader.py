"""
Configuration file loading utilities.

This module handles the low-level loading of the project-local
``twinbuild.toml`` and the legacy ``package.json`` metadata.
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import handle_config_error, ErrorSeverity

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILENAME = "twinbuild.toml"
PACKAGE_METADATA_FILENAME = "package.json"


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.debug(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_project_config(root: Path) -> Dict[str, Any]:
    """
    Load ``twinbuild.toml`` from the project root.

    A project without the file builds with default settings, so a missing
    file yields an empty dict.
    """
    config_path = root / PROJECT_CONFIG_FILENAME
    if not config_path.exists():
        logger.info(f"No {PROJECT_CONFIG_FILENAME} in {root}, using defaults")
        return {}
    return load_toml_file(config_path, "project configuration file")


def load_package_metadata(root: Path) -> Dict[str, Any]:
    """
    Read the legacy ``package.json`` metadata, or ``{}`` when absent.

    Raises:
        json.JSONDecodeError: If the file exists but is not valid JSON
    """
    package_path = root / PACKAGE_METADATA_FILENAME
    if not package_path.exists():
        return {}
    try:
        with open(package_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {package_path}",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise
