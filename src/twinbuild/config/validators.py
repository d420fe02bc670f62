"""
Configuration validation utilities.

This module turns the raw ``twinbuild.toml`` mapping into a validated
BuildSettings instance.
"""

import logging
from typing import Any, Dict, Optional

from ..models.config import BuildSettings, TargetSettings
from ..models.profiles import TargetKind
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_string_list,
    validate_string_mapping,
)

logger = logging.getLogger(__name__)


def validate_target_settings(target_data: Any, field_prefix: str) -> TargetSettings:
    """
    Validate one ``[targets.<kind>]`` table.

    Args:
        target_data: Raw table contents
        field_prefix: Dotted path of the table, used in error messages

    Returns:
        Validated TargetSettings instance

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(target_data, dict):
        raise ValidationError(f"{field_prefix} must be a table", field_name=field_prefix)

    command = validate_non_empty_string(target_data.get("command"), f"{field_prefix}.command")
    output_dir = validate_non_empty_string(
        target_data.get("output_dir"), f"{field_prefix}.output_dir"
    )
    watch = validate_string_list(target_data.get("watch", []), f"{field_prefix}.watch")
    env = validate_string_mapping(target_data.get("env", {}), f"{field_prefix}.env")

    return TargetSettings(command=command, output_dir=output_dir, watch=watch, env=env)


def _validate_targets_table(
    targets_data: Any, field_prefix: str, base_data: Optional[Dict[str, Any]] = None
) -> Dict[TargetKind, TargetSettings]:
    """Validate a targets table, merging each entry over the matching base entry."""
    if not isinstance(targets_data, dict):
        raise ValidationError(f"{field_prefix} must be a table", field_name=field_prefix)

    targets = {}
    for kind_name, target_data in targets_data.items():
        kind_value = validate_enum_choice(
            kind_name,
            valid_choices=[kind.value for kind in TargetKind],
            field_name=f"{field_prefix} key",
        )
        base_entry = (base_data or {}).get(kind_value, {})
        if isinstance(base_entry, dict) and isinstance(target_data, dict):
            target_data = {**base_entry, **target_data}
        targets[TargetKind(kind_value)] = validate_target_settings(
            target_data, f"{field_prefix}.{kind_value}"
        )
    return targets


def validate_build_settings(config_data: Dict[str, Any]) -> BuildSettings:
    """
    Validate and create BuildSettings from raw configuration data.

    Missing sections fall back to the BuildSettings defaults.

    Args:
        config_data: Raw configuration from ``twinbuild.toml``

    Returns:
        Validated BuildSettings instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = BuildSettings()
    build_settings = config_data.get("build", {})
    watch_settings = build_settings.get("watch", {})
    reporter_settings = config_data.get("reporter", {})

    output_dir = validate_non_empty_string(
        build_settings.get("output_dir", defaults.output_dir), "build.output_dir"
    )
    asset_path = validate_non_empty_string(
        build_settings.get("asset_path", defaults.asset_path), "build.asset_path"
    )
    stats_file = validate_non_empty_string(
        build_settings.get("stats_file", defaults.stats_file), "build.stats_file"
    )

    poll_interval = validate_positive_float(
        watch_settings.get("poll_interval", defaults.poll_interval),
        min_value=0.01,  # 10ms minimum
        max_value=60.0,
        field_name="build.watch.poll_interval",
    )

    error_marker = validate_non_empty_string(
        reporter_settings.get("error_marker", defaults.error_marker), "reporter.error_marker"
    )
    trace_fragment = validate_non_empty_string(
        reporter_settings.get("trace_fragment", defaults.trace_fragment), "reporter.trace_fragment"
    )

    targets_data = config_data.get("targets", {})
    targets = _validate_targets_table(targets_data, "targets")

    environments_data = config_data.get("environments", {})
    if not isinstance(environments_data, dict):
        raise ValidationError("environments must be a table", field_name="environments")

    environment_targets = {}
    for env_name, env_data in environments_data.items():
        if not isinstance(env_data, dict):
            raise ValidationError(
                f"environments.{env_name} must be a table",
                field_name=f"environments.{env_name}",
            )
        environment_targets[env_name] = _validate_targets_table(
            env_data.get("targets", {}), f"environments.{env_name}.targets", base_data=targets_data
        )

    logger.debug(
        f"Validated build settings: {len(targets)} targets, "
        f"{len(environment_targets)} environment overrides"
    )

    return BuildSettings(
        output_dir=output_dir,
        asset_path=asset_path,
        stats_file=stats_file,
        poll_interval=poll_interval,
        error_marker=error_marker,
        trace_fragment=trace_fragment,
        targets=targets,
        environment_targets=environment_targets,
    )
