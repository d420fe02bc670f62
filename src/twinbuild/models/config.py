"""
Configuration data models.

This module contains the validated, typed form of a project's
``twinbuild.toml``.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .profiles import TargetKind


@dataclass
class TargetSettings:
    """
    How to build one target, loaded from a ``[targets.<kind>]`` table.
    """

    # Shell command that runs the bundler. '<ENV>' and '<OUTDIR>' are placeholders.
    command: str
    # Directory, relative to the project root, the bundler writes its output into.
    output_dir: str
    # Paths, relative to the project root, polled for changes in watch mode.
    watch: List[str] = field(default_factory=list)
    # Extra environment variables for the bundler process.
    env: Dict[str, str] = field(default_factory=dict)


@dataclass
class BuildSettings:
    """
    Project-wide build settings, loaded from ``twinbuild.toml``.
    """

    # [build]
    output_dir: str = ".twinbuild"
    asset_path: str = "/_static"
    stats_file: str = "stats.json"

    # [build.watch]
    poll_interval: float = 0.5

    # [reporter]
    error_marker: str = "BabelLoaderError"
    trace_fragment: str = "at transpile"

    # [targets.*] and [environments.<env>.targets.*]
    targets: Dict[TargetKind, TargetSettings] = field(default_factory=dict)
    environment_targets: Dict[str, Dict[TargetKind, TargetSettings]] = field(default_factory=dict)

    def target_for(self, target: TargetKind, env: str) -> Optional[TargetSettings]:
        """Return the settings for ``target`` with any ``env`` override applied."""
        override = self.environment_targets.get(env, {}).get(target)
        return override or self.targets.get(target)
