"""
Build profile models.

A profile pairs an environment and a target kind with the opaque engine
configuration the config provider produced for them.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from ..orchestration.shared_state import SharedState
    from .config import BuildSettings


class TargetKind(Enum):
    """Which runtime a bundle is built for."""
    BROWSER = "browser"
    SERVER = "server"

    @property
    def child_name(self) -> str:
        """Name the engine reports for builds of this target."""
        return "client" if self is TargetKind.BROWSER else "server"


@dataclass(frozen=True)
class SharedOptions:
    """
    Inputs handed to the config provider for every profile.

    One instance is shared by all profiles of a Compiler, so both targets of
    an environment see the same ``state`` bag.
    """

    dir: Path
    watch: bool
    state: "SharedState"
    project_config: "BuildSettings"
    legacy_pkg_config: Dict[str, Any]


@dataclass(frozen=True)
class BuildProfile:
    """One (environment, target) pair and its engine configuration."""

    env: str
    target: TargetKind
    config: Any
