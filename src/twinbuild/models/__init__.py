"""
Data models used throughout twinbuild.

Configuration Models:
- Project build settings and per-target command settings

Profile Models:
- Target kinds, build profiles and the options shared between them

Result Models:
- Compilation stats snapshots, child builds and emitted assets

Event Models:
- Lifecycle events callers can subscribe to
"""

from .config import BuildSettings, TargetSettings
from .events import BuildEvent
from .profiles import BuildProfile, SharedOptions, TargetKind
from .stats import Asset, BuildStats, ChildStats

__all__ = [
    "Asset",
    "BuildEvent",
    "BuildProfile",
    "BuildSettings",
    "BuildStats",
    "ChildStats",
    "SharedOptions",
    "TargetKind",
    "TargetSettings",
]
