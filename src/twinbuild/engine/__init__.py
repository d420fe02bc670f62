"""
Build engine contract and the subprocess-driven default engine.

Components:
- AbstractBuildEngine: What a Compiler needs from an engine
- HookTable: Named lifecycle hooks
- WatchController / InertWatcher: Handles on continuous and one-shot builds
- SubprocessEngine: Runs one bundler command line per build profile
- command_config_provider: Builds SubprocessEngine configs from twinbuild.toml
"""

from .base import (
    AbstractBuildEngine,
    CompletionCallback,
    HookTable,
    InertWatcher,
    WatchController,
    WatchOptions,
)
from .command_engine import CommandTargetConfig, PollingWatcher, SubprocessEngine, collect_assets
from .process_tree import terminate_process_tree
from .provider import command_config_provider

__all__ = [
    "AbstractBuildEngine",
    "CompletionCallback",
    "HookTable",
    "InertWatcher",
    "WatchController",
    "WatchOptions",
    "CommandTargetConfig",
    "PollingWatcher",
    "SubprocessEngine",
    "collect_assets",
    "terminate_process_tree",
    "command_config_provider",
]
