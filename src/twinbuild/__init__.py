"""
twinbuild: Multi-target bundling orchestration.

For each deployment environment twinbuild builds a browser bundle and a
server bundle, keeps them synchronized through shared state, and exposes
the result as a one-shot build, a watching rebuild loop, or a development
middleware chain with hot reload.

The package is organized into specialized modules:
- config: twinbuild.toml and package.json loading and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- orchestration: Compiler, profile assembly, stats reporting, shared state
- engine: Engine contract and the subprocess-driven default engine
- cli: Command-line interface

Usage:
    From command line:
        twinbuild build --env production

    Programmatically:
        from twinbuild import Compiler
        compiler = Compiler(dir=".", envs=["production"])
        compiler.start(lambda error, stats: ...)
"""

# Main interfaces
from .config import clear_settings_cache, get_build_settings
from .orchestration import Compiler, DeferredValue, SharedState, StatsReporter
from .cli import main_cli

# Model classes for external use
from .models import (
    Asset,
    BuildEvent,
    BuildProfile,
    BuildSettings,
    BuildStats,
    ChildStats,
    SharedOptions,
    TargetKind,
    TargetSettings,
)

# Errors
from .validation import CompilerError, CompilerStateError, ValidationError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "Compiler",
    "DeferredValue",
    "SharedState",
    "StatsReporter",
    "get_build_settings",
    "clear_settings_cache",
    "main_cli",
    # Models
    "Asset",
    "BuildEvent",
    "BuildProfile",
    "BuildSettings",
    "BuildStats",
    "ChildStats",
    "SharedOptions",
    "TargetKind",
    "TargetSettings",
    # Errors
    "CompilerError",
    "CompilerStateError",
    "ValidationError",
]
