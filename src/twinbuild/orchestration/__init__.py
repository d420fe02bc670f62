"""
Orchestration module for multi-target builds.

Components:
- Compiler: Main orchestrator
- BuildProfileAssembler: Browser/server profile pairs per environment
- StatsReporter: Logging of every compilation event
- DeferredValue / SharedState: Cross-target handoff
- chain_middleware: Development request handler composition
"""

from .build_profiles import BuildProfileAssembler, ConfigProvider
from .compiler import CallbackLatch, Compiler
from .middleware import (
    AssetServerOptions,
    HotUpdateOptions,
    MiddlewareFactories,
    chain_middleware,
)
from .shared_state import DeferredState, DeferredValue, SharedState
from .stats_reporter import StatsReporter, dedupe_errors

__all__ = [
    "BuildProfileAssembler",
    "ConfigProvider",
    "CallbackLatch",
    "Compiler",
    "AssetServerOptions",
    "HotUpdateOptions",
    "MiddlewareFactories",
    "chain_middleware",
    "DeferredState",
    "DeferredValue",
    "SharedState",
    "StatsReporter",
    "dedupe_errors",
]
