"""
The Compiler: multi-target build orchestration.

This module contains the Compiler class that assembles browser and server
profiles for every environment, drives a single multi-target engine over
them, reports every compilation, and exposes the development middleware
chain and output cleanup.
"""

import asyncio
import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Union

from ..config import get_build_settings, load_package_metadata
from ..engine.base import (
    AbstractBuildEngine,
    CompletionCallback,
    InertWatcher,
    WatchController,
    WatchOptions,
)
from ..engine.command_engine import SubprocessEngine
from ..engine.provider import command_config_provider
from ..models.config import BuildSettings
from ..models.events import BuildEvent
from ..models.profiles import SharedOptions, TargetKind
from ..validation import CompilerStateError
from .build_profiles import BuildProfileAssembler, ConfigProvider
from .middleware import (
    AssetServerOptions,
    HotUpdateOptions,
    MiddlewareFactories,
    RequestHandler,
    chain_middleware,
)
from .shared_state import SharedState
from .stats_reporter import StatsReporter

EngineFactory = Callable[[List[Any]], AbstractBuildEngine]


def _noop(*args: Any) -> None:
    pass


class LatchState(Enum):
    ARMED = "armed"
    FIRED = "fired"


class CallbackLatch:
    """
    Invokes a callback on the first ``fire`` only.

    Watch mode reports every rebuild through the engine handler, but the
    caller of ``start`` is told about the initial build alone.
    """

    def __init__(self, callback: CompletionCallback):
        self.callback = callback
        self.state = LatchState.ARMED

    def fire(self, error: Optional[BaseException], stats: Any) -> bool:
        if self.state is LatchState.FIRED:
            return False
        self.state = LatchState.FIRED
        self.callback(error, stats)
        return True


class Compiler:
    """
    Builds a browser and a server bundle for every requested environment.

    The Compiler is single-use: ``start`` may be called once. Rebuilds in
    watch mode are observed with ``register_hook(BuildEvent.DONE, ...)``.
    """

    def __init__(
        self,
        dir: Union[str, Path] = ".",
        envs: Optional[Sequence[str]] = None,
        watch: bool = False,
        logger: Optional[logging.Logger] = None,
        *,
        config_provider: Optional[ConfigProvider] = None,
        engine_factory: Optional[EngineFactory] = None,
        middleware_factories: Optional[MiddlewareFactories] = None,
        settings: Optional[BuildSettings] = None,
    ):
        """
        Load project configuration and construct the engine.

        Args:
            dir: Project root
            envs: Environment names to build, in order
            watch: Rebuild on file changes instead of building once
            logger: Receives build output; defaults to this module's logger
            config_provider: Turns (target, env, options) into an engine config
            engine_factory: Constructs the engine from the ordered configs
            middleware_factories: Required only for ``get_middleware``
            settings: Overrides the settings loaded from ``twinbuild.toml``
        """
        self.state = SharedState()
        self.root = Path(dir).resolve()
        self.envs = list(envs or [])
        self.watch = watch
        self.logger = logger or logging.getLogger(__name__)
        self.settings = settings or get_build_settings(self.root)
        self.middleware_factories = middleware_factories

        self.options = SharedOptions(
            dir=self.root,
            watch=watch,
            state=self.state,
            project_config=self.settings,
            legacy_pkg_config=load_package_metadata(self.root),
        )

        assembler = BuildProfileAssembler(config_provider or command_config_provider, self.options)
        self.engine = (engine_factory or SubprocessEngine)(assembler.engine_configs(self.envs))

        self.stats_reporter = StatsReporter(
            root=self.root,
            envs=self.envs,
            logger=self.logger,
            output_dir=self.settings.output_dir,
            stats_file=self.settings.stats_file,
            error_marker=self.settings.error_marker,
            trace_fragment=self.settings.trace_fragment,
        )

        self.watcher: Optional[WatchController] = None
        self._started = False

    @property
    def output_dir(self) -> Path:
        return self.root / self.settings.output_dir

    def register_hook(self, event: Union[BuildEvent, str], callback: Callable[..., Any]) -> Any:
        """
        Subscribe ``callback`` to an engine lifecycle event.

        Returns:
            Whatever the engine's hook table returns for the tap
        """
        return self.engine.hooks.tap(BuildEvent.coerce(event).value, "compiler", callback)

    def start(self, callback: Optional[CompletionCallback] = None) -> WatchController:
        """
        Build once, or start watching when the Compiler was created with ``watch``.

        ``callback(error, stats)`` is invoked exactly once, after the first
        compilation has been reported.

        Returns:
            The live watch controller, or an inert one for one-shot builds

        Raises:
            CompilerStateError: If the Compiler was already started
        """
        if self._started:
            raise CompilerStateError("Compiler.start() may only be called once")
        self._started = True

        latch = CallbackLatch(callback or _noop)

        def handler(error: Optional[BaseException], stats: Any) -> None:
            self.stats_reporter(error, stats)
            latch.fire(error, stats)

        if self.watch:
            self.watcher = self.engine.watch(
                WatchOptions(poll_interval=self.settings.poll_interval), handler
            )
            return self.watcher

        self.engine.run(handler)
        return InertWatcher()

    def get_middleware(self) -> RequestHandler:
        """
        Build the development request handler: asset serving, then hot updates.

        Raises:
            CompilerStateError: If no middleware factories were supplied
        """
        if self.middleware_factories is None:
            raise CompilerStateError("Compiler was created without middleware factories")

        client_name = TargetKind.BROWSER.child_name
        dev = self.middleware_factories.dev_server(
            self.engine,
            AssetServerOptions(
                filter=lambda config: getattr(config, "name", None) == client_name,
                no_info=True,
                quiet=True,
                lazy=False,
                stats_colors=True,
                server_side_render=True,
                public_path=self.settings.asset_path,
            ),
        )
        hot = self.middleware_factories.hot_update(self.engine, HotUpdateOptions(log=False))
        return chain_middleware(dev, hot)

    async def clean(self) -> None:
        """
        Remove the build output directory.

        A missing directory is not an error; any other filesystem error
        propagates.
        """
        output_dir = self.output_dir

        def remove() -> None:
            try:
                shutil.rmtree(output_dir)
            except FileNotFoundError:
                pass

        await asyncio.get_running_loop().run_in_executor(None, remove)

    def close(self) -> None:
        """Stop the live watch, if any."""
        if self.watcher is not None:
            self.watcher.close()
            self.watcher = None
