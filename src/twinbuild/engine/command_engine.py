"""
Subprocess-driven build engine.

SubprocessEngine builds each profile by running the bundler command line
configured for it, then reads the emitted files back as the compilation's
assets. Watch mode polls the configured source paths for changes.
"""

import asyncio
import logging
import os
import time
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..models.events import BuildEvent
from ..models.profiles import TargetKind
from ..models.stats import Asset, BuildStats, ChildStats
from ..validation import CompilerError, ErrorSeverity, handle_error
from .base import (
    AbstractBuildEngine,
    CompletionCallback,
    WatchController,
    WatchOptions,
)
from .process_tree import terminate_process_tree_async

logger = logging.getLogger(__name__)


@dataclass
class CommandTargetConfig:
    """
    Engine configuration for one build profile.
    """

    name: str
    env: str
    target: TargetKind
    command: str
    cwd: Path
    output_dir: Path
    watch_paths: List[Path] = field(default_factory=list)
    env_vars: Dict[str, str] = field(default_factory=dict)
    # Awaited before the command runs; returns extra environment variables
    prepare: Optional[Callable[["CommandTargetConfig"], Awaitable[Dict[str, str]]]] = None
    # Called with the finished child build
    on_complete: Optional[Callable[["CommandTargetConfig", ChildStats], None]] = None


def _deliver(callback: CompletionCallback, error: Optional[BaseException], stats: Any) -> None:
    """Invoke a completion callback; its failures are logged, not raised into the engine."""
    try:
        callback(error, stats)
    except Exception as e:
        handle_error(e, "build completion callback", reraise=False, logger=logger)


def collect_assets(output_dir: Path) -> List[Asset]:
    """List every file under ``output_dir`` with its size, by relative name."""
    if not output_dir.is_dir():
        return []
    assets = []
    for path in sorted(output_dir.rglob("*")):
        if path.is_file():
            assets.append(Asset(name=path.relative_to(output_dir).as_posix(), size=path.stat().st_size))
    return assets


class SubprocessEngine(AbstractBuildEngine):
    """
    Builds profiles one after another with their shell commands.

    Profiles run in the order given, so a server profile can wait on state
    published by the browser profile of the same environment. A command
    that exits non-zero is a compilation error; a command that cannot be
    started at all is a fatal CompilerError.
    """

    def __init__(self, configs: Sequence[CommandTargetConfig]):
        super().__init__(configs)
        self.compilations = 0
        self._tasks: List[asyncio.Task] = []

    def run(self, callback: CompletionCallback) -> None:
        """
        Schedule one compilation on the running event loop.

        Raises:
            RuntimeError: If no event loop is running
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run_once(callback))
        self._tasks.append(task)
        task.add_done_callback(self._tasks.remove)

    def watch(self, options: WatchOptions, callback: CompletionCallback) -> WatchController:
        watcher = PollingWatcher(self, options, callback)
        watcher.start()
        return watcher

    async def _run_once(self, callback: CompletionCallback) -> None:
        error, stats = await self.compile()
        _deliver(callback, error, stats)

    async def compile(self) -> Tuple[Optional[BaseException], Optional[BuildStats]]:
        """
        Build every profile once, firing the lifecycle hooks.

        Any exception raised by a hook, a ``prepare``/``on_complete``
        function or asset collection ends the compilation as a fatal
        CompilerError carrying the traceback.

        Returns:
            ``(error, None)`` for a fatal error, otherwise ``(None, stats)``
        """
        try:
            return None, await self._compile_children()
        except CompilerError as e:
            return self._fail(e)
        except Exception as e:
            return self._fail(
                CompilerError(
                    f"Compilation aborted by {type(e).__name__}: {e}",
                    details=traceback.format_exc().rstrip(),
                )
            )

    async def _compile_children(self) -> BuildStats:
        self.hooks.call(BuildEvent.COMPILE.value)
        children = []
        for config in self.configs:
            children.append(await self._build_child(config))

        self.compilations += 1
        stats = BuildStats(children=children, hash=f"{self.compilations:08x}")
        self.hooks.call(BuildEvent.DONE.value, stats)
        return stats

    def _fail(self, error: CompilerError) -> Tuple[CompilerError, None]:
        logger.debug(f"Compilation failed: {error}")
        try:
            self.hooks.call(BuildEvent.FAILED.value, error)
        except Exception as e:
            handle_error(e, f"'{BuildEvent.FAILED.value}' hook", reraise=False, logger=logger)
        return error, None

    async def _build_child(self, config: CommandTargetConfig) -> ChildStats:
        started = time.monotonic()

        extra_env: Dict[str, str] = {}
        if config.prepare is not None:
            try:
                extra_env = await config.prepare(config)
            except Exception as e:
                child = ChildStats(name=config.name, errors=[f"{config.name} build skipped: {e}"])
                self._finish_child(config, child)
                return child

        logger.info(f"Building {config.name} ({config.env}): {config.command}")
        try:
            process = await asyncio.create_subprocess_shell(
                config.command,
                cwd=config.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, **config.env_vars, **extra_env},
                start_new_session=True,
            )
        except OSError as e:
            raise CompilerError(
                f"Could not start {config.name} build for {config.env}: {e}",
                details=f"command: {config.command}\ncwd: {config.cwd}",
            ) from e

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            await terminate_process_tree_async(process.pid, f"{config.name} build")
            raise

        if stdout:
            logger.debug(stdout.decode(errors="replace").rstrip())

        child = ChildStats(
            name=config.name,
            assets=collect_assets(config.output_dir),
            duration=time.monotonic() - started,
        )
        stderr_text = stderr.decode(errors="replace").strip()
        if process.returncode != 0:
            child.errors.append(
                stderr_text or f"{config.name} build exited with code {process.returncode}"
            )
        elif stderr_text:
            child.warnings.append(stderr_text)

        self._finish_child(config, child)
        return child

    def _finish_child(self, config: CommandTargetConfig, child: ChildStats) -> None:
        if config.on_complete is not None:
            config.on_complete(config, child)

    def snapshot_watched_files(self) -> Dict[str, int]:
        """Modification times of every watched file, outside the output dirs."""
        output_dirs = [config.output_dir.resolve() for config in self.configs]
        snapshot = {}
        for config in self.configs:
            for watch_path in config.watch_paths:
                if watch_path.is_file():
                    candidates = [watch_path]
                elif watch_path.is_dir():
                    candidates = watch_path.rglob("*")
                else:
                    continue
                for path in candidates:
                    resolved = path.resolve()
                    if any(resolved.is_relative_to(out) for out in output_dirs):
                        continue
                    try:
                        if path.is_file():
                            snapshot[str(resolved)] = path.stat().st_mtime_ns
                    except FileNotFoundError:
                        continue
        return snapshot


class PollingWatcher(WatchController):
    """
    Rebuilds whenever a watched file changes or ``invalidate`` is called.
    """

    def __init__(self, engine: SubprocessEngine, options: WatchOptions, callback: CompletionCallback):
        self.engine = engine
        self.options = options
        self.callback = callback
        self.closed = False
        self._invalidated = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._watch_loop())

    def close(self) -> None:
        self.closed = True
        if self._task is not None:
            self._task.cancel()

    def invalidate(self) -> None:
        self._invalidated.set()

    async def _snapshot(self) -> Dict[str, int]:
        return await asyncio.get_running_loop().run_in_executor(
            None, self.engine.snapshot_watched_files
        )

    async def _compile_and_report(self) -> None:
        error, stats = await self.engine.compile()
        if not self.closed:
            _deliver(self.callback, error, stats)

    async def _watch_loop(self) -> None:
        snapshot = await self._snapshot()
        await self._compile_and_report()

        while not self.closed:
            try:
                await asyncio.wait_for(self._invalidated.wait(), timeout=self.options.poll_interval)
            except asyncio.TimeoutError:
                pass

            try:
                current = await self._snapshot()
            except OSError as e:
                handle_error(e, "scanning watched files", severity=ErrorSeverity.WARNING,
                             reraise=False, logger=logger)
                continue
            if current == snapshot and not self._invalidated.is_set():
                continue

            self._invalidated.clear()
            snapshot = current
            logger.info("Change detected, rebuilding")
            try:
                self.engine.hooks.call(BuildEvent.INVALID.value)
                self.engine.hooks.call(BuildEvent.WATCH_RUN.value)
            except Exception as e:
                handle_error(e, "watch hooks", reraise=False, logger=logger)
            await self._compile_and_report()
