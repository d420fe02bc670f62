"""
Command-line interface for twinbuild.

This module provides the ``twinbuild`` entry point: a one-shot or
watching build of the browser and server bundles for the requested
environments, and removal of the build output directory.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from ..config import get_build_settings
from ..orchestration import Compiler
from ..validation import ValidationError, handle_cli_error

# --- Logging Setup ---
LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twinbuild",
        description="Build browser and server bundles for one or more environments.",
    )
    parser.add_argument(
        "--dir",
        default=".",
        help="Project root containing twinbuild.toml. Defaults to the current directory.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build bundles once, or continuously with --watch.")
    build.add_argument(
        "-e",
        "--env",
        dest="envs",
        action="append",
        help="Environment to build (repeatable). Defaults to 'development'.",
    )
    build.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Keep running and rebuild when watched files change.",
    )
    build.add_argument(
        "--clean",
        action="store_true",
        help="Remove the build output directory before building.",
    )

    subparsers.add_parser("clean", help="Remove the build output directory.")
    return parser


async def _wait_for_shutdown() -> None:
    """Block until SIGINT or SIGTERM is received."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)
    try:
        await stop.wait()
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)


async def run_build(args: argparse.Namespace) -> int:
    """
    Run the ``build`` command.

    Returns:
        Process exit code: 0 when the initial build succeeded, 1 otherwise
    """
    envs = args.envs or ["development"]
    compiler = Compiler(dir=args.dir, envs=envs, watch=args.watch)

    if args.clean:
        await compiler.clean()

    loop = asyncio.get_running_loop()
    first_build = loop.create_future()

    def on_initial_build(error, stats) -> None:
        if not first_build.done():
            first_build.set_result((error, stats))

    watcher = compiler.start(on_initial_build)
    error, stats = await first_build
    failed = error is not None or stats.has_errors()

    if failed:
        logger.error(f"Build failed for {envs}")
    else:
        logger.info(f"Build finished for {envs}")

    if not args.watch:
        return 1 if failed else 0

    logger.info("Watching for changes. Press Ctrl+C to stop.")
    try:
        await _wait_for_shutdown()
    finally:
        watcher.close()
    return 0


async def run_clean(args: argparse.Namespace) -> int:
    compiler = Compiler(dir=args.dir, envs=[])
    await compiler.clean()
    logger.info(f"Removed {compiler.output_dir}")
    return 0


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for twinbuild.

    Raises:
        SystemExit: With the command's exit code, or 1 on configuration errors.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
    )

    try:
        get_build_settings(args.dir)
    except (ValidationError, ValueError, OSError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            logger=logger,
        )

    command = run_build if args.command == "build" else run_clean
    try:
        exit_code = asyncio.run(command(args))
    except (ValidationError, ValueError, OSError) as e:
        handle_cli_error(error=e, context=args.command, exit_code=1, logger=logger)
    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
