"""
Pytest configuration and shared fixtures for the twinbuild test suite.

This module provides common fixtures, a scriptable fake engine, and
configuration for all test modules in the project.
"""

import json
import sys
import textwrap
from pathlib import Path
from types import SimpleNamespace
from typing import Any, List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from twinbuild.engine.base import AbstractBuildEngine, WatchController  # noqa: E402
from twinbuild.models import BuildStats, ChildStats, Asset  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Fake Engine
# ============================================================================


class FakeWatcher(WatchController):
    """Records close/invalidate calls."""

    def __init__(self):
        self.closed = False
        self.invalidations = 0

    def close(self) -> None:
        self.closed = True

    def invalidate(self) -> None:
        self.invalidations += 1


class FakeEngine(AbstractBuildEngine):
    """
    Engine whose compilations are driven by the test.

    ``run``/``watch`` only record the completion handler; ``complete``
    then simulates the engine finishing a compilation.
    """

    def __init__(self, configs: List[Any]):
        super().__init__(configs)
        self.handler = None
        self.watch_options = None
        self.watcher = None
        self.run_calls = 0

    def run(self, callback) -> None:
        self.run_calls += 1
        self.handler = callback

    def watch(self, options, callback) -> FakeWatcher:
        self.watch_options = options
        self.handler = callback
        self.watcher = FakeWatcher()
        return self.watcher

    def complete(self, error=None, stats=None) -> None:
        if error is not None:
            self.hooks.call("failed", error)
        else:
            self.hooks.call("done", stats)
        self.handler(error, stats)


def fake_config_provider(target, env, options):
    """Config provider producing plain records for inspection."""
    return SimpleNamespace(name=target.child_name, target=target, env=env, options=options)


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def fake_engines():
    """Collects every FakeEngine created by ``fake_engine_factory``."""
    return []


@pytest.fixture
def fake_engine_factory(fake_engines):
    def factory(configs):
        engine = FakeEngine(configs)
        fake_engines.append(engine)
        return engine

    return factory


@pytest.fixture
def sample_stats():
    """Stats with one client and one server child, no errors."""
    return BuildStats(
        children=[
            ChildStats(name="client", assets=[Asset("main.js", 1200), Asset("main.js.map", 4000)]),
            ChildStats(name="server", assets=[Asset("server.js", 800)]),
        ],
        hash="00000001",
    )


# ============================================================================
# Project Fixtures
# ============================================================================

# Stand-in bundlers: small Python scripts that write output files.
CLIENT_BUNDLER = textwrap.dedent(
    """
    import pathlib, sys
    out = pathlib.Path(sys.argv[1])
    out.mkdir(parents=True, exist_ok=True)
    (out / f"client-{sys.argv[2]}.js").write_text("x" * 10)
    (out / "client.js.map").write_text("m" * 50)
    """
)

SERVER_BUNDLER = textwrap.dedent(
    """
    import os, pathlib, sys
    out = pathlib.Path(sys.argv[1])
    out.mkdir(parents=True, exist_ok=True)
    manifest = pathlib.Path(os.environ["TWINBUILD_CLIENT_MANIFEST"]).read_text()
    (out / "server.js").write_text(manifest)
    """
)

FAILING_BUNDLER = textwrap.dedent(
    """
    import sys
    sys.stderr.write("SyntaxError: Unexpected token (1:4)")
    sys.exit(2)
    """
)


def write_project(root: Path, browser_script: str = CLIENT_BUNDLER,
                  server_script: str = SERVER_BUNDLER) -> Path:
    """Write bundler scripts and a twinbuild.toml that runs them."""
    (root / "build_client.py").write_text(browser_script, encoding="utf-8")
    (root / "build_server.py").write_text(server_script, encoding="utf-8")
    (root / "src").mkdir(exist_ok=True)
    (root / "src" / "index.js").write_text("console.log('hi')\n", encoding="utf-8")

    client_command = json.dumps(f'"{sys.executable}" build_client.py "<OUTDIR>" <ENV>')
    server_command = json.dumps(f'"{sys.executable}" build_server.py "<OUTDIR>"')

    config = textwrap.dedent(
        f"""
        [build]
        output_dir = ".twinbuild"
        asset_path = "/assets"

        [build.watch]
        poll_interval = 0.05

        [targets.browser]
        command = {client_command}
        output_dir = ".twinbuild/<ENV>/client"
        watch = ["src"]

        [targets.server]
        command = {server_command}
        output_dir = ".twinbuild/<ENV>/server"
        """
    )
    (root / "twinbuild.toml").write_text(config, encoding="utf-8")
    return root


@pytest.fixture
def project_dir(tmp_path):
    """A project root whose bundlers are small Python scripts."""
    return write_project(tmp_path)


@pytest.fixture
def failing_project_dir(tmp_path):
    """A project root whose browser bundler exits with an error."""
    return write_project(tmp_path, browser_script=FAILING_BUNDLER)


@pytest.fixture(autouse=True)
def clear_settings_after_test():
    """Automatically clear the settings cache after each test."""
    yield
    from twinbuild.config import clear_settings_cache

    clear_settings_cache()
