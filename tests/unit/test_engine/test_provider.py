"""
Unit tests for the default SubprocessEngine config provider.
"""

import json
from pathlib import Path

import pytest

from twinbuild.config import validate_build_settings
from twinbuild.engine.provider import CLIENT_MANIFEST_ENV_VAR, command_config_provider
from twinbuild.models import Asset, ChildStats, SharedOptions, TargetKind
from twinbuild.orchestration.shared_state import DeferredState, SharedState
from twinbuild.validation import ValidationError


@pytest.fixture
def settings():
    return validate_build_settings({
        "targets": {
            "browser": {
                "command": "bundle --env <ENV> --out <OUTDIR>",
                "output_dir": "dist/client",
                "watch": ["src"],
                "env": {"NODE_ENV": "development"},
            },
            "server": {"command": "bundle-server --out <OUTDIR>", "output_dir": "dist/server"},
        },
        "environments": {
            "production": {"targets": {"browser": {"command": "bundle --minify --out <OUTDIR>"}}},
        },
    })


@pytest.fixture
def options(tmp_path, settings):
    return SharedOptions(
        dir=tmp_path,
        watch=False,
        state=SharedState(),
        project_config=settings,
        legacy_pkg_config={},
    )


@pytest.mark.unit
class TestCommandConfigProvider:
    """Test cases for command_config_provider."""

    def test_browser_config(self, options, tmp_path):
        config = command_config_provider(TargetKind.BROWSER, "development", options)

        assert config.name == "client"
        assert config.env == "development"
        assert config.cwd == tmp_path
        assert config.output_dir == tmp_path / "dist/client"
        assert config.command == f"bundle --env development --out {tmp_path / 'dist/client'}"
        assert config.watch_paths == [tmp_path / "src"]
        assert config.env_vars == {"NODE_ENV": "development"}
        assert config.on_complete is not None
        assert config.prepare is None

    def test_server_config_waits_on_client(self, options):
        config = command_config_provider(TargetKind.SERVER, "development", options)

        assert config.name == "server"
        assert config.prepare is not None
        assert config.on_complete is None

    def test_environment_override_merges_over_base(self, options, tmp_path):
        config = command_config_provider(TargetKind.BROWSER, "production", options)

        assert config.command == f"bundle --minify --out {tmp_path / 'dist/client'}"
        assert config.watch_paths == [tmp_path / "src"]

    def test_missing_target_table(self, tmp_path):
        empty = SharedOptions(
            dir=tmp_path,
            watch=False,
            state=SharedState(),
            project_config=validate_build_settings({}),
            legacy_pkg_config={},
        )

        with pytest.raises(ValidationError, match=r"targets\.browser"):
            command_config_provider(TargetKind.BROWSER, "development", empty)

    def test_browser_success_publishes_manifests(self, options):
        config = command_config_provider(TargetKind.BROWSER, "development", options)
        config.output_dir.mkdir(parents=True)
        (config.output_dir / "i18n-manifest.json").write_text(json.dumps({"main.js": ["greeting"]}))

        config.on_complete(config, ChildStats(name="client", assets=[Asset("main.js", 10)]))

        assert options.state.client_chunk_metadata.state is DeferredState.RESOLVED
        assert options.state.i18n_manifest.state is DeferredState.RESOLVED

    def test_browser_failure_rejects_manifests(self, options):
        config = command_config_provider(TargetKind.BROWSER, "development", options)

        config.on_complete(config, ChildStats(name="client", errors=["SyntaxError"]))

        assert options.state.client_chunk_metadata.state is DeferredState.REJECTED
        assert options.state.i18n_manifest.state is DeferredState.REJECTED

    @pytest.mark.asyncio
    async def test_server_prepare_exports_client_manifest(self, options):
        browser = command_config_provider(TargetKind.BROWSER, "development", options)
        server = command_config_provider(TargetKind.SERVER, "development", options)
        browser.on_complete(browser, ChildStats(name="client", assets=[Asset("main.js", 10)]))

        extra_env = await server.prepare(server)

        manifest_path = server.output_dir / "client-manifest.json"
        assert extra_env == {CLIENT_MANIFEST_ENV_VAR: str(manifest_path)}
        assert json.loads(manifest_path.read_text()) == {"main.js": 10}

    @pytest.mark.asyncio
    async def test_server_reads_its_own_environments_client(self, options):
        dev_browser = command_config_provider(TargetKind.BROWSER, "development", options)
        prod_browser = command_config_provider(TargetKind.BROWSER, "production", options)
        prod_server = command_config_provider(TargetKind.SERVER, "production", options)
        dev_browser.on_complete(dev_browser, ChildStats(name="client", assets=[Asset("dev.js", 1)]))
        prod_browser.on_complete(prod_browser, ChildStats(name="client", assets=[Asset("prod.js", 2)]))

        extra_env = await prod_server.prepare(prod_server)

        manifest_path = extra_env[CLIENT_MANIFEST_ENV_VAR]
        assert json.loads(Path(manifest_path).read_text()) == {"prod.js": 2}
        assert await options.state.client_chunk_metadata.get() == {"dev.js": 1}

    @pytest.mark.asyncio
    async def test_server_follows_latest_client_build(self, options):
        browser = command_config_provider(TargetKind.BROWSER, "development", options)
        server = command_config_provider(TargetKind.SERVER, "development", options)

        browser.on_complete(browser, ChildStats(name="client", errors=["SyntaxError"]))
        with pytest.raises(RuntimeError, match="client build for development failed"):
            await server.prepare(server)

        browser.on_complete(browser, ChildStats(name="client", assets=[Asset("main.js", 10)]))
        extra_env = await server.prepare(server)

        assert json.loads(Path(extra_env[CLIENT_MANIFEST_ENV_VAR]).read_text()) == {"main.js": 10}
        assert options.state.client_chunk_metadata.state is DeferredState.REJECTED

    @pytest.mark.asyncio
    async def test_server_waits_for_first_client_when_none_built(self, options):
        server = command_config_provider(TargetKind.SERVER, "development", options)
        options.state.client_chunk_metadata.resolve({"shared.js": 3})

        extra_env = await server.prepare(server)

        assert json.loads(Path(extra_env[CLIENT_MANIFEST_ENV_VAR]).read_text()) == {"shared.js": 3}


@pytest.mark.unit
def test_env_placeholder_expands_in_output_dir(tmp_path):
    settings = validate_build_settings({
        "targets": {
            "browser": {"command": "bundle --out <OUTDIR>", "output_dir": "dist/<ENV>/client"},
        },
    })
    options = SharedOptions(
        dir=tmp_path,
        watch=False,
        state=SharedState(),
        project_config=settings,
        legacy_pkg_config={},
    )

    dev = command_config_provider(TargetKind.BROWSER, "development", options)
    prod = command_config_provider(TargetKind.BROWSER, "production", options)

    assert dev.output_dir == tmp_path / "dist" / "development" / "client"
    assert prod.output_dir == tmp_path / "dist" / "production" / "client"
    assert prod.command == f"bundle --out {tmp_path / 'dist' / 'production' / 'client'}"
