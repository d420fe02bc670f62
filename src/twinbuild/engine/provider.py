"""
Default config provider for SubprocessEngine.

Turns the ``[targets.*]`` tables of ``twinbuild.toml`` into
CommandTargetConfig instances and wires the browser and server configs of
an environment together through the shared state bag.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from ..models.profiles import SharedOptions, TargetKind
from ..models.stats import ChildStats
from ..validation import ValidationError
from .command_engine import CommandTargetConfig

logger = logging.getLogger(__name__)

ENV_PLACEHOLDER = "<ENV>"
OUTDIR_PLACEHOLDER = "<OUTDIR>"

I18N_MANIFEST_FILENAME = "i18n-manifest.json"
CLIENT_MANIFEST_FILENAME = "client-manifest.json"
CLIENT_MANIFEST_ENV_VAR = "TWINBUILD_CLIENT_MANIFEST"


def _read_i18n_manifest(output_dir: Path) -> Dict[str, Any]:
    manifest_path = output_dir / I18N_MANIFEST_FILENAME
    if not manifest_path.exists():
        return {}
    with open(manifest_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _client_manifest(child: ChildStats) -> Dict[str, int]:
    return {asset.name: asset.size for asset in child.assets}


def _publish_client_state(options: SharedOptions):
    """on_complete for browser configs: hand the build's output to the server build."""

    def on_complete(config: CommandTargetConfig, child: ChildStats) -> None:
        state = options.state
        state.client_builds[config.env] = child
        if child.errors:
            error = RuntimeError(f"{config.name} build for {config.env} failed")
            state.client_chunk_metadata.reject(error)
            state.i18n_manifest.reject(error)
            return
        state.client_chunk_metadata.resolve(_client_manifest(child))
        try:
            state.i18n_manifest.resolve(_read_i18n_manifest(config.output_dir))
        except (OSError, ValueError) as e:
            state.i18n_manifest.reject(e)

    return on_complete


def _await_client_state(options: SharedOptions):
    """prepare for server configs: wait for the client manifest and export it."""

    async def prepare(config: CommandTargetConfig) -> Dict[str, str]:
        client = options.state.client_builds.get(config.env)
        if client is None:
            # No browser build of this environment yet; wait for the first one
            manifest = await options.state.client_chunk_metadata.get()
        elif client.errors:
            raise RuntimeError(f"{client.name} build for {config.env} failed")
        else:
            manifest = _client_manifest(client)

        config.output_dir.mkdir(parents=True, exist_ok=True)
        manifest_path = config.output_dir / CLIENT_MANIFEST_FILENAME
        manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        return {CLIENT_MANIFEST_ENV_VAR: str(manifest_path)}

    return prepare


def command_config_provider(target: TargetKind, env: str, options: SharedOptions) -> CommandTargetConfig:
    """
    Build the CommandTargetConfig for one (target, env) pair.

    Raises:
        ValidationError: If ``twinbuild.toml`` has no table for ``target``
    """
    target_settings = options.project_config.target_for(target, env)
    if target_settings is None:
        raise ValidationError(
            f"No [targets.{target.value}] table configured for environment '{env}'",
            field_name=f"targets.{target.value}",
        )

    output_dir = options.dir / target_settings.output_dir.replace(ENV_PLACEHOLDER, env)
    command = (
        target_settings.command
        .replace(ENV_PLACEHOLDER, env)
        .replace(OUTDIR_PLACEHOLDER, str(output_dir))
    )

    config = CommandTargetConfig(
        name=target.child_name,
        env=env,
        target=target,
        command=command,
        cwd=options.dir,
        output_dir=output_dir,
        watch_paths=[options.dir / path for path in target_settings.watch],
        env_vars=dict(target_settings.env),
    )
    if target is TargetKind.BROWSER:
        config.on_complete = _publish_client_state(options)
    else:
        config.prepare = _await_client_state(options)
    return config
