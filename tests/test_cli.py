"""
Tests for the twinbuild command-line interface.
"""

import pytest

from twinbuild.cli import build_parser, main_cli


class TestParser:
    """Test cases for argument parsing."""

    def test_build_defaults(self):
        args = build_parser().parse_args(["build"])

        assert args.command == "build"
        assert args.dir == "."
        assert args.envs is None
        assert args.watch is False
        assert args.clean is False

    def test_repeatable_env(self):
        args = build_parser().parse_args(
            ["--dir", "app", "build", "-e", "development", "--env", "production", "-w"]
        )

        assert args.dir == "app"
        assert args.envs == ["development", "production"]
        assert args.watch is True

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


@pytest.mark.integration
class TestMainCli:
    """End-to-end runs of main_cli against a scripted project."""

    def test_build_succeeds(self, project_dir):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--dir", str(project_dir), "build"])

        assert exc_info.value.code == 0
        assert (project_dir / ".twinbuild" / "development" / "client" / "client-development.js").exists()
        assert (project_dir / ".twinbuild" / "development" / "server" / "server.js").exists()

    def test_build_with_compilation_errors_fails(self, failing_project_dir):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--dir", str(failing_project_dir), "build"])

        assert exc_info.value.code == 1

    def test_build_with_clean_removes_stale_output(self, project_dir):
        stale = project_dir / ".twinbuild" / "production" / "client" / "stale.js"
        stale.parent.mkdir(parents=True)
        stale.write_text("old")

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--dir", str(project_dir), "build", "--clean", "-e", "production"])

        assert exc_info.value.code == 0
        assert not stale.exists()
        assert (project_dir / ".twinbuild" / "production" / "client" / "client-production.js").exists()

    def test_clean(self, project_dir):
        (project_dir / ".twinbuild").mkdir()

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--dir", str(project_dir), "clean"])

        assert exc_info.value.code == 0
        assert not (project_dir / ".twinbuild").exists()

    def test_invalid_config_exits_with_error(self, tmp_path):
        (tmp_path / "twinbuild.toml").write_text("[build.watch]\npoll_interval = -1\n")

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--dir", str(tmp_path), "build"])

        assert exc_info.value.code == 1

    def test_missing_targets_exits_with_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--dir", str(tmp_path), "build"])

        assert exc_info.value.code == 1
