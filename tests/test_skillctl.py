"""Tests for skillctl.py - Entry point and error handling."""

from unittest.mock import patch

import pytest

from skillctl.errors import ResolutionError
from skillctl.skillctl import build_parser, main


class TestBuildParser:

    def test_registers_commands(self):
        parser = build_parser()
        args = parser.parse_args(["-vv", "repo", "add", "demo", "https://example.com/x.git", "--ref", "v1"])
        assert args.verbose == 2
        assert (args.command, args.repo_command, args.alias, args.ref) == ("repo", "add", "demo", "v1")

    def test_sync_is_top_level(self):
        assert build_parser().parse_args(["sync"]).command == "sync"


class TestMain:

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage: skillctl" in capsys.readouterr().out

    def test_config_where(self, capsys, isolated_home):
        main(["--no-color", "config", "where"])
        captured = capsys.readouterr()
        assert f"State file: {isolated_home / 'skillctl.yaml'}" in captured.out + captured.err

    def test_errors_exit_with_status_1(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["skill", "remove", "ghost", "-y"])
        assert exc.value.code == 1
        assert "Skill 'ghost' is not installed" in capsys.readouterr().err

    def test_skillctl_error_is_reported(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["repo", "update", "ghost"])
        assert exc.value.code == 1
        assert "Error: Repository 'ghost' is not registered" in capsys.readouterr().err

    def test_resolution_diagnostic_shown_with_verbose(self, capsys):
        error = ResolutionError("Failed to clone", "fatal: repository not found")
        with (
            patch("skillctl.core.coordinator.SkillManager.register_repo", side_effect=error),
            pytest.raises(SystemExit),
        ):
            main(["-v", "repo", "add", "demo", "https://example.com/missing.git"])
        err = capsys.readouterr().err
        assert "Error: Failed to clone" in err
        assert "fatal: repository not found" in err
