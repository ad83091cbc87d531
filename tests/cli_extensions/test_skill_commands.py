"""Tests for cli_extensions/skill_commands.py."""

import os
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from skillctl.cli_extensions.skill_commands import SkillCommands
from skillctl.core import BatchReport, LinkOutcome, LinkStatus

URL = "https://example.com/demo.git"


def _capture():
    messages = []
    return messages, patch(
        "skillctl.cli_extensions.skill_commands.message",
        side_effect=lambda t, *a, **kw: messages.append(t),
    )


class TestSkillAddCliArguments:

    def test_adds_skill_and_sync_parsers(self):
        mock_subparsers = Mock()
        mock_skill_parser = Mock()
        mock_skill_sub = Mock()
        mock_skill_parser.add_subparsers.return_value = mock_skill_sub
        mock_subparsers.add_parser.return_value = mock_skill_parser

        SkillCommands.add_cli_arguments(mock_subparsers)

        top = [c[0][0] for c in mock_subparsers.add_parser.call_args_list]
        sub = [c[0][0] for c in mock_skill_sub.add_parser.call_args_list]
        assert top == ["skill", "sync"]
        assert sub == ["install", "list", "info", "remove"]


class TestSkillProcessCliCommand:

    def test_no_subcommand_shows_usage(self):
        args = Mock(command="skill", skill_command=None)
        messages, patcher = _capture()
        with patcher:
            SkillCommands.process_cli_command(args, Mock())
        assert "Usage: skillctl skill <command>" in messages

    def test_install_delegates(self):
        args = Mock(command="skill", skill_command="install", repo="demo", path="skills/x")
        args.name = "custom"
        manager = Mock()
        with patch.object(SkillCommands, "install") as mock_install:
            SkillCommands.process_cli_command(args, manager)
        mock_install.assert_called_once_with(manager, "demo", "skills/x", "custom")

    def test_sync_delegates(self):
        args = Mock(command="sync")
        with patch.object(SkillCommands, "sync") as mock_sync:
            SkillCommands.process_cli_command(args, Mock())
        mock_sync.assert_called_once()


class TestSkillCommandsWithManager:

    def test_install_summary(self, manager, make_agent):
        manager.register_repo("demo", URL)
        agent = make_agent("a1")
        manager.add_agent(agent)
        messages, patcher = _capture()

        with patcher:
            SkillCommands.install(manager, "demo", "skills/x")

        assert "Successfully installed x" in messages
        assert f"  Repository: demo ({URL})" in messages
        assert f"  Agents: {agent}" in messages

    def test_list(self, manager):
        manager.register_repo("demo", URL)
        manager.install_skill("demo", "skills/x")
        messages, patcher = _capture()

        with patcher:
            SkillCommands.list_skills(manager)

        output = "\n".join(messages)
        assert "  x" in messages
        assert "Total: 1 skill(s)" in output
        assert "No agents configured" in output

    def test_list_empty(self, manager):
        messages, patcher = _capture()
        with patcher:
            SkillCommands.list_skills(manager)
        assert "No skills installed." in messages

    def test_info_shows_link_states(self, manager, config, make_agent):
        manager.register_repo("demo", URL)
        linked = make_agent("linked")
        broken = make_agent("broken")
        manager.add_agent(linked)
        manager.add_agent(broken)
        manager.install_skill("demo", "skills/x")
        os.unlink(Path(broken) / "skills" / "x")
        messages, patcher = _capture()

        with patcher:
            SkillCommands.show_skill(manager, "x")

        assert f"  {linked}: linked" in messages
        assert f"  {broken}: missing (run 'skillctl sync')" in messages

    def test_info_unknown(self, manager):
        with patch("skillctl.cli_extensions.skill_commands.message"), pytest.raises(SystemExit):
            SkillCommands.show_skill(manager, "ghost")

    def test_remove_confirmed(self, manager, config):
        manager.register_repo("demo", URL)
        manager.install_skill("demo", "skills/x")
        with (
            patch("skillctl.cli_extensions.skill_commands.message"),
            patch("skillctl.cli_extensions.skill_commands.confirm", return_value=True),
        ):
            SkillCommands.remove(manager, "x")
        assert config.get_skill("x") is None
        assert config.get_repo("demo") is not None

    def test_remove_cancelled(self, manager, config):
        manager.register_repo("demo", URL)
        manager.install_skill("demo", "skills/x")
        with (
            patch("skillctl.cli_extensions.skill_commands.message"),
            patch("skillctl.cli_extensions.skill_commands.confirm", return_value=False),
        ):
            SkillCommands.remove(manager, "x")
        assert config.get_skill("x") is not None

    def test_remove_unknown(self, manager):
        with patch("skillctl.cli_extensions.skill_commands.message"), pytest.raises(SystemExit):
            SkillCommands.remove(manager, "ghost", assume_yes=True)


class TestSync:

    def test_success(self):
        manager = Mock()
        manager.sync.return_value = BatchReport([LinkOutcome("/a", "x", LinkStatus.LINKED)])
        messages, patcher = _capture()
        with patcher:
            SkillCommands.sync(manager)
        assert "Synced 1 link(s)" in messages

    def test_failure_exits(self):
        manager = Mock()
        manager.sync.return_value = BatchReport([LinkOutcome("/a", "x", LinkStatus.ERROR, "denied")])
        with (
            patch("skillctl.cli_extensions.reporting.message"),
            patch("skillctl.cli_extensions.skill_commands.message"),
            pytest.raises(SystemExit),
        ):
            SkillCommands.sync(manager)
