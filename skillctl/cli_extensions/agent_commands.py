"""CLI commands for managing agent directories."""

import argparse
import sys
from pathlib import Path

from skillctl.cli_extensions.reporting import show_link_outcomes
from skillctl.core import SKILLS_DIR, SkillManager, normalize_agent_path
from skillctl.output import MessageType, VerbosityLevel, message
from skillctl.utils import confirm


class AgentCommands:
    """Manages CLI commands for agent directories."""

    @classmethod
    def add_cli_arguments(cls, subparsers) -> None:
        """Add agent-related CLI arguments.

        Args:
            subparsers: The argparse subparsers to add to
        """
        agent_parser = subparsers.add_parser("agent", help="Manage agent directories")
        agent_subparsers = agent_parser.add_subparsers(dest="agent_command", help="Agent commands")

        # agent add
        add_parser = agent_subparsers.add_parser("add", help="Register an agent directory")
        add_parser.add_argument("path", help="Agent directory (must contain a 'skills' subdirectory)")
        add_parser.add_argument(
            "--strict",
            action="store_true",
            help="Do not add the agent if any installed skill fails to link",
        )

        # agent list
        agent_subparsers.add_parser("list", help="List registered agent directories")

        # agent remove
        rm_parser = agent_subparsers.add_parser("remove", help="Unregister an agent and remove its skill links")
        rm_parser.add_argument("path", help="Agent directory")
        rm_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    @classmethod
    def process_cli_command(cls, args: argparse.Namespace, manager: SkillManager) -> None:
        """Process agent CLI commands.

        Args:
            args: Parsed command-line arguments
            manager: Coordinator to run the command against
        """
        if not hasattr(args, "agent_command") or args.agent_command is None:
            message("No agent subcommand specified", MessageType.ERROR, VerbosityLevel.ALWAYS)
            message("Available commands: add, list, remove", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        if args.agent_command == "add":
            cls.add_agent(manager, args.path, strict=getattr(args, "strict", False))
        elif args.agent_command == "list":
            cls.list_agents(manager)
        elif args.agent_command == "remove":
            cls.remove_agent(manager, args.path, assume_yes=getattr(args, "yes", False))

    @classmethod
    def add_agent(cls, manager: SkillManager, path: str, strict: bool = False) -> None:
        """Register an agent and link the installed skills into it.

        Args:
            manager: Coordinator
            path: Agent directory as typed by the user
            strict: Roll back if any skill fails to link
        """
        result = manager.add_agent(path, strict=strict)
        show_link_outcomes(result.links)

        linked = len(result.links) - len(result.links.failures)
        message(f"Successfully added agent {result.subject}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        message(f"  Linked {linked} skill(s)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @classmethod
    def list_agents(cls, manager: SkillManager) -> None:
        """List registered agents with a check of their skills directory."""
        agents = manager.config.get_agents()

        if not agents:
            message("No agents configured.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("Use 'skillctl agent add <path>' to add an agent.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        message("\n=== Configured Agents ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        for agent in agents:
            if (Path(agent) / SKILLS_DIR).is_dir():
                message(f"  {agent}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            else:
                message(f"  {agent} (missing '{SKILLS_DIR}' directory)", MessageType.WARNING, VerbosityLevel.ALWAYS)

        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"Total: {len(agents)} agent(s)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @classmethod
    def remove_agent(cls, manager: SkillManager, path: str, assume_yes: bool = False) -> None:
        """Unregister an agent after confirming.

        Args:
            manager: Coordinator
            path: Agent directory as typed by the user
            assume_yes: Skip the confirmation prompt
        """
        normalized = normalize_agent_path(path)
        if normalized not in manager.config.get_agents():
            message(f"Agent not found in configuration: {normalized}", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        if not assume_yes and not confirm(f"Remove agent '{normalized}' and its skill links?"):
            message("Cancelled.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        result = manager.remove_agent(normalized)
        show_link_outcomes(result.links)
        message(f"Successfully removed agent {normalized}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
