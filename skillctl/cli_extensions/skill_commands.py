"""CLI commands for installing and managing skills."""

import argparse
import sys

from skillctl.cli_extensions.reporting import short_sha, show_link_outcomes
from skillctl.core import PathState, SkillManager
from skillctl.output import MessageType, VerbosityLevel, message
from skillctl.utils import confirm


class SkillCommands:
    """Manages CLI commands for skills."""

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add skill-related CLI arguments.

        Args:
            subparsers: The argparse subparsers to add to
        """
        skill_parser = subparsers.add_parser("skill", help="Manage skills")
        skill_sub = skill_parser.add_subparsers(dest="skill_command", help="Skill commands")

        # skill install
        install_parser = skill_sub.add_parser("install", help="Install a skill from a registered repository")
        install_parser.add_argument("repo", help="Repository alias")
        install_parser.add_argument("path", help="Skill directory inside the repository (e.g. skills/crawl)")
        install_parser.add_argument("-n", "--name", help="Custom name for the skill")

        # skill list
        skill_sub.add_parser("list", help="List installed skills")

        # skill info
        info_parser = skill_sub.add_parser("info", help="Show details of an installed skill")
        info_parser.add_argument("name", help="Skill name")

        # skill remove
        rm_parser = skill_sub.add_parser("remove", help="Remove an installed skill")
        rm_parser.add_argument("name", help="Skill name")
        rm_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

        # sync (top level: it spans every skill and every agent)
        subparsers.add_parser("sync", help="Re-create the symlink of every skill in every agent")

    @classmethod
    def process_cli_command(cls, args: argparse.Namespace, manager: SkillManager) -> None:
        """Process skill CLI commands.

        Args:
            args: Parsed command-line arguments
            manager: Coordinator to run the command against
        """
        if getattr(args, "command", None) == "sync":
            cls.sync(manager)
            return

        cmd = getattr(args, "skill_command", None)
        if cmd is None:
            cls._show_usage()
            return

        if cmd == "install":
            cls.install(manager, args.repo, args.path, getattr(args, "name", None))
        elif cmd == "list":
            cls.list_skills(manager)
        elif cmd == "info":
            cls.show_skill(manager, args.name)
        elif cmd == "remove":
            cls.remove(manager, args.name, assume_yes=getattr(args, "yes", False))

    @staticmethod
    def _show_usage() -> None:
        message("Usage: skillctl skill <command>", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("Available commands:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  install   Install a skill from a registered repository", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  list      List all skills", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  info      Show skill info", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  remove    Remove a skill", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def install(manager: SkillManager, repo_alias: str, skill_path: str, name: str | None = None) -> None:
        result = manager.install_skill(repo_alias, skill_path, name)
        show_link_outcomes(result.links)

        repo = result.state["repos"][repo_alias]
        agents = result.state["agents"]
        message(f"Successfully installed {result.subject}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        message(f"  Repository: {repo_alias} ({repo['url']})", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Path: {skill_path}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  SHA: {short_sha(repo['sha'])}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Agents: {', '.join(agents) if agents else 'none'}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def list_skills(manager: SkillManager) -> None:
        """List installed skills and the agents they are linked into."""
        state = manager.config.load()
        skills = state["skills"]

        if not skills:
            message("No skills installed.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(
                "Use 'skillctl skill install <repo-alias> <path>' to install a skill.",
                MessageType.NORMAL,
                VerbosityLevel.ALWAYS,
            )
            return

        message("\n=== Installed Skills ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        for name, skill in skills.items():
            repo = state["repos"].get(skill["repo_alias"])
            message(f"  {name}", MessageType.INFO, VerbosityLevel.ALWAYS)
            message(
                f"    Repository: {skill['repo_alias']} ({repo['url'] if repo else 'unknown'})",
                MessageType.NORMAL,
                VerbosityLevel.ALWAYS,
            )
            message(f"    Path: {skill['path']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            if repo:
                message(f"    SHA: {short_sha(repo['sha'])}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    Installed: {skill['installed_at']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"Total: {len(skills)} skill(s)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        if state["agents"]:
            message(f"\nLinked to {len(state['agents'])} agent(s):", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            for agent in state["agents"]:
                message(f"  - {agent}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        else:
            message("\nWarning: No agents configured.", MessageType.WARNING, VerbosityLevel.ALWAYS)
            message("Use 'skillctl agent add <path>' to add agents.", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def show_skill(manager: SkillManager, name: str) -> None:
        """Show a skill's source and the state of its link in each agent."""
        state = manager.config.load()
        skill = state["skills"].get(name)
        if skill is None:
            message(f"Skill '{name}' is not installed", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        repo = state["repos"].get(skill["repo_alias"])
        source = manager.config.skill_source_path(skill)

        message(f"\nSkill: {name}\n", MessageType.INFO, VerbosityLevel.ALWAYS)
        message("Repository:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Alias: {skill['repo_alias']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if repo:
            message(f"  URL: {repo['url']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"  Ref: {repo['ref']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"  SHA: {repo['sha']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        else:
            message("  (repository record missing)", MessageType.WARNING, VerbosityLevel.ALWAYS)
        message(f"  Source: {source}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Path: {skill['path']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Installed: {skill['installed_at']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        statuses = manager.link_status(name)
        if not statuses:
            message("Not linked to any agents", MessageType.WARNING, VerbosityLevel.ALWAYS)
            message("Use 'skillctl agent add <path>' to add agents.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        message("Linked agents:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        for agent, link_state in statuses.items():
            if link_state.points_at(source):
                message(f"  {agent}: linked", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
            elif link_state.kind == PathState.SYMLINK:
                message(f"  {agent}: points elsewhere ({link_state.target})", MessageType.WARNING,
                        VerbosityLevel.ALWAYS)
            elif link_state.kind == PathState.REGULAR:
                message(f"  {agent}: occupied by a regular file or directory", MessageType.WARNING,
                        VerbosityLevel.ALWAYS)
            else:
                message(f"  {agent}: missing (run 'skillctl sync')", MessageType.WARNING, VerbosityLevel.ALWAYS)

    @staticmethod
    def remove(manager: SkillManager, name: str, assume_yes: bool = False) -> None:
        if manager.config.get_skill(name) is None:
            message(f"Skill '{name}' is not installed", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        if not assume_yes and not confirm(f"Remove skill '{name}'?"):
            message("Cancelled.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        result = manager.remove_skill(name)
        show_link_outcomes(result.links)
        message(f"Successfully removed {name}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        message(
            "Note: The parent repository remains registered. Use 'skillctl repo remove' to remove it.",
            MessageType.NORMAL,
            VerbosityLevel.ALWAYS,
        )

    @staticmethod
    def sync(manager: SkillManager) -> None:
        report = manager.sync()
        show_link_outcomes(report)
        if report.failures:
            sys.exit(1)
        message(f"Synced {len(report)} link(s)", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
