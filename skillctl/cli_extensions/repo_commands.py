"""CLI commands for managing skill repositories."""

import argparse
import sys

from skillctl.cli_extensions.reporting import short_sha, show_link_outcomes
from skillctl.core import SkillManager
from skillctl.output import MessageType, VerbosityLevel, message
from skillctl.utils import confirm


class RepoCommands:
    """Manages CLI commands for repository operations."""

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add repository-related CLI arguments.

        Args:
            subparsers: The argparse subparsers to add to
        """
        repo_parser = subparsers.add_parser("repo", help="Manage skill repositories")
        repo_sub = repo_parser.add_subparsers(dest="repo_command", help="Repository commands")

        # repo add
        add_parser = repo_sub.add_parser("add", help="Register a repository")
        add_parser.add_argument("alias", help="Short name (lowercase letters, numbers, hyphens)")
        add_parser.add_argument("url", help="Git URL")
        add_parser.add_argument("-r", "--ref", help="Branch or tag to track (default: configured default ref)")

        # repo list
        repo_sub.add_parser("list", help="List registered repositories")

        # repo info
        info_parser = repo_sub.add_parser("info", help="Show details of a registered repository")
        info_parser.add_argument("alias", help="Repository alias")

        # repo remove
        rm_parser = repo_sub.add_parser("remove", help="Remove a repository and the skills installed from it")
        rm_parser.add_argument("alias", help="Repository alias")
        rm_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

        # repo update
        update_parser = repo_sub.add_parser("update", help="Update a repository to the latest version of its ref")
        update_parser.add_argument("alias", nargs="?", help="Repository alias")
        update_parser.add_argument("-a", "--all", action="store_true", help="Update all registered repositories")

    @classmethod
    def process_cli_command(cls, args: argparse.Namespace, manager: SkillManager) -> None:
        """Process repo CLI commands.

        Args:
            args: Parsed command-line arguments
            manager: Coordinator to run the command against
        """
        cmd = getattr(args, "repo_command", None)
        if cmd is None:
            cls._show_usage()
            return

        if cmd == "add":
            cls.add_repo(manager, args.alias, args.url, getattr(args, "ref", None))
        elif cmd == "list":
            cls.list_repos(manager)
        elif cmd == "info":
            cls.show_repo(manager, args.alias)
        elif cmd == "remove":
            cls.remove_repo(manager, args.alias, assume_yes=getattr(args, "yes", False))
        elif cmd == "update":
            if getattr(args, "all", False):
                cls.update_all(manager)
            elif getattr(args, "alias", None):
                cls.update_repo(manager, args.alias)
            else:
                message("Usage: skillctl repo update <alias> | --all", MessageType.ERROR, VerbosityLevel.ALWAYS)
                sys.exit(1)

    @staticmethod
    def _show_usage() -> None:
        message("Usage: skillctl repo <command>", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("Available commands:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  add       Register a repository", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  list      List all repositories", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  info      Show repository info", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  remove    Remove a repository", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("  update    Update a repository", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def add_repo(manager: SkillManager, alias: str, url: str, ref: str | None = None) -> None:
        result = manager.register_repo(alias, url, ref)
        repo = result.state["repos"][alias]
        message(f"Successfully registered {alias}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        message(f"  URL: {repo['url']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Ref: {repo['ref']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  SHA: {short_sha(repo['sha'])}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Location: {manager.config.repo_path(alias)}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def list_repos(manager: SkillManager) -> None:
        """List registered repositories."""
        state = manager.config.load()
        repos = state["repos"]

        if not repos:
            message("No repositories registered.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("Use 'skillctl repo add <alias> <url>' to register one.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        message("\n=== Registered Repositories ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        for alias, repo in repos.items():
            skill_count = sum(1 for skill in state["skills"].values() if skill["repo_alias"] == alias)
            message(f"  {alias}", MessageType.INFO, VerbosityLevel.ALWAYS)
            message(f"    URL: {repo['url']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    Ref: {repo['ref']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    SHA: {short_sha(repo['sha'])}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    Skills: {skill_count} installed", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"    Added: {repo['added_at']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"Total: {len(repos)} repository(ies)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def show_repo(manager: SkillManager, alias: str) -> None:
        repo = manager.config.get_repo(alias)
        if repo is None:
            message(f"Repository '{alias}' is not registered", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        skills = manager.config.skills_by_repo(alias)
        message(f"\nRepository: {alias}\n", MessageType.INFO, VerbosityLevel.ALWAYS)
        message(f"  URL: {repo['url']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Ref: {repo['ref']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  SHA: {repo['sha']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Location: {manager.config.repo_path(alias)}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Added: {repo['added_at']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        if skills:
            message("Installed skills:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            for name, skill in skills:
                message(f"  - {name} ({skill['path']})", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message(f"Total: {len(skills)} skill(s)", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        else:
            message("No skills installed from this repository", MessageType.WARNING, VerbosityLevel.ALWAYS)
            message(
                f"Use 'skillctl skill install {alias} <skill-path>' to install skills.",
                MessageType.NORMAL,
                VerbosityLevel.ALWAYS,
            )

    @staticmethod
    def remove_repo(manager: SkillManager, alias: str, assume_yes: bool = False) -> None:
        """Remove a repository after confirming, cascading to its skills."""
        if manager.config.get_repo(alias) is None:
            message(f"Repository '{alias}' is not registered", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        dependents = [name for name, _ in manager.config.skills_by_repo(alias)]
        if dependents:
            message(
                f"The following {len(dependents)} skill(s) are installed from this repository:",
                MessageType.WARNING,
                VerbosityLevel.ALWAYS,
            )
            for name in dependents:
                message(f"  - {name}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            question = f"Remove these {len(dependents)} skill(s) and the repository?"
        else:
            question = f"Remove repository '{alias}'?"

        if not assume_yes and not confirm(question):
            message("Cancelled.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        result = manager.remove_repo(alias, cascade=bool(dependents))
        show_link_outcomes(result.links)
        message(f"Successfully removed {alias}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        if result.removed_skills:
            message(f"  Removed {len(result.removed_skills)} skill(s) and repository", MessageType.NORMAL,
                    VerbosityLevel.ALWAYS)

    @staticmethod
    def update_repo(manager: SkillManager, alias: str) -> None:
        outcome = manager.update_repo(alias)
        if not outcome.changed:
            message(f"{alias} is already up to date", MessageType.INFO, VerbosityLevel.ALWAYS)
            return

        skill_count = len(manager.config.skills_by_repo(alias))
        message(f"Successfully updated {alias}", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
        message(
            f"  SHA: {short_sha(outcome.old_sha)} -> {short_sha(outcome.new_sha)}",
            MessageType.NORMAL,
            VerbosityLevel.ALWAYS,
        )
        message(f"  {skill_count} skill(s) updated", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def update_all(manager: SkillManager) -> None:
        """Update every repository and print a summary."""
        report = manager.update_all_repos()
        if not len(report):
            message("No repositories registered.", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        message(f"\nUpdating {len(report)} repository(ies)...\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        for outcome in report:
            if outcome.changed:
                message(
                    f"Updated {outcome.alias} ({short_sha(outcome.old_sha)} -> {short_sha(outcome.new_sha)})",
                    MessageType.SUCCESS,
                    VerbosityLevel.ALWAYS,
                )
            elif outcome.ok:
                message(f"{outcome.alias} is already up to date", MessageType.INFO, VerbosityLevel.ALWAYS)
            else:
                message(f"Failed to update {outcome.alias}: {outcome.error}", MessageType.ERROR, VerbosityLevel.ALWAYS)
                if outcome.diagnostic:
                    message(f"  {outcome.diagnostic}", MessageType.ERROR, VerbosityLevel.VERBOSE)

        message("\nSummary:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Updated: {report.updated}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  Unchanged: {report.unchanged}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if report.failed:
            message(f"  Failed: {report.failed}", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)
