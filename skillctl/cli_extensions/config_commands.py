"""CLI commands for inspecting and adjusting the skillctl configuration."""

import argparse
import sys

from skillctl.config import Config
from skillctl.output import MessageType, VerbosityLevel, message


class ConfigCommands:
    """Manages configuration-related CLI commands."""

    @staticmethod
    def add_cli_arguments(subparsers) -> None:
        """Add config subcommands to the argument parser.

        Args:
            subparsers: The subparsers object to add commands to
        """
        config_parser = subparsers.add_parser("config", help="Show configuration and settings")
        config_subparsers = config_parser.add_subparsers(dest="config_command", help="Configuration commands")

        # config show
        config_subparsers.add_parser(
            "show",
            help="Display current configuration",
            description="Display the registered agents, repositories and skills.",
        )

        # config where
        config_subparsers.add_parser(
            "where",
            help="Show configuration file location",
            description="Show the paths of the state file, the config directory and the repos directory.",
        )

        # config default-ref
        ref_parser = config_subparsers.add_parser(
            "default-ref",
            help="Show or set the ref used when 'repo add' is given no --ref",
            description="Without an argument, print the default ref. With one, store it as the new default.",
        )
        ref_parser.add_argument("ref", nargs="?", help="New default branch or tag")

    @staticmethod
    def process_cli_command(args: argparse.Namespace, config: Config) -> None:
        """Process config CLI commands.

        Args:
            args: Parsed command-line arguments
            config: Config instance to operate on
        """
        if args.config_command is None:
            message("Usage: skillctl config <command>", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("Available commands:", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  show         Display current configuration", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  where        Show configuration file location", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            message("  default-ref  Show or set the default ref", MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return
        elif args.config_command == "show":
            ConfigCommands.display(config)
        elif args.config_command == "where":
            ConfigCommands.show_location(config)
        elif args.config_command == "default-ref":
            ConfigCommands.default_ref(config, getattr(args, "ref", None))
        else:
            message("Unknown config command", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

    @staticmethod
    def display(config: Config) -> None:
        """Display the current configuration.

        Args:
            config: Config instance
        """
        state = config.load()

        message("\n=== Settings ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        message(f"  default_ref: {state['default_ref']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("\n=== Agents ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if state["agents"]:
            for agent in state["agents"]:
                message(f"  {agent}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        else:
            message("  (none)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("\n=== Repos ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if state["repos"]:
            for alias, repo in state["repos"].items():
                message(f"  {alias} ({repo['ref']} @ {repo['sha'][:7]})", MessageType.NORMAL, VerbosityLevel.ALWAYS)
                message(f"    URL: {repo['url']}", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        else:
            message("  (none)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("\n=== Skills ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        if state["skills"]:
            for name, skill in state["skills"].items():
                message(f"  {name} <- {skill['repo_alias']}:{skill['path']}", MessageType.NORMAL,
                        VerbosityLevel.ALWAYS)
        else:
            message("  (none)", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def show_location(config: Config) -> None:
        """Show where the configuration lives.

        Args:
            config: Config instance
        """
        message("\n=== Configuration Locations ===\n", MessageType.NORMAL, VerbosityLevel.ALWAYS)

        entries = (
            ("Config directory", config.config_directory),
            ("State file", config.config_file),
            ("Repos directory", config.repos_directory),
        )
        for label, path in entries:
            exists = "exists" if path.exists() else "not found"
            msg_type = MessageType.NORMAL if path.exists() else MessageType.WARNING
            message(f"  {label}: {path} ({exists})", msg_type, VerbosityLevel.ALWAYS)

        message("", MessageType.NORMAL, VerbosityLevel.ALWAYS)

    @staticmethod
    def default_ref(config: Config, ref: str | None = None) -> None:
        """Show or set the default ref.

        Args:
            config: Config instance
            ref: New default, or None to print the current one
        """
        if ref is None:
            message(config.get_default_ref(), MessageType.NORMAL, VerbosityLevel.ALWAYS)
            return

        ref = ref.strip()
        if not ref:
            message("Default ref must not be empty", MessageType.ERROR, VerbosityLevel.ALWAYS)
            sys.exit(1)

        config.set_default_ref(ref)
        message(f"Default ref set to '{ref}'", MessageType.SUCCESS, VerbosityLevel.ALWAYS)
