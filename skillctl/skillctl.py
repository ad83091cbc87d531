#!/usr/bin/env python

"""Install agent skills from git repositories and link them into agent directories."""

import argparse
import sys

from skillctl.cli_extensions import AgentCommands, ConfigCommands, RepoCommands, SkillCommands
from skillctl.config import Config
from skillctl.core import SkillManager
from skillctl.errors import ResolutionError, SkillctlError
from skillctl.output import MessageType, VerbosityLevel, get_output, message

# Grouped command help text
COMMAND_GROUPS = """
skill commands:
  skill               Install, list, inspect and remove skills
  sync                Re-create every skill link in every agent

source commands:
  repo                Register, update and remove skill repositories

target commands:
  agent               Register and remove agent directories

configuration commands:
  config              Show configuration and settings
"""


class GroupedHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that hides the subparser choices from positional arguments."""

    def _metavar_formatter(self, action, default_metavar):
        if action.choices is not None:
            result = action.metavar if action.metavar is not None else ""

            def format_fn(tuple_size):
                if isinstance(result, tuple):
                    return result
                return (result,) * tuple_size

            return format_fn
        return super()._metavar_formatter(action, default_metavar)

    def _format_action(self, action):
        # Subcommands are listed in the epilog
        if isinstance(action, argparse._SubParsersAction):
            return ""
        return super()._format_action(action)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with every command registered."""
    parser = argparse.ArgumentParser(
        prog="skillctl",
        description="Install agent skills from git repositories and link them into your agents",
        formatter_class=GroupedHelpFormatter,
        epilog=COMMAND_GROUPS,
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase verbosity (-v, -vv, -vvv)",
    )
    parser.add_argument(
        "--no-color", action="store_true",
        help="Disable colored output",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    RepoCommands.add_cli_arguments(subparsers)     # repo
    SkillCommands.add_cli_arguments(subparsers)    # skill + sync
    AgentCommands.add_cli_arguments(subparsers)    # agent
    ConfigCommands.add_cli_arguments(subparsers)   # config

    return parser


def run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Dispatch parsed arguments to their command class."""
    config = Config()

    if args.command == "config":
        ConfigCommands.process_cli_command(args, config)
        return

    manager = SkillManager(config)

    if args.command == "repo":
        RepoCommands.process_cli_command(args, manager)
    elif args.command in ("skill", "sync"):
        SkillCommands.process_cli_command(args, manager)
    elif args.command == "agent":
        AgentCommands.process_cli_command(args, manager)
    else:
        parser.print_help()
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the skillctl CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure output system
    output_mgr = get_output()
    output_mgr.verbosity = args.verbose
    output_mgr.use_color = not args.no_color and sys.stdout.isatty()

    message(f"Verbosity level: {args.verbose}", MessageType.DEBUG, VerbosityLevel.DEBUG)
    message(f"Command: {args.command}", MessageType.DEBUG, VerbosityLevel.DEBUG)

    if args.command is None:
        parser.print_help()
        return

    try:
        run(args, parser)
    except ResolutionError as e:
        message(f"Error: {e}", MessageType.ERROR, VerbosityLevel.ALWAYS)
        if e.diagnostic:
            message(e.diagnostic, MessageType.ERROR, VerbosityLevel.VERBOSE)
        sys.exit(1)
    except SkillctlError as e:
        message(f"Error: {e}", MessageType.ERROR, VerbosityLevel.ALWAYS)
        sys.exit(1)


if __name__ == "__main__":
    main()
