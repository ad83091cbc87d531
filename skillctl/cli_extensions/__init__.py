"""CLI command extensions for skillctl."""

from .agent_commands import AgentCommands
from .config_commands import ConfigCommands
from .repo_commands import RepoCommands
from .skill_commands import SkillCommands

__all__ = [
    "AgentCommands",
    "ConfigCommands",
    "RepoCommands",
    "SkillCommands",
]
