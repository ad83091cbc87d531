"""State store for skillctl."""

from .config import Config, RepoEntry, SkillEntry, StateData, StateError

__all__ = ["Config", "RepoEntry", "SkillEntry", "StateData", "StateError"]
