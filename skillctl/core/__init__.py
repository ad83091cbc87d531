"""Consistency core: link projection and the mutation coordinator."""

from .coordinator import SkillManager, default_skill_name, normalize_agent_path, validate_alias
from .links import SKILLS_DIR, PathState, inspect_path, link_path, project, retract
from .outcomes import (
    BatchReport,
    LinkOutcome,
    LinkStatus,
    MutationResult,
    UpdateOutcome,
    UpdateReport,
    UpdateStatus,
)

__all__ = [
    "SKILLS_DIR",
    "BatchReport",
    "LinkOutcome",
    "LinkStatus",
    "MutationResult",
    "PathState",
    "SkillManager",
    "UpdateOutcome",
    "UpdateReport",
    "UpdateStatus",
    "default_skill_name",
    "inspect_path",
    "link_path",
    "normalize_agent_path",
    "project",
    "retract",
    "validate_alias",
]
