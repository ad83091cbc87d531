"""Symlink projection of installed skills into agent directories.

For every (agent, skill) pair exactly one symlink
``<agent>/skills/<skill>`` must exist and point at the skill's directory
inside its repository snapshot.  Links are derived from the state record,
never stored; the functions here create and remove them one skill at a
time across a list of agents.
"""

from __future__ import annotations

import os
from pathlib import Path

from skillctl.core.outcomes import LinkOutcome, LinkStatus
from skillctl.errors import ValidationError
from skillctl.output import MessageType, VerbosityLevel, message

SKILLS_DIR = "skills"


# ------------------------------------------------------------------
# Path inspection
# ------------------------------------------------------------------
class PathState:
    """What currently occupies a link location."""

    SYMLINK = "symlink"
    REGULAR = "regular"
    MISSING = "missing"

    def __init__(self, kind: str, target: Path | None = None):
        self.kind = kind
        self.target = target

    @property
    def is_symlink(self) -> bool:
        return self.kind == self.SYMLINK

    def points_at(self, source: Path) -> bool:
        """True if this is a symlink whose target is *source*."""
        return self.is_symlink and self.target is not None and Path(self.target) == Path(source)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathState):
            return NotImplemented
        return (self.kind, self.target) == (other.kind, other.target)

    def __repr__(self) -> str:
        return f"PathState({self.kind!r}, {self.target!r})"


def inspect_path(path: Path) -> PathState:
    """Classify *path* without following it.

    A dangling symlink is still reported as ``SYMLINK``.
    """
    if path.is_symlink():
        return PathState(PathState.SYMLINK, Path(os.readlink(path)))
    if path.exists():
        return PathState(PathState.REGULAR)
    return PathState(PathState.MISSING)


def link_path(agent: str | Path, skill_name: str) -> Path:
    """Location of *skill_name*'s link inside *agent*."""
    return Path(agent) / SKILLS_DIR / skill_name


def temp_link_path(target: Path) -> Path:
    """Name the new link is created under before it is renamed over *target*."""
    return target.with_name(f".{target.name}.skillctl-tmp")


# ------------------------------------------------------------------
# Primitives
# ------------------------------------------------------------------
def create_or_replace_symlink(source: Path, target: Path) -> None:
    """Point *target* at *source*, replacing a file or symlink already there.

    The new link is created under a temporary name and renamed over
    *target*, so *target* is never observed missing.

    Raises:
        IsADirectoryError: If a real directory occupies *target*
        OSError: If the link cannot be created
    """
    existing = inspect_path(target)
    if existing.kind == PathState.REGULAR and target.is_dir():
        raise IsADirectoryError(f"{target} is a directory, not replacing it")

    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_link = temp_link_path(target)
    tmp_link.unlink(missing_ok=True)
    os.symlink(source, tmp_link, target_is_directory=True)
    try:
        os.replace(tmp_link, target)
    except OSError:
        tmp_link.unlink(missing_ok=True)
        raise


def remove_symlink_if_symlink(target: Path) -> str:
    """Remove *target* only if it is a symlink.

    Returns:
        ``"removed"``, ``"absent"`` if nothing was there, or ``"skipped"``
        if a real file or directory occupies the path

    Raises:
        OSError: If the symlink cannot be removed
    """
    # Left behind if a previous link was interrupted before its rename
    stale = temp_link_path(target)
    if os.path.lexists(stale):
        stale.unlink()

    state = inspect_path(target)
    if state.kind == PathState.MISSING:
        return "absent"
    if state.kind == PathState.REGULAR:
        return "skipped"
    target.unlink()
    return "removed"


# ------------------------------------------------------------------
# Projection across agents
# ------------------------------------------------------------------
def project(agents: list[str], skill_name: str, source_path: Path) -> list[LinkOutcome]:
    """Link *skill_name* into every agent's skills directory.

    Agents are processed independently: a missing skills directory or a
    failed link is recorded for that agent and the rest carry on.

    Args:
        agents: Agent directories
        skill_name: Link name under ``<agent>/skills``
        source_path: Directory the links point at

    Returns:
        One outcome per agent, in order

    Raises:
        ValidationError: If *source_path* does not exist
    """
    if not source_path.exists():
        raise ValidationError(f"Source path does not exist: {source_path}")

    outcomes: list[LinkOutcome] = []
    for agent in agents:
        skills_dir = Path(agent) / SKILLS_DIR
        if not skills_dir.is_dir():
            message(
                f"Warning: Agent {agent} does not have a skills directory, skipping",
                MessageType.WARNING,
                VerbosityLevel.ALWAYS,
            )
            outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.SKIPPED_NO_DIR, str(skills_dir)))
            continue

        target = link_path(agent, skill_name)
        try:
            create_or_replace_symlink(source_path, target)
        except OSError as e:
            message(f"Warning: could not link {target}: {e}", MessageType.WARNING, VerbosityLevel.ALWAYS)
            outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.ERROR, str(e)))
            continue

        message(f"  Linked {target} -> {source_path}", MessageType.INFO, VerbosityLevel.VERBOSE)
        outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.LINKED, str(target)))

    return outcomes


def retract(agents: list[str], skill_name: str) -> list[LinkOutcome]:
    """Remove *skill_name*'s link from every agent.

    Real files or directories at the link location are left alone with
    a warning.

    Returns:
        One outcome per agent, in order
    """
    outcomes: list[LinkOutcome] = []
    for agent in agents:
        target = link_path(agent, skill_name)
        try:
            result = remove_symlink_if_symlink(target)
        except OSError as e:
            message(f"Warning: could not remove {target}: {e}", MessageType.WARNING, VerbosityLevel.ALWAYS)
            outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.ERROR, str(e)))
            continue

        if result == "skipped":
            message(
                f"Warning: {target} is not a symlink, skipping removal",
                MessageType.WARNING,
                VerbosityLevel.ALWAYS,
            )
            outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.SKIPPED_NOT_SYMLINK, str(target)))
        elif result == "removed":
            message(f"  Removed {target}", MessageType.INFO, VerbosityLevel.VERBOSE)
            outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.REMOVED, str(target)))
        else:
            outcomes.append(LinkOutcome(agent, skill_name, LinkStatus.ABSENT, str(target)))

    return outcomes
