"""Multi-step mutations that keep records, snapshots and links in step.

Every operation validates first and only then starts side effects.  The
order of those side effects is chosen so that the state record only ever
claims what is already true on disk:

* register:  resolve snapshot -> write repo record
* install:   project links -> write skill record
* remove:    retract links -> delete skill record
* repo rm:   remove dependent skills -> delete snapshot -> delete repo record
* update:    refresh snapshot -> write new sha (links need no change)
* agent add: write agent record -> project every skill
* agent rm:  retract every skill -> delete agent record

Once side effects have started, per-item failures are collected into the
result instead of being raised.
"""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path, PurePosixPath

from skillctl.config import Config, RepoEntry, SkillEntry
from skillctl.config.config import now_iso
from skillctl.core import links
from skillctl.core.outcomes import (
    BatchReport,
    LinkOutcome,
    LinkStatus,
    MutationResult,
    UpdateOutcome,
    UpdateReport,
    UpdateStatus,
)
from skillctl.errors import (
    AlreadyExistsError,
    DependentSkillsExist,
    LinkError,
    NotFoundError,
    ResolutionError,
    SkillctlError,
    ValidationError,
)
from skillctl.output import MessageType, VerbosityLevel, message
from skillctl.resolvers import AbstractResolver, GitResolver

ALIAS_PATTERN = re.compile(r"^[a-z0-9-]+$")


def validate_alias(alias: str) -> None:
    if not alias:
        raise ValidationError("Repository alias is required")
    if not ALIAS_PATTERN.match(alias):
        raise ValidationError(
            f"Invalid alias '{alias}'. Use only lowercase letters, numbers, and hyphens "
            "(e.g. tavily-ai, openai-tools, my-repo)"
        )


def validate_skill_name(name: str) -> None:
    """A skill name becomes a file name under every agent's skills directory."""
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise ValidationError(f"Invalid skill name '{name}'")
    if name.startswith("."):
        raise ValidationError(f"Skill name '{name}' must not start with '.'")


def default_skill_name(skill_path: str) -> str:
    """Last component of *skill_path* (``skills/crawl`` -> ``crawl``)."""
    return PurePosixPath(skill_path.strip().rstrip("/")).name


def normalize_agent_path(agent_path: str) -> str:
    """Absolute form of an agent path, with ``~`` expanded.

    Symlinks are not followed, so an agent reached through a link keeps
    the path it was registered under.
    """
    if not agent_path or not agent_path.strip():
        raise ValidationError("Agent path is required")
    return os.path.abspath(os.path.expanduser(agent_path))


class SkillManager:
    """Coordinates the state store, the resolver and the link projector."""

    def __init__(self, config: Config, resolver: AbstractResolver | None = None):
        """Initialize the coordinator.

        Args:
            config: State store
            resolver: Repository resolver, defaults to :class:`GitResolver`
        """
        self.config = config
        self.resolver = resolver if resolver is not None else GitResolver()

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------
    def register_repo(self, alias: str, url: str, ref: str | None = None) -> MutationResult:
        """Clone a repository and record it under *alias*.

        Raises:
            ValidationError: Bad alias or empty URL
            AlreadyExistsError: Alias already registered
            ResolutionError: Clone failed; nothing is recorded
        """
        validate_alias(alias)
        if not url or not url.strip():
            raise ValidationError("Repository URL is required")

        state = self.config.load()
        if alias in state["repos"]:
            raise AlreadyExistsError(
                f"Repository '{alias}' is already registered. Use 'skillctl repo remove {alias}' to remove it first."
            )
        effective_ref = ref or state["default_ref"]

        dest = self.config.repo_path(alias)
        message(f"Resolving '{alias}' from {url} ({effective_ref})", MessageType.INFO, VerbosityLevel.VERBOSE)
        try:
            sha = self.resolver.resolve(url, effective_ref, dest)
        except ResolutionError:
            if dest.exists():
                shutil.rmtree(dest, ignore_errors=True)
            raise

        entry: RepoEntry = {"url": url, "ref": effective_ref, "sha": sha, "added_at": now_iso()}
        state = self.config.add_repo(alias, entry)
        return MutationResult(alias, state)

    def update_repo(self, alias: str) -> UpdateOutcome:
        """Bring a repository's snapshot up to date with its ref.

        Links need no change because they point at the snapshot path;
        only the recorded sha is rewritten, and only if it changed.

        Raises:
            NotFoundError: Unknown alias
            ResolutionError: The snapshot could not be updated
        """
        repo = self.config.get_repo(alias)
        if repo is None:
            raise NotFoundError(f"Repository '{alias}' is not registered")

        dest = self.config.repo_path(alias)
        if dest.exists():
            new_sha = self.resolver.refresh(dest, repo["ref"])
        else:
            message(
                f"Snapshot for '{alias}' is missing, cloning it again",
                MessageType.WARNING,
                VerbosityLevel.ALWAYS,
            )
            try:
                new_sha = self.resolver.resolve(repo["url"], repo["ref"], dest)
            except ResolutionError:
                # Links must never resolve into a snapshot at another ref
                if dest.exists():
                    shutil.rmtree(dest, ignore_errors=True)
                raise

        if new_sha == repo["sha"]:
            message(f"'{alias}' is already up to date", MessageType.DEBUG, VerbosityLevel.DEBUG)
            return UpdateOutcome(alias, UpdateStatus.UNCHANGED, repo["sha"], new_sha)

        self.config.update_repo(alias, sha=new_sha)
        return UpdateOutcome(alias, UpdateStatus.UPDATED, repo["sha"], new_sha)

    def update_all_repos(self) -> UpdateReport:
        """Update every registered repository, one after another.

        A failure on one repository is recorded and the rest are still
        attempted.
        """
        report = UpdateReport()
        for alias, repo in self.config.load()["repos"].items():
            try:
                report.outcomes.append(self.update_repo(alias))
            except ResolutionError as e:
                report.outcomes.append(
                    UpdateOutcome(alias, UpdateStatus.FAILED, repo["sha"], error=str(e), diagnostic=e.diagnostic)
                )
            except (SkillctlError, OSError) as e:
                report.outcomes.append(UpdateOutcome(alias, UpdateStatus.FAILED, repo["sha"], error=str(e)))
        return report

    def remove_repo(self, alias: str, cascade: bool = False) -> MutationResult:
        """Unregister a repository and delete its snapshot.

        Args:
            alias: Repository to remove
            cascade: Also remove skills installed from it

        Raises:
            NotFoundError: Unknown alias
            DependentSkillsExist: Skills depend on it and *cascade* is False
        """
        if self.config.get_repo(alias) is None:
            raise NotFoundError(f"Repository '{alias}' is not registered")

        dependents = [name for name, _ in self.config.skills_by_repo(alias)]
        if dependents and not cascade:
            raise DependentSkillsExist(alias, dependents)

        report = BatchReport()
        for name in dependents:
            report.extend(self.remove_skill(name).links)

        dest = self.config.repo_path(alias)
        if dest.exists():
            message(f"Deleting snapshot {dest}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            shutil.rmtree(dest)

        state = self.config.remove_repo(alias)
        return MutationResult(alias, state, links=report, removed_skills=dependents)

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------
    def install_skill(self, repo_alias: str, skill_path: str, name: str | None = None) -> MutationResult:
        """Install a directory of a registered repository as a skill.

        Links are projected into every agent before the skill is recorded;
        agents that cannot be linked are reported, not fatal.

        Raises:
            NotFoundError: Unknown repository
            ValidationError: Bad name, or *skill_path* missing from the snapshot
            AlreadyExistsError: Skill name taken
        """
        if not skill_path or not skill_path.strip():
            raise ValidationError("Skill path is required")

        state = self.config.load()
        if repo_alias not in state["repos"]:
            raise NotFoundError(
                f"Repository '{repo_alias}' is not registered. "
                f"Use 'skillctl repo add {repo_alias} <git-url>' to register it first."
            )

        skill_name = name or default_skill_name(skill_path)
        validate_skill_name(skill_name)
        if skill_name in state["skills"]:
            raise AlreadyExistsError(
                f"Skill '{skill_name}' is already installed. Use a different name with --name or remove it first."
            )

        repo_dir = self.config.repo_path(repo_alias)
        source = repo_dir / skill_path
        try:
            source.resolve().relative_to(repo_dir.resolve())
        except ValueError:
            raise ValidationError(f"Skill path '{skill_path}' points outside repository '{repo_alias}'") from None
        if not source.is_dir():
            raise ValidationError(f"Skill path '{skill_path}' not found in repository '{repo_alias}'. Checked: {source}")

        report = BatchReport()
        if state["agents"]:
            report.extend(links.project(state["agents"], skill_name, source))
        else:
            message(
                "Warning: No agents configured. The skill is installed but not linked.",
                MessageType.WARNING,
                VerbosityLevel.ALWAYS,
            )

        entry: SkillEntry = {"repo_alias": repo_alias, "path": skill_path, "installed_at": now_iso()}
        state = self.config.add_skill(skill_name, entry)
        return MutationResult(skill_name, state, links=report)

    def remove_skill(self, name: str) -> MutationResult:
        """Retract a skill's links from every agent, then forget it.

        Raises:
            NotFoundError: Unknown skill
        """
        state = self.config.load()
        if name not in state["skills"]:
            raise NotFoundError(f"Skill '{name}' is not installed")

        report = BatchReport(links.retract(state["agents"], name))
        state = self.config.remove_skill(name)
        return MutationResult(name, state, links=report)

    def link_status(self, name: str) -> dict[str, links.PathState]:
        """Current state of *name*'s link in each agent.

        Raises:
            NotFoundError: Unknown skill
        """
        state = self.config.load()
        if name not in state["skills"]:
            raise NotFoundError(f"Skill '{name}' is not installed")
        return {agent: links.inspect_path(links.link_path(agent, name)) for agent in state["agents"]}

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------
    def _project_all(self, agents: list[str], skills: dict[str, SkillEntry]) -> BatchReport:
        report = BatchReport()
        for skill_name, skill in skills.items():
            source = self.config.skill_source_path(skill)
            try:
                report.extend(links.project(agents, skill_name, source))
            except ValidationError as e:
                message(f"Warning: cannot link '{skill_name}': {e}", MessageType.WARNING, VerbosityLevel.ALWAYS)
                report.extend(LinkOutcome(agent, skill_name, LinkStatus.ERROR, str(e)) for agent in agents)
        return report

    def add_agent(self, agent_path: str, strict: bool = False) -> MutationResult:
        """Register an agent directory and link every installed skill into it.

        Args:
            agent_path: Agent directory; must contain ``skills/``
            strict: Roll back (unlink and unregister) if any link fails,
                instead of keeping a partially linked agent

        Raises:
            ValidationError: Directory or its skills directory is missing
            AlreadyExistsError: Agent already registered
            LinkError: *strict* and at least one link failed
        """
        path = normalize_agent_path(agent_path)

        state = self.config.load()
        if path in state["agents"]:
            raise AlreadyExistsError(f"Agent already configured: {path}")
        if not Path(path).is_dir():
            raise ValidationError(f"Directory does not exist: {path}")
        skills_dir = Path(path) / links.SKILLS_DIR
        if not skills_dir.is_dir():
            raise ValidationError(f"Agent directory must have a 'skills' subdirectory. Expected: {skills_dir}")

        state = self.config.add_agent(path)
        report = self._project_all([path], state["skills"])

        if strict and report.failures:
            for outcome in report:
                if outcome.status == LinkStatus.LINKED:
                    links.retract([path], outcome.skill)
            self.config.remove_agent(path)
            raise LinkError(
                f"{len(report.failures)} skill(s) could not be linked into {path}; agent not added",
                report.failures,
            )

        return MutationResult(path, state, links=report)

    def remove_agent(self, agent_path: str) -> MutationResult:
        """Retract every installed skill from an agent, then unregister it.

        Raises:
            NotFoundError: Agent not registered
        """
        path = normalize_agent_path(agent_path)

        state = self.config.load()
        if path not in state["agents"]:
            raise NotFoundError(f"Agent not found in configuration: {path}")

        report = BatchReport()
        for skill_name in state["skills"]:
            report.extend(links.retract([path], skill_name))

        state = self.config.remove_agent(path)
        return MutationResult(path, state, links=report)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------
    def sync(self) -> BatchReport:
        """Re-create the link for every (agent, skill) pair.

        Repairs links lost to a partial failure or an interrupted command.
        """
        state = self.config.load()
        if not state["agents"]:
            return BatchReport()
        return self._project_all(state["agents"], state["skills"])
