"""State store for skillctl.

One YAML record holds every registered agent, repository and skill:

    agents: [<absolute agent path>, ...]
    default_ref: main
    repos:
      <alias>: {url, ref, sha, added_at}
    skills:
      <name>: {repo_alias, path, installed_at}

Each repository's working copy lives in ``repos/<alias>`` next to the
record.  Every mutator is a full load-modify-save cycle; nothing is cached
between calls.
"""

import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypedDict

import yaml

from skillctl.errors import SkillctlError
from skillctl.output import MessageType, VerbosityLevel, message

HOME_ENV_VAR = "SKILLCTL_HOME"
STATE_FILE = "skillctl.yaml"
# Record written by earlier releases
LEGACY_STATE_FILE = "skillctl.json"
DEFAULT_REF = "main"


class RepoEntry(TypedDict):
    """Type definition for a registered repository."""

    url: str
    ref: str
    sha: str
    added_at: str


class SkillEntry(TypedDict):
    """Type definition for an installed skill."""

    repo_alias: str
    path: str
    installed_at: str


class StateData(TypedDict):
    """Type definition for the whole persisted record."""

    agents: list[str]
    default_ref: str
    repos: dict[str, RepoEntry]
    skills: dict[str, SkillEntry]


class StateError(SkillctlError):
    """Exception raised when the state record cannot be read or is invalid.

    Can contain multiple error messages.
    """

    def __init__(self, errors: str | list[str]):
        """Initialize StateError.

        Args:
            errors: Single error message or list of error messages
        """
        if isinstance(errors, str):
            self.errors = [errors]
        else:
            self.errors = errors
        super().__init__(self._format_errors())

    def _format_errors(self) -> str:
        """Format errors for display."""
        if len(self.errors) == 1:
            return self.errors[0]
        else:
            error_list = "\n".join(f"  - {err}" for err in self.errors)
            return f"State file has {len(self.errors)} errors:\n{error_list}"


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(tz=UTC).isoformat(timespec="seconds")


# Fields added over time, with the value an older record gets on upgrade
FIELD_DEFAULTS: dict[str, Any] = {
    "agents": list,
    "default_ref": lambda: DEFAULT_REF,
    "repos": dict,
    "skills": dict,
}

REPO_KEYS = ("url", "ref", "sha", "added_at")
SKILL_KEYS = ("repo_alias", "path", "installed_at")


class Config:
    """Loads and saves the skillctl state record."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the state store.

        Args:
            config_dir: Optional custom root directory.
                       Defaults to $SKILLCTL_HOME, then ~/.skillctl
        """
        if config_dir is None:
            env_home = os.environ.get(HOME_ENV_VAR)
            config_dir = Path(env_home).expanduser() if env_home else Path.home() / ".skillctl"

        # Link targets are built from this root and must be absolute
        self.config_directory = Path(config_dir).expanduser().absolute()
        self.config_file = self.config_directory / STATE_FILE
        self.legacy_file = self.config_directory / LEGACY_STATE_FILE
        self.repos_directory = self.config_directory / "repos"

    def ensure_directories(self) -> None:
        """Create the root and repos directories if they don't exist.

        Raises:
            StateError: If a directory cannot be created
        """
        for dir_name, dir_path in (("config", self.config_directory), ("repos", self.repos_directory)):
            try:
                dir_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StateError(f"Failed to create {dir_name} directory {dir_path}: {e}") from e

    def exists(self) -> bool:
        """Check if a state record has been written yet."""
        return self.config_file.exists()

    def repo_path(self, alias: str) -> Path:
        """Working copy location for a repository alias."""
        return self.repos_directory / alias

    def skill_source_path(self, skill: SkillEntry) -> Path:
        """Directory a skill's links point at."""
        return self.repo_path(skill["repo_alias"]) / skill["path"]

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------
    @staticmethod
    def default_state() -> StateData:
        """Return a fresh, empty state record."""
        return {
            "agents": [],
            "default_ref": DEFAULT_REF,
            "repos": {},
            "skills": {},
        }

    @staticmethod
    def upgrade(raw: dict[str, Any]) -> bool:
        """Fill fields missing from an older record, in place.

        Args:
            raw: Record as read from disk

        Returns:
            True if anything was added
        """
        upgraded = False
        for key, factory in FIELD_DEFAULTS.items():
            if raw.get(key) is None:
                raw[key] = factory()
                upgraded = True
        return upgraded

    @staticmethod
    def validate(state: dict[str, Any]) -> list[str]:
        """Validate the structure of a state record.

        Collects all validation errors before raising an exception.

        Args:
            state: The record to validate

        Returns:
            List of warnings (non-fatal issues)

        Raises:
            StateError: If the record is invalid, with all errors
        """
        errors: list[str] = []
        warnings: list[str] = []

        agents = state.get("agents")
        if not isinstance(agents, list):
            errors.append("'agents' must be a list")
        else:
            for idx, agent in enumerate(agents):
                if not isinstance(agent, str) or not agent:
                    errors.append(f"agents entry {idx} must be a non-empty string")
            if len(set(map(str, agents))) != len(agents):
                errors.append("'agents' contains duplicate paths")

        default_ref = state.get("default_ref")
        if not isinstance(default_ref, str) or not default_ref:
            errors.append("'default_ref' must be a non-empty string")

        repos = state.get("repos")
        if not isinstance(repos, dict):
            errors.append("'repos' must be a mapping")
            repos = {}
        for alias, entry in repos.items():
            if not isinstance(entry, dict):
                errors.append(f"Repo '{alias}' must be a mapping")
                continue
            missing = [key for key in REPO_KEYS if key not in entry]
            if missing:
                errors.append(f"Repo '{alias}' is missing required keys: {', '.join(missing)}")
            for key in REPO_KEYS:
                if key in entry and not isinstance(entry[key], str):
                    errors.append(f"Repo '{alias}' '{key}' must be a string, got {type(entry[key]).__name__}")

        skills = state.get("skills")
        if not isinstance(skills, dict):
            errors.append("'skills' must be a mapping")
            skills = {}
        for name, entry in skills.items():
            if not isinstance(entry, dict):
                errors.append(f"Skill '{name}' must be a mapping")
                continue
            missing = [key for key in SKILL_KEYS if key not in entry]
            if missing:
                errors.append(f"Skill '{name}' is missing required keys: {', '.join(missing)}")
            for key in SKILL_KEYS:
                if key in entry and not isinstance(entry[key], str):
                    errors.append(f"Skill '{name}' '{key}' must be a string, got {type(entry[key]).__name__}")
            alias = entry.get("repo_alias")
            if isinstance(alias, str) and alias not in repos:
                warnings.append(f"Skill '{name}' references unknown repository '{alias}'")

        if errors:
            raise StateError(errors)

        return warnings

    # ------------------------------------------------------------------
    # Load / Save
    # ------------------------------------------------------------------
    def _read_record(self, path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise StateError(f"Failed to parse state file {path}: {e}") from e
        except OSError as e:
            raise StateError(f"Failed to read state file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise StateError(f"State file {path} does not contain a mapping")
        return raw

    def load(self) -> StateData:
        """Load the state record.

        A missing record is created with defaults.  A record from an older
        release (missing fields, or the legacy JSON file) is upgraded and
        written back.

        Returns:
            The validated state record

        Raises:
            StateError: If the record cannot be read or is invalid
        """
        self.ensure_directories()

        if self.config_file.exists():
            raw = self._read_record(self.config_file)
            migrated = False
        elif self.legacy_file.exists():
            # JSON is valid YAML, so the same reader handles the old format
            raw = self._read_record(self.legacy_file)
            migrated = True
            message(f"Migrating state from {self.legacy_file}", MessageType.INFO, VerbosityLevel.VERBOSE)
        else:
            state = self.default_state()
            self.save(state)
            message(f"Created new state file at {self.config_file}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            return state

        upgraded = self.upgrade(raw)
        for warning in self.validate(raw):
            message(f"Warning: {warning}", MessageType.WARNING, VerbosityLevel.ALWAYS)

        state: StateData = raw  # type: ignore[assignment]
        if upgraded or migrated:
            self.save(state)
            message(f"Upgraded state file {self.config_file}", MessageType.DEBUG, VerbosityLevel.DEBUG)

        message(f"State loaded from {self.config_file}", MessageType.DEBUG, VerbosityLevel.DEBUG)
        return state

    def save(self, state: StateData) -> None:
        """Validate and write the whole record.

        The record is written to a temporary file and renamed into place,
        so an interrupted save never leaves a half-written record behind.

        Raises:
            StateError: If the record is invalid or cannot be written
        """
        self.validate(state)  # type: ignore[arg-type]
        self.ensure_directories()

        clean_state = {
            "agents": list(state["agents"]),
            "default_ref": state["default_ref"],
            "repos": {alias: {key: entry[key] for key in REPO_KEYS} for alias, entry in state["repos"].items()},
            "skills": {name: {key: entry[key] for key in SKILL_KEYS} for name, entry in state["skills"].items()},
        }

        tmp_file = self.config_file.with_name(self.config_file.name + ".tmp")
        try:
            with open(tmp_file, "w") as f:
                yaml.safe_dump(clean_state, f, default_flow_style=False, sort_keys=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_file, self.config_file)
        except OSError as e:
            tmp_file.unlink(missing_ok=True)
            raise StateError(f"Failed to write state file {self.config_file}: {e}") from e

        message(f"State saved to {self.config_file}", MessageType.DEBUG, VerbosityLevel.DEBUG)

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------
    def get_agents(self) -> list[str]:
        return list(self.load()["agents"])

    def add_agent(self, agent_path: str) -> StateData:
        """Append an agent path if it is not registered yet."""
        state = self.load()
        if agent_path not in state["agents"]:
            state["agents"].append(agent_path)
            self.save(state)
        return state

    def remove_agent(self, agent_path: str) -> StateData:
        state = self.load()
        if agent_path in state["agents"]:
            state["agents"] = [a for a in state["agents"] if a != agent_path]
            self.save(state)
        return state

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------
    def get_repo(self, alias: str) -> RepoEntry | None:
        return self.load()["repos"].get(alias)

    def add_repo(self, alias: str, entry: RepoEntry) -> StateData:
        state = self.load()
        state["repos"][alias] = entry
        self.save(state)
        return state

    def update_repo(self, alias: str, **updates: str) -> StateData:
        """Merge *updates* into an existing repository entry.

        Unknown aliases are left alone, so a repository removed in the
        meantime is not brought back.
        """
        state = self.load()
        if alias in state["repos"]:
            state["repos"][alias] = {**state["repos"][alias], **updates}  # type: ignore[typeddict-item]
            self.save(state)
        return state

    def remove_repo(self, alias: str) -> StateData:
        state = self.load()
        if alias in state["repos"]:
            del state["repos"][alias]
            self.save(state)
        return state

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------
    def get_skill(self, name: str) -> SkillEntry | None:
        return self.load()["skills"].get(name)

    def add_skill(self, name: str, entry: SkillEntry) -> StateData:
        state = self.load()
        state["skills"][name] = entry
        self.save(state)
        return state

    def remove_skill(self, name: str) -> StateData:
        state = self.load()
        if name in state["skills"]:
            del state["skills"][name]
            self.save(state)
        return state

    def skills_by_repo(self, alias: str) -> list[tuple[str, SkillEntry]]:
        """Installed skills sourced from repository *alias*, in record order."""
        return [(name, skill) for name, skill in self.load()["skills"].items() if skill["repo_alias"] == alias]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def get_default_ref(self) -> str:
        return self.load()["default_ref"]

    def set_default_ref(self, ref: str) -> StateData:
        state = self.load()
        state["default_ref"] = ref
        self.save(state)
        return state
