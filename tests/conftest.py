"""Shared fixtures: an isolated state root and an in-memory resolver."""

from pathlib import Path

import pytest

from skillctl import output
from skillctl.config import Config
from skillctl.config.config import HOME_ENV_VAR
from skillctl.core import SkillManager
from skillctl.errors import ResolutionError
from skillctl.resolvers import AbstractResolver


class FakeResolver(AbstractResolver):
    """Resolver that writes a small tree instead of talking to git.

    Every snapshot contains ``skills/<name>/SKILL.md`` for each name in
    ``skills``, with the current sha as content, so tests can see which
    version a link resolves to.
    """

    REPO_TYPE = "fake"

    def __init__(self, sha: str = "aaa111", skills=("x",)):
        self.sha = sha
        self.skills = list(skills)
        self.fail_urls: set[str] = set()
        self.fail_refresh: set[str] = set()
        self.calls: list[tuple] = []

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        return True

    def _write_tree(self, dest: Path) -> None:
        for name in self.skills:
            skill_dir = dest / "skills" / name
            skill_dir.mkdir(parents=True, exist_ok=True)
            (skill_dir / "SKILL.md").write_text(f"version {self.sha}\n")

    def resolve(self, url: str, ref: str, dest: Path) -> str:
        self.calls.append(("resolve", url, ref, dest))
        if url in self.fail_urls:
            # Leave a half-written snapshot behind, as an interrupted clone would
            dest.mkdir(parents=True, exist_ok=True)
            raise ResolutionError(f"Failed to clone {url} at '{ref}'", "fatal: repository not found")
        dest.mkdir(parents=True, exist_ok=True)
        self._write_tree(dest)
        return self.sha

    def refresh(self, dest: Path, ref: str) -> str:
        self.calls.append(("refresh", dest, ref))
        if dest.name in self.fail_refresh:
            raise ResolutionError(f"Failed to update {dest} to '{ref}'", "fatal: could not read from remote")
        self._write_tree(dest)
        return self.sha


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.skillctl."""
    home = tmp_path / "skillctl-home"
    monkeypatch.setenv(HOME_ENV_VAR, str(home))
    return home


@pytest.fixture(autouse=True)
def fresh_output(monkeypatch):
    """Give every test default verbosity and no colour."""
    monkeypatch.setattr(output, "_output", None)


@pytest.fixture
def config(isolated_home):
    return Config(config_dir=isolated_home)


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def manager(config, resolver):
    return SkillManager(config, resolver)


@pytest.fixture
def make_agent(tmp_path):
    """Create an agent directory (with ``skills/`` unless told otherwise)."""

    def _make(name: str, with_skills: bool = True) -> str:
        agent = tmp_path / "agents" / name
        (agent / "skills" if with_skills else agent).mkdir(parents=True)
        return str(agent.resolve())

    return _make
