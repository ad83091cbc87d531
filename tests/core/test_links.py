"""Tests for core/links.py - Symlink projection into agent directories."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from skillctl.core.links import (
    PathState,
    create_or_replace_symlink,
    inspect_path,
    link_path,
    project,
    remove_symlink_if_symlink,
    retract,
    temp_link_path,
)
from skillctl.core.outcomes import LinkStatus
from skillctl.errors import ValidationError


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "repos" / "demo" / "skills" / "x"
    path.mkdir(parents=True)
    (path / "SKILL.md").write_text("# x\n")
    return path


def _agent(tmp_path, name, with_skills=True) -> str:
    agent = tmp_path / name
    if with_skills:
        (agent / "skills").mkdir(parents=True)
    else:
        agent.mkdir(parents=True)
    return str(agent)


# ===========================================================================
# inspect_path
# ===========================================================================
class TestInspectPath:

    def test_missing(self, tmp_path):
        assert inspect_path(tmp_path / "nothing") == PathState(PathState.MISSING)

    def test_regular_file(self, tmp_path):
        (tmp_path / "f").write_text("x")
        assert inspect_path(tmp_path / "f").kind == PathState.REGULAR

    def test_regular_directory(self, tmp_path):
        (tmp_path / "d").mkdir()
        assert inspect_path(tmp_path / "d").kind == PathState.REGULAR

    def test_symlink(self, tmp_path, source):
        os.symlink(source, tmp_path / "link")
        state = inspect_path(tmp_path / "link")
        assert state.is_symlink
        assert state.points_at(source)

    def test_dangling_symlink_is_still_a_symlink(self, tmp_path):
        os.symlink(tmp_path / "gone", tmp_path / "link")
        state = inspect_path(tmp_path / "link")
        assert state.kind == PathState.SYMLINK
        assert state.target == tmp_path / "gone"

    def test_link_path(self):
        assert link_path("/agents/a", "x") == Path("/agents/a/skills/x")


# ===========================================================================
# create_or_replace_symlink / remove_symlink_if_symlink
# ===========================================================================
class TestPrimitives:

    def test_creates_link(self, tmp_path, source):
        target = tmp_path / "agent" / "skills" / "x"
        create_or_replace_symlink(source, target)
        assert inspect_path(target).points_at(source)
        assert (target / "SKILL.md").read_text() == "# x\n"

    def test_replaces_existing_symlink(self, tmp_path, source):
        target = tmp_path / "x"
        os.symlink(tmp_path / "elsewhere", target)
        create_or_replace_symlink(source, target)
        assert inspect_path(target).points_at(source)

    def test_replaces_regular_file(self, tmp_path, source):
        target = tmp_path / "x"
        target.write_text("stale")
        create_or_replace_symlink(source, target)
        assert inspect_path(target).points_at(source)

    def test_refuses_to_replace_directory(self, tmp_path, source):
        target = tmp_path / "x"
        target.mkdir()
        (target / "keep.txt").write_text("mine")
        with pytest.raises(IsADirectoryError):
            create_or_replace_symlink(source, target)
        assert (target / "keep.txt").read_text() == "mine"

    def test_no_temporary_link_left_behind(self, tmp_path, source):
        target = tmp_path / "x"
        create_or_replace_symlink(source, target)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["repos", "x"]

    def test_remove_symlink(self, tmp_path, source):
        target = tmp_path / "x"
        os.symlink(source, target)
        assert remove_symlink_if_symlink(target) == "removed"
        assert not os.path.lexists(target)
        assert source.exists()

    def test_remove_absent(self, tmp_path):
        assert remove_symlink_if_symlink(tmp_path / "x") == "absent"

    def test_remove_clears_interrupted_temp_link(self, tmp_path, source):
        target = tmp_path / "x"
        os.symlink(source, target)
        os.symlink(source, temp_link_path(target))

        assert remove_symlink_if_symlink(target) == "removed"
        assert not os.path.lexists(temp_link_path(target))

    def test_remove_clears_temp_link_when_link_is_absent(self, tmp_path, source):
        target = tmp_path / "x"
        os.symlink(source, temp_link_path(target))

        assert remove_symlink_if_symlink(target) == "absent"
        assert list(tmp_path.iterdir()) == [tmp_path / "repos"]

    def test_replace_clears_interrupted_temp_link(self, tmp_path, source):
        target = tmp_path / "x"
        os.symlink(tmp_path / "elsewhere", temp_link_path(target))

        create_or_replace_symlink(source, target)

        assert inspect_path(target).points_at(source)
        assert not os.path.lexists(temp_link_path(target))

    def test_remove_skips_real_directory(self, tmp_path):
        target = tmp_path / "x"
        target.mkdir()
        assert remove_symlink_if_symlink(target) == "skipped"
        assert target.is_dir()


# ===========================================================================
# project
# ===========================================================================
class TestProject:

    def test_links_into_every_agent(self, tmp_path, source):
        agents = [_agent(tmp_path, "a1"), _agent(tmp_path, "a2")]
        outcomes = project(agents, "x", source)

        assert [o.status for o in outcomes] == [LinkStatus.LINKED, LinkStatus.LINKED]
        for agent in agents:
            assert inspect_path(link_path(agent, "x")).points_at(source)

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(ValidationError, match="Source path does not exist"):
            project([_agent(tmp_path, "a1")], "x", tmp_path / "missing")

    def test_agent_without_skills_dir_is_skipped(self, tmp_path, source):
        agents = [_agent(tmp_path, "bare", with_skills=False), _agent(tmp_path, "a2")]
        with patch("skillctl.core.links.message"):
            outcomes = project(agents, "x", source)

        assert outcomes[0].status == LinkStatus.SKIPPED_NO_DIR
        assert not outcomes[0].ok
        assert outcomes[1].status == LinkStatus.LINKED
        assert not (Path(agents[0]) / "skills").exists()

    def test_failure_on_one_agent_does_not_stop_the_rest(self, tmp_path, source):
        agents = [_agent(tmp_path, "a1"), _agent(tmp_path, "a2")]
        real_symlink = os.symlink

        def flaky_symlink(src, dst, target_is_directory=False):
            if Path(dst).parent.parent.name == "a1":
                raise PermissionError("denied")
            real_symlink(src, dst, target_is_directory=target_is_directory)

        with (
            patch("skillctl.core.links.os.symlink", side_effect=flaky_symlink),
            patch("skillctl.core.links.message"),
        ):
            outcomes = project(agents, "x", source)

        assert outcomes[0].status == LinkStatus.ERROR
        assert "denied" in outcomes[0].detail
        assert outcomes[1].status == LinkStatus.LINKED

    def test_directory_at_link_location_is_an_error(self, tmp_path, source):
        agent = _agent(tmp_path, "a1")
        (Path(agent) / "skills" / "x").mkdir()
        with patch("skillctl.core.links.message"):
            outcomes = project([agent], "x", source)
        assert outcomes[0].status == LinkStatus.ERROR

    def test_project_is_idempotent(self, tmp_path, source):
        agents = [_agent(tmp_path, "a1")]
        project(agents, "x", source)
        outcomes = project(agents, "x", source)
        assert outcomes[0].status == LinkStatus.LINKED
        assert inspect_path(link_path(agents[0], "x")).points_at(source)


# ===========================================================================
# retract
# ===========================================================================
class TestRetract:

    def test_removes_links(self, tmp_path, source):
        agents = [_agent(tmp_path, "a1"), _agent(tmp_path, "a2")]
        project(agents, "x", source)

        outcomes = retract(agents, "x")

        assert [o.status for o in outcomes] == [LinkStatus.REMOVED, LinkStatus.REMOVED]
        for agent in agents:
            assert inspect_path(link_path(agent, "x")).kind == PathState.MISSING
        assert source.exists()

    def test_missing_link_is_absent(self, tmp_path):
        outcomes = retract([_agent(tmp_path, "a1")], "x")
        assert outcomes[0].status == LinkStatus.ABSENT
        assert outcomes[0].ok

    def test_real_directory_is_left_alone(self, tmp_path):
        agent = _agent(tmp_path, "a1")
        user_dir = Path(agent) / "skills" / "x"
        user_dir.mkdir()
        messages = []
        with patch("skillctl.core.links.message", side_effect=lambda t, *a, **kw: messages.append(t)):
            outcomes = retract([agent], "x")

        assert outcomes[0].status == LinkStatus.SKIPPED_NOT_SYMLINK
        assert user_dir.is_dir()
        assert any("not a symlink" in m for m in messages)

    def test_unlink_failure_is_recorded(self, tmp_path, source):
        agents = [_agent(tmp_path, "a1"), _agent(tmp_path, "a2")]
        project(agents, "x", source)

        with (
            patch("pathlib.Path.unlink", side_effect=PermissionError("busy")),
            patch("skillctl.core.links.message"),
        ):
            outcomes = retract(agents, "x")

        assert all(o.status == LinkStatus.ERROR for o in outcomes)
        assert inspect_path(link_path(agents[1], "x")).is_symlink
