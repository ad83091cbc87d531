"""Git repository resolver."""

import shutil
from pathlib import Path

import git

from skillctl.errors import ResolutionError
from skillctl.output import MessageType, VerbosityLevel, message
from skillctl.resolvers.abstract_resolver import AbstractResolver
from skillctl.utils import is_file_url, normalize_git_url


def _diagnostic(error: git.exc.CommandError) -> str:
    """Best available text from a failed git command."""
    stderr = error.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode(errors="replace")
    return stderr.strip() or str(error)


class GitResolver(AbstractResolver):
    """Resolves repositories with shallow git clones."""

    REPO_TYPE = "git"

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        """Check if this looks like something git can clone.

        Args:
            url: The URL to check

        Returns:
            True if this looks like a git URL
        """
        git_patterns = [
            url.startswith("git@"),
            url.startswith("git://"),
            url.startswith("ssh://"),
            url.startswith(("http://", "https://")),
            is_file_url(url),
            # Bare hosting paths get an https:// prefix
            "github.com" in url,
            "gitlab.com" in url,
            "bitbucket.org" in url,
            url.endswith(".git"),
        ]
        return any(git_patterns)

    def resolve(self, url: str, ref: str, dest: Path) -> str:
        """Shallow-clone *url* at *ref* into *dest*.

        Tries ``git clone --branch <ref> --depth 1`` first.  When *ref* is
        not something ``--branch`` accepts (e.g. a commit), clones the
        default branch and then fetches and checks out *ref*.
        """
        git_url = normalize_git_url(url)

        if dest.exists():
            message(f"Replacing existing snapshot at {dest}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            shutil.rmtree(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)

        message(f"Cloning {git_url} ({ref}) into {dest}", MessageType.INFO, VerbosityLevel.EXTRA_VERBOSE)
        try:
            repo = git.Repo.clone_from(git_url, dest, branch=ref, depth=1)
        except git.exc.CommandError as e:
            message(
                f"Shallow clone of '{ref}' failed, falling back to fetch and checkout: {_diagnostic(e)}",
                MessageType.DEBUG,
                VerbosityLevel.DEBUG,
            )
            shutil.rmtree(dest, ignore_errors=True)
            try:
                repo = git.Repo.clone_from(git_url, dest, depth=1)
                repo.git.fetch("--depth=1", "origin", ref)
                repo.git.checkout("FETCH_HEAD")
            except git.exc.CommandError as e2:
                # Never leave a snapshot of the default branch behind
                shutil.rmtree(dest, ignore_errors=True)
                raise ResolutionError(f"Failed to clone {url} at '{ref}'", _diagnostic(e2)) from e2

        return repo.head.commit.hexsha

    def refresh(self, dest: Path, ref: str) -> str:
        """Fetch the latest *ref* and move the working copy to it.

        A shallow fetch is tried first; if the remote refuses it the clone
        is deepened and the fetch retried.
        """
        if not dest.exists():
            raise ResolutionError(f"Repository directory does not exist: {dest}")

        try:
            repo = git.Repo(dest)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise ResolutionError(f"{dest} is not a valid git repository") from e

        try:
            origin = repo.remotes.origin
        except (AttributeError, IndexError) as e:
            raise ResolutionError(f"{dest} has no 'origin' remote") from e

        message(f"Fetching '{ref}' for {dest}", MessageType.DEBUG, VerbosityLevel.DEBUG)
        try:
            try:
                repo.git.fetch("--depth=1", origin.name, ref)
            except git.exc.GitCommandError as e:
                message(f"Shallow fetch failed, deepening: {_diagnostic(e)}", MessageType.DEBUG, VerbosityLevel.DEBUG)
                if (Path(repo.git_dir) / "shallow").exists():
                    repo.git.fetch("--unshallow", origin.name)
                repo.git.fetch(origin.name, ref)
            repo.head.reset("FETCH_HEAD", index=True, working_tree=True)
        except git.exc.CommandError as e:
            raise ResolutionError(f"Failed to update {dest} to '{ref}'", _diagnostic(e)) from e

        return repo.head.commit.hexsha
