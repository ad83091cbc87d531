"""Error kinds raised by skillctl operations.

Every error the core can produce derives from :class:`SkillctlError`, so the
command line layer can turn any of them into a message and an exit status.
"""


class SkillctlError(Exception):
    """Base class for all skillctl errors."""


class ValidationError(SkillctlError):
    """Bad input (alias format, skill name, path) detected before any change."""


class NotFoundError(SkillctlError):
    """Unknown repository alias, skill name or agent path."""


class AlreadyExistsError(SkillctlError):
    """Duplicate repository alias, skill name or agent path."""


class DependentSkillsExist(SkillctlError):
    """A repository still has installed skills and cascade was not requested."""

    def __init__(self, alias: str, skills: list[str]):
        self.alias = alias
        self.skills = list(skills)
        names = ", ".join(self.skills)
        super().__init__(
            f"Repository '{alias}' has {len(self.skills)} installed skill(s): {names}"
        )


class ResolutionError(SkillctlError):
    """The version-control step failed.

    Attributes:
        diagnostic: Raw diagnostic text from the underlying tool, if any
    """

    def __init__(self, msg: str, diagnostic: str = ""):
        self.diagnostic = diagnostic.strip()
        super().__init__(msg)


class LinkError(SkillctlError):
    """Links could not be created and the operation was rolled back."""

    def __init__(self, msg: str, outcomes: list | None = None):
        self.outcomes = list(outcomes or [])
        super().__init__(msg)
