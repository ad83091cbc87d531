"""Repository resolvers: turn (url, ref) into a local snapshot and a sha."""

from .abstract_resolver import AbstractResolver
from .git_resolver import GitResolver

__all__ = ["AbstractResolver", "GitResolver"]
