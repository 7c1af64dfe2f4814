"""Worktree data models."""

from dataclasses import dataclass

from git_worktree_manager.constants import DETACHED_BRANCH


@dataclass(frozen=True)
class Worktree:
    """A working directory checked out from a repository."""

    path: str  # Absolute path, unique within a repository
    branch: str  # Bare branch name or DETACHED_BRANCH
    head_commit: str = ""
    is_current: bool = False  # Is this the queried workspace root?

    @property
    def is_detached(self) -> bool:
        """True if no branch is checked out."""
        return self.branch == DETACHED_BRANCH

    @property
    def short_commit(self) -> str:
        return self.head_commit[:7]

    def __str__(self) -> str:
        """String representation of worktree."""
        current_marker = " (current)" if self.is_current else ""
        return f"{self.branch} @ {self.path}{current_marker}"
