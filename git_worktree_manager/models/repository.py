"""Repository data model."""

from dataclasses import dataclass
from typing import Optional, Tuple

from git_worktree_manager.models.worktree import Worktree


@dataclass(frozen=True)
class Repository:
    """A repository discovered under one workspace root."""

    name: str  # From the remote URL, else the root directory name
    root_path: str  # Unique across the workspace
    worktrees: Tuple[Worktree, ...] = ()

    @property
    def current_worktree(self) -> Optional[Worktree]:
        """The worktree matching the queried root, if any."""
        return next((wt for wt in self.worktrees if wt.is_current), None)
