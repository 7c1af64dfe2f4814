"""Branch model"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Branch:
    """A local or remote branch as seen from one worktree."""
    name: str  # Remote-qualified for remote branches, e.g. "origin/main"
    is_current: bool = False
    is_remote: bool = False

    @property
    def remote(self) -> Optional[str]:
        """Name of the remote a remote branch was fetched from."""
        if not self.is_remote or "/" not in self.name:
            return None
        return self.name.split("/", 1)[0]

    @property
    def checkout_name(self) -> str:
        """Name to pass to checkout: remote branches lose their remote qualifier."""
        if self.remote is None:
            return self.name
        return self.name.split("/", 1)[1]
