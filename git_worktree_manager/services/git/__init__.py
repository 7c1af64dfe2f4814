"""Git-related services for git-worktree-manager."""

from .runner import GitRunner, CommandResult
from .repositories import RepositoryDiscovery
from .branches import BranchDiscovery
from .operations import WorktreeOperations, OperationResult

__all__ = [
    "GitRunner",
    "CommandResult",
    "RepositoryDiscovery",
    "BranchDiscovery",
    "WorktreeOperations",
    "OperationResult",
]
