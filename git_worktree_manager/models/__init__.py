"""Data models for git-worktree-manager."""

from .worktree import Worktree
from .branch import Branch
from .repository import Repository
from .tree import NodeKind, RepositoryNode, WorktreeNode, BranchNode, TreeNode

__all__ = [
    "Worktree",
    "Branch",
    "Repository",
    "NodeKind",
    "RepositoryNode",
    "WorktreeNode",
    "BranchNode",
    "TreeNode",
]
