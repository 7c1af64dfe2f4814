"""Tree node variants handed to the presentation layer.

A node is one of three frozen dataclasses, each tagged with a NodeKind so a
renderer can dispatch on ``node.kind`` without isinstance chains.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Union

from git_worktree_manager.models.branch import Branch
from git_worktree_manager.models.repository import Repository
from git_worktree_manager.models.worktree import Worktree


class NodeKind(Enum):
    """Kind of a tree node."""
    REPOSITORY = "repository"
    WORKTREE = "worktree"
    BRANCH = "branch"


@dataclass(frozen=True)
class RepositoryNode:
    repository: Repository
    kind: NodeKind = field(default=NodeKind.REPOSITORY, init=False)

    @property
    def key(self) -> str:
        return self.repository.root_path


@dataclass(frozen=True)
class WorktreeNode:
    worktree: Worktree
    repository_root: str
    kind: NodeKind = field(default=NodeKind.WORKTREE, init=False)

    @property
    def key(self) -> str:
        return f"{self.repository_root}::{self.worktree.path}"


@dataclass(frozen=True)
class BranchNode:
    branch: Branch
    worktree_path: str
    kind: NodeKind = field(default=NodeKind.BRANCH, init=False)

    @property
    def key(self) -> str:
        return f"{self.worktree_path}::{self.branch.name}"


TreeNode = Union[RepositoryNode, WorktreeNode, BranchNode]


def children_of(node: TreeNode, get_branches: Callable[[str], List[Branch]]) -> List[TreeNode]:
    """Child nodes of ``node``.

    Branches are only listed when a worktree node is expanded, so they are
    fetched through ``get_branches`` at call time.
    """
    if node.kind is NodeKind.REPOSITORY:
        return [WorktreeNode(wt, node.repository.root_path) for wt in node.repository.worktrees]
    if node.kind is NodeKind.WORKTREE:
        path = node.worktree.path
        return [BranchNode(branch, path) for branch in get_branches(path)]
    return []
