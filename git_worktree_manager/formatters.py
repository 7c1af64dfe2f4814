"""Formatting helpers shared by the CLI and the TUI."""

from typing import Dict, List, Optional, Sequence

from rich.text import Text
from rich.tree import Tree

from git_worktree_manager.constants import (
    COLOR_CURRENT,
    COLOR_DETACHED,
    COLOR_REMOTE,
    SYMBOL_BRANCH,
    SYMBOL_CURRENT,
    SYMBOL_REMOTE,
    SYMBOL_WORKTREE,
)
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.models.repository import Repository
from git_worktree_manager.models.tree import NodeKind, TreeNode
from git_worktree_manager.models.worktree import Worktree


def format_repository_label(repository: Repository) -> Text:
    """
    Format a repository row: bold name followed by its root path.

    Args:
        repository: Repository to label

    Returns:
        Rich Text label
    """
    label = Text(repository.name, style="bold")
    label.append(f"  {repository.root_path}", style="dim")
    return label


def format_worktree_label(worktree: Worktree) -> Text:
    """
    Format a worktree row. The current worktree gets a check mark and is
    green; a detached one shows its short commit in yellow.

    Args:
        worktree: Worktree to label

    Returns:
        Rich Text label
    """
    if worktree.is_current:
        label = Text(f"{SYMBOL_CURRENT} {worktree.branch}", style=COLOR_CURRENT)
    elif worktree.is_detached:
        label = Text(f"{SYMBOL_WORKTREE} {worktree.branch}", style=COLOR_DETACHED)
        if worktree.short_commit:
            label.append(f" @ {worktree.short_commit}", style=COLOR_DETACHED)
    else:
        label = Text(f"{SYMBOL_WORKTREE} {worktree.branch}")

    label.append(f"  {worktree.path}", style="dim")
    if worktree.is_current:
        label.append("  (current)", style="dim")
    return label


def format_branch_label(branch: Branch) -> Text:
    """Format a branch row (``*`` marks the checked-out branch)."""
    if branch.is_remote:
        return Text(f"{SYMBOL_REMOTE} {branch.name}", style=COLOR_REMOTE)
    if branch.is_current:
        return Text(f"* {branch.name}", style=f"bold {COLOR_CURRENT}")
    return Text(f"{SYMBOL_BRANCH} {branch.name}")


def format_node_label(node: TreeNode) -> Text:
    """Label for any tree node, chosen by its kind."""
    if node.kind is NodeKind.REPOSITORY:
        return format_repository_label(node.repository)
    if node.kind is NodeKind.WORKTREE:
        return format_worktree_label(node.worktree)
    return format_branch_label(node.branch)


def build_repository_tree(
    repositories: Sequence[Repository],
    branches: Optional[Dict[str, List[Branch]]] = None,
    title: str = "Worktrees",
) -> Tree:
    """
    Build a Rich tree of repositories, their worktrees and (optionally) branches.

    Args:
        repositories: Snapshot to render
        branches: Branch lists keyed by worktree path; worktrees without an
            entry are rendered as leaves
        title: Label of the root node

    Returns:
        Rich Tree ready for Console.print
    """
    tree = Tree(Text(title, style="bold"))
    for repository in repositories:
        repo_node = tree.add(format_repository_label(repository))
        for worktree in repository.worktrees:
            worktree_node = repo_node.add(format_worktree_label(worktree))
            for branch in (branches or {}).get(worktree.path, []):
                worktree_node.add(format_branch_label(branch))
    return tree
