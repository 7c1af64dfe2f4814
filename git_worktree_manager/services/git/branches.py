"""Branch discovery service for git-worktree-manager."""

from typing import List

from git_worktree_manager.constants import BRANCH_LIST_ARGS
from git_worktree_manager.exceptions import ToolInvocationError
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.services.git.parsers import parse_branch_list
from git_worktree_manager.services.git.runner import GitRunner

logger = get_logger(__name__)


class BranchDiscovery:
    """Lists local and remote branches as seen from a worktree."""

    def __init__(self, runner: GitRunner):
        self.runner = runner

    def get_branches(self, worktree_path: str) -> List[Branch]:
        """Get all branches for a worktree, with its checked-out branch marked current.

        Branch listing is best-effort: any failure gives an empty list.

        Args:
            worktree_path: Absolute path of the worktree

        Returns:
            Local branches followed by remote branches, in git's order
        """
        try:
            output = self.runner.check(BRANCH_LIST_ARGS, worktree_path)
        except (ToolInvocationError, ValueError) as e:
            logger.debug(f"Could not list branches for {worktree_path}: {e}")
            return []

        branches = parse_branch_list(output)
        logger.debug(f"Found {len(branches)} branches in {worktree_path}")
        return branches
