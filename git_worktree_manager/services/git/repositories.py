"""Repository discovery service for git-worktree-manager."""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from git_worktree_manager.constants import (
    GIT_COMMON_DIR_ARGS,
    GIT_DIR_ARGS,
    WORKTREE_LIST_ARGS,
    remote_url_args,
)
from git_worktree_manager.exceptions import ToolInvocationError
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.repository import Repository
from git_worktree_manager.models.worktree import Worktree
from git_worktree_manager.services.git.parsers import parse_remote_name, parse_worktree_list
from git_worktree_manager.services.git.runner import GitRunner
from git_worktree_manager.utils.threading import get_optimal_worker_count

logger = get_logger(__name__)


class RepositoryDiscovery:
    """Finds the repository behind each workspace root and lists its worktrees."""

    def __init__(
        self,
        runner: GitRunner,
        remote_name: str = "origin",
        workers: Optional[int] = None,
        sequential: bool = False,
    ):
        """Initialize the discovery service.

        Args:
            runner: Process runner used for every git call
            remote_name: Remote whose URL names the repository
            workers: Thread count for discover_all (None = auto-detect)
            sequential: Discover roots one after the other
        """
        self.runner = runner
        self.remote_name = remote_name
        self.workers = workers
        self.sequential = sequential

    def is_repository(self, root: str) -> bool:
        """Check whether ``root`` is inside a git repository."""
        return self.runner.run(GIT_DIR_ARGS, root).success

    def get_metadata_dir(self, root: str) -> Optional[str]:
        """Absolute path of the git directory shared by all worktrees of ``root``.

        Returns:
            The common git dir, or None if root is not a repository
        """
        result = self.runner.run(GIT_COMMON_DIR_ARGS, root)
        git_dir = result.stdout.rstrip("\r\n")
        if not result.success or not git_dir.strip():
            return None
        # git prints it relative to cwd when cwd is the main worktree
        return os.path.normpath(os.path.join(root, git_dir))

    def list_worktrees(self, root: str) -> List[Worktree]:
        """List the worktrees of the repository at ``root``.

        is_current is left False; the model assembler correlates it.

        Returns:
            Worktrees in git's order, or an empty list if the listing fails
        """
        try:
            output = self.runner.check(WORKTREE_LIST_ARGS, root)
        except ToolInvocationError as e:
            logger.debug(f"Could not list worktrees for {root}: {e.detail}")
            return []

        worktrees = parse_worktree_list(output)
        logger.debug(f"Found {len(worktrees)} worktrees in {root}")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def get_display_name(self, root: str) -> str:
        """Name the repository after its remote URL, falling back to the directory name."""
        result = self.runner.run(remote_url_args(self.remote_name), root)
        if result.success:
            name = parse_remote_name(result.stdout)
            if name:
                return name
        else:
            logger.debug(f"No {self.remote_name} remote for {root}, using directory name")
        return os.path.basename(os.path.normpath(root)) or root

    def discover(self, root: str) -> Optional[Repository]:
        """Discover the repository at one workspace root.

        Returns:
            The Repository, or None when root is not a repository or has no worktrees
        """
        if not self.is_repository(root):
            logger.debug(f"{root} is not a git repository")
            return None

        worktrees = self.list_worktrees(root)
        if not worktrees:
            logger.debug(f"Skipping {root}: no worktrees")
            return None

        return Repository(name=self.get_display_name(root), root_path=root, worktrees=tuple(worktrees))

    def discover_all(self, roots: Sequence[str]) -> List[Repository]:
        """Discover repositories for every root in parallel.

        A failure for one root is logged and that root is skipped; the
        others are unaffected. Results keep the order of ``roots``.
        """
        slots: List[Optional[Repository]] = [None] * len(roots)
        if not roots:
            return []

        max_workers = get_optimal_worker_count(len(roots), self.workers, self.sequential)
        if max_workers == 1:
            for index, root in enumerate(roots):
                slots[index] = self._discover_safely(root)
        else:
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="discover") as executor:
                future_to_index = {
                    executor.submit(self._discover_safely, root): index
                    for index, root in enumerate(roots)
                }
                for future in as_completed(future_to_index):
                    slots[future_to_index[future]] = future.result()

        return [repo for repo in slots if repo is not None]

    def _discover_safely(self, root: str) -> Optional[Repository]:
        try:
            return self.discover(root)
        except Exception as e:
            logger.warning(f"Error discovering repository at {root}: {e}", exc_info=True)
            return None
