"""Mutating git operations: create/remove worktrees and switch branches."""

import os
from threading import Lock
from typing import Callable, NamedTuple, Optional, Union, TYPE_CHECKING

from git_worktree_manager.exceptions import (
    InvalidArgumentError,
    NoWorkspaceError,
    ToolInvocationError,
)
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.services.git.runner import GitRunner

if TYPE_CHECKING:
    from git_worktree_manager.config import Config

logger = get_logger(__name__)


class OperationResult(NamedTuple):
    """Outcome of a mutation: an info message on success, the error text on failure."""

    success: bool
    message: Optional[str] = None


def validate_argument(argument: str, value: Optional[str]) -> str:
    """Reject empty values and values git would read as an option.

    Returns:
        The value, unchanged

    Raises:
        InvalidArgumentError: If the value is unusable
    """
    value = value or ""
    if not value.strip():
        raise InvalidArgumentError(argument, value, "must not be empty")
    if value.startswith("-"):
        raise InvalidArgumentError(argument, value, "must not start with '-'")
    if any(ch in value for ch in ("\0", "\n", "\r")):
        raise InvalidArgumentError(argument, value, "must not contain control characters")
    return value


def resolve_checkout_name(branch_name: str, is_remote: Optional[bool] = None) -> str:
    """Name to check out for a branch picked from the branch list.

    ``origin/feature-x`` checks out as ``feature-x``. When the caller knows
    the branch is local (``is_remote=False``) the name is used as is, so
    local names such as ``release/1.0`` survive; when it is unknown the
    part before the first ``/`` is assumed to be a remote.
    """
    if is_remote is None:
        is_remote = "/" in branch_name
    return Branch(branch_name, is_remote=is_remote).checkout_name


class WorktreeOperations:
    """Runs the four user-driven mutations, one at a time."""

    def __init__(
        self,
        runner: GitRunner,
        config: Union["Config", dict],
        on_change: Optional[Callable[[], None]] = None,
        open_workspace: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the operations service.

        Args:
            runner: Process runner used for every git call
            config: Configuration (roots are read at call time)
            on_change: Called after a successful mutation to rebuild the model
            open_workspace: Presentation-layer hook that opens a path as the active workspace
        """
        self.runner = runner
        self.config = config
        self.on_change = on_change
        self.open_workspace = open_workspace
        self._lock = Lock()  # Two git processes must not race on one index/lock file

    def _primary_root(self) -> str:
        roots = self.config.get("roots") or []
        if not roots:
            raise NoWorkspaceError()
        return roots[0]

    def _run_mutation(self, action: str, args: list, cwd: str) -> Optional[str]:
        """Run a mutating git command under the operations lock.

        Returns:
            None on success, otherwise the error text to show the user
        """
        with self._lock:
            try:
                self.runner.check(args, cwd)
            except ToolInvocationError as e:
                error_msg = f"Failed to {action}: {e.detail}"
                logger.error(error_msg)
                return error_msg
            except ValueError as e:
                error_msg = f"Failed to {action}: {e}"
                logger.error(error_msg)
                return error_msg
        return None

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    def create_worktree(self, branch_name: str, target_path: str) -> OperationResult:
        """Create a worktree at ``target_path`` on a new branch ``branch_name``.

        Runs in the primary workspace root, so a relative path is relative to it.
        git itself reports existing paths or branch names.
        """
        try:
            branch_name = validate_argument("branch name", branch_name)
            target_path = validate_argument("path", target_path)
            root = self._primary_root()
        except (InvalidArgumentError, NoWorkspaceError) as e:
            return OperationResult(False, str(e))

        error = self._run_mutation("create worktree", ["worktree", "add", target_path, "-b", branch_name], root)
        if error:
            return OperationResult(False, error)

        logger.info(f"Created worktree {target_path} on new branch {branch_name}")
        self._changed()
        return OperationResult(True, f"Created worktree: {branch_name} at {target_path}")

    def remove_worktree(self, path: str, force: bool = False) -> OperationResult:
        """Remove the worktree at ``path``.

        git refuses to remove a worktree with uncommitted changes unless
        ``force`` is set; that refusal is returned as the error message.
        """
        try:
            path = validate_argument("path", path)
            root = self._primary_root()
        except (InvalidArgumentError, NoWorkspaceError) as e:
            return OperationResult(False, str(e))

        args = ["worktree", "remove", path]
        if force:
            args.append("--force")

        error = self._run_mutation("remove worktree", args, root)
        if error:
            return OperationResult(False, error)

        logger.info(f"Removed worktree at {path}")
        self._changed()
        return OperationResult(True, f"Removed worktree at {path}")

    def switch_branch(self, worktree_path: str, branch_name: str, is_remote: Optional[bool] = None) -> OperationResult:
        """Check out ``branch_name`` in the worktree at ``worktree_path``.

        Args:
            worktree_path: Worktree whose checked-out branch changes
            branch_name: Branch as listed (remote branches are remote-qualified)
            is_remote: Whether the listed branch is remote, if known
        """
        try:
            worktree_path = validate_argument("worktree path", worktree_path)
            branch_name = validate_argument("branch name", branch_name)
            checkout_name = validate_argument("branch name", resolve_checkout_name(branch_name, is_remote))
        except InvalidArgumentError as e:
            return OperationResult(False, str(e))

        error = self._run_mutation("switch branch", ["checkout", checkout_name], worktree_path)
        if error:
            return OperationResult(False, error)

        logger.info(f"Checked out {checkout_name} in {worktree_path}")
        self._changed()
        return OperationResult(True, f"Switched {worktree_path} to {checkout_name}")

    def switch_to_worktree(self, path: str) -> OperationResult:
        """Ask the presentation layer to open ``path`` as the active workspace.

        No repository state changes, so the model is not refreshed.
        """
        try:
            path = validate_argument("path", path)
        except InvalidArgumentError as e:
            return OperationResult(False, str(e))

        if not os.path.isdir(path):
            return OperationResult(False, f"Worktree folder does not exist: {path}")
        if self.open_workspace is None:
            return OperationResult(False, "Opening a workspace is not supported here")

        try:
            self.open_workspace(path)
        except Exception as e:
            logger.error(f"Could not open {path}: {e}")
            return OperationResult(False, f"Failed to open worktree: {e}")

        return OperationResult(True, f"Opened {path}")
