"""Core functionality for git-worktree-manager"""

from threading import Lock
from typing import Callable, Dict, List, Optional, Union

from git_worktree_manager.config import Config
from git_worktree_manager.exceptions import NoWorkspaceError
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.services.git.branches import BranchDiscovery
from git_worktree_manager.services.git.operations import OperationResult, WorktreeOperations
from git_worktree_manager.services.git.repositories import RepositoryDiscovery
from git_worktree_manager.services.git.runner import GitRunner
from git_worktree_manager.services.model import ModelListener, Snapshot, WorktreeModel
from git_worktree_manager.services.notifier import ChangeNotifier

logger = get_logger(__name__)


class WorktreeManager:
    """Workspace context: wires discovery, model, operations and change notification.

    Create one at startup, call start(), and close() it at shutdown (or use
    it as a context manager). The presentation layer talks only to this
    object.
    """

    def __init__(
        self,
        config: Union[Config, dict],
        runner: Optional[GitRunner] = None,
        open_workspace: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the manager.

        Args:
            config: Configuration dict or Config object
            runner: Process runner (injected in tests)
            open_workspace: Hook that opens a path as the active workspace
        """
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config

        self.runner = runner or GitRunner(timeout=self.config.git_timeout)
        self.discovery = RepositoryDiscovery(
            self.runner,
            remote_name=self.config.remote_name,
            workers=self.config.workers,
            sequential=self.config.sequential,
        )
        self.branch_discovery = BranchDiscovery(self.runner)
        self.model = WorktreeModel(self.config, self.discovery, self.branch_discovery)
        self.operations = WorktreeOperations(
            self.runner, self.config, on_change=self.refresh, open_workspace=open_workspace
        )
        self.notifier: Optional[ChangeNotifier] = None
        if self.config.watch:
            self.notifier = ChangeNotifier(self.refresh, self.config.debounce_seconds)

        self._metadata_dirs: Dict[str, Optional[str]] = {}
        self._metadata_lock = Lock()
        self.model.add_listener(self._update_watches)

    def __enter__(self) -> "WorktreeManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def start(self) -> None:
        """Load the first snapshot and begin watching for external changes.

        Raises:
            NoWorkspaceError: If no workspace root is configured
        """
        if self.config.primary_root is None:
            raise NoWorkspaceError()
        if self.notifier is not None:
            self.notifier.start()
        self.refresh()

    def close(self) -> None:
        """Stop watching; the manager can be discarded afterwards."""
        if self.notifier is not None:
            self.notifier.stop()
        self.model.remove_listener(self._update_watches)

    def set_workspace_opener(self, open_workspace: Optional[Callable[[str], None]]) -> None:
        self.operations.open_workspace = open_workspace

    # Model access

    def get_repositories(self) -> Snapshot:
        return self.model.get_repositories()

    def get_branches(self, worktree_path: str) -> List[Branch]:
        return self.model.get_branches(worktree_path)

    def refresh(self) -> None:
        """Rebuild the model; listeners receive the new snapshot."""
        self.model.refresh()

    def add_listener(self, listener: ModelListener) -> None:
        self.model.add_listener(listener)

    def remove_listener(self, listener: ModelListener) -> None:
        self.model.remove_listener(listener)

    # Mutations

    def create_worktree(self, branch_name: str, target_path: str) -> OperationResult:
        return self.operations.create_worktree(branch_name, target_path)

    def remove_worktree(self, path: str, force: bool = False) -> OperationResult:
        return self.operations.remove_worktree(path, force=force)

    def switch_branch(self, worktree_path: str, branch_name: str, is_remote: Optional[bool] = None) -> OperationResult:
        return self.operations.switch_branch(worktree_path, branch_name, is_remote=is_remote)

    def switch_to_worktree(self, path: str) -> OperationResult:
        return self.operations.switch_to_worktree(path)

    def _update_watches(self, snapshot: Snapshot) -> None:
        """Point the notifier at the metadata directories of the current repositories."""
        if self.notifier is None or not self.notifier.is_running:
            return

        with self._metadata_lock:
            for repository in snapshot:
                if repository.root_path not in self._metadata_dirs:
                    self._metadata_dirs[repository.root_path] = self.discovery.get_metadata_dir(
                        repository.root_path
                    )
            dirs = [self._metadata_dirs.get(repository.root_path) for repository in snapshot]

        self.notifier.rewatch(d for d in dirs if d)
