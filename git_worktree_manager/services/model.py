"""Model assembly: repositories, worktrees and branches as one consistent snapshot."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from threading import Lock
from typing import Callable, Dict, Iterable, List, Sequence, Tuple, Union, TYPE_CHECKING

from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.models.repository import Repository
from git_worktree_manager.models.worktree import Worktree
from git_worktree_manager.services.git.branches import BranchDiscovery
from git_worktree_manager.services.git.parsers import mark_current_worktree, normalize_path
from git_worktree_manager.services.git.repositories import RepositoryDiscovery
from git_worktree_manager.utils.threading import get_optimal_worker_count

if TYPE_CHECKING:
    from git_worktree_manager.config import Config

logger = get_logger(__name__)

Snapshot = Tuple[Repository, ...]
ModelListener = Callable[[Snapshot], None]


def assemble_repositories(repositories: Iterable[Repository], normalize_paths: bool = True) -> Snapshot:
    """Build the final repository list from discovery results.

    - repositories sharing a root path are kept once (first wins)
    - worktrees sharing a path within a repository are kept once
    - the worktree located at the repository root is marked current
    - repositories left without worktrees are dropped
    """
    def key(path: str) -> str:
        return normalize_path(path) if normalize_paths else path

    assembled: List[Repository] = []
    seen_roots = set()

    for repository in repositories:
        root_key = key(repository.root_path)
        if root_key in seen_roots:
            logger.debug(f"Dropping duplicate repository root {repository.root_path}")
            continue
        seen_roots.add(root_key)

        worktrees: List[Worktree] = []
        seen_paths = set()
        for worktree in repository.worktrees:
            path_key = key(worktree.path)
            if path_key in seen_paths:
                logger.debug(f"Dropping duplicate worktree {worktree.path}")
                continue
            seen_paths.add(path_key)
            worktrees.append(worktree)

        if not worktrees:
            continue

        worktrees = mark_current_worktree(worktrees, repository.root_path, normalize_paths)
        assembled.append(replace(repository, worktrees=tuple(worktrees)))

    return tuple(assembled)


class WorktreeModel:
    """Owns the repository snapshot and rebuilds it on refresh.

    Refreshes are serialized. Every call to refresh() takes a new
    generation number; a pass that is overtaken by a newer request before
    it publishes is discarded, so the newest request always wins and
    readers only ever see complete snapshots.
    """

    def __init__(
        self,
        config: Union["Config", dict],
        discovery: RepositoryDiscovery,
        branch_discovery: BranchDiscovery,
    ):
        """Initialize the model.

        Args:
            config: Configuration (roots are read on every refresh)
            discovery: Repository discovery service
            branch_discovery: Branch discovery service
        """
        self.config = config
        self.discovery = discovery
        self.branch_discovery = branch_discovery
        self.normalize_paths = config.get("normalize_paths", True)

        self._state_lock = Lock()  # Guards snapshot, generation and listeners
        self._refresh_lock = Lock()  # One discovery pass at a time
        self._generation = 0
        self._published_generation = 0
        self._snapshot: Snapshot = ()
        self._loaded = False
        self._listeners: List[ModelListener] = []

    @property
    def generation(self) -> int:
        """Number of the most recently requested refresh."""
        with self._state_lock:
            return self._generation

    @property
    def published_generation(self) -> int:
        """Number of the refresh that produced the current snapshot."""
        with self._state_lock:
            return self._published_generation

    def add_listener(self, listener: ModelListener) -> None:
        """Register a callback invoked with the new snapshot after every published refresh."""
        with self._state_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ModelListener) -> None:
        with self._state_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def get_repositories(self) -> Snapshot:
        """Current snapshot, loading it first if no refresh has run yet."""
        with self._state_lock:
            loaded = self._loaded
        # A first load overtaken by another refresh retries until something is published
        while not loaded:
            self.refresh()
            with self._state_lock:
                loaded = self._loaded
        with self._state_lock:
            return self._snapshot

    def get_branches(self, worktree_path: str) -> List[Branch]:
        """Branches as seen from one worktree, queried on demand and never cached."""
        return self.branch_discovery.get_branches(worktree_path)

    def get_branches_for(self, worktree_paths: Sequence[str]) -> Dict[str, List[Branch]]:
        """Branches for several worktrees, queried in parallel."""
        branches: Dict[str, List[Branch]] = {}
        if not worktree_paths:
            return branches

        max_workers = get_optimal_worker_count(
            len(worktree_paths), self.config.get("workers"), self.config.get("sequential", False)
        )
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="branches") as executor:
            future_to_path = {executor.submit(self.get_branches, path): path for path in worktree_paths}
            for future in as_completed(future_to_path):
                branches[future_to_path[future]] = future.result()
        return branches

    def refresh(self) -> bool:
        """Rebuild the snapshot from scratch and notify listeners.

        Returns:
            True if this call published a snapshot, False if a newer
            request superseded it
        """
        with self._state_lock:
            self._generation += 1
            generation = self._generation

        with self._refresh_lock:
            with self._state_lock:
                if generation != self._generation:
                    logger.debug(f"Refresh {generation} superseded before it started")
                    return False

            roots = list(self.config.get("roots") or [])
            repositories = assemble_repositories(self.discovery.discover_all(roots), self.normalize_paths)

            with self._state_lock:
                if generation != self._generation:
                    logger.debug(f"Discarding stale refresh {generation} (latest is {self._generation})")
                    return False
                self._snapshot = repositories
                self._published_generation = generation
                self._loaded = True
                listeners = list(self._listeners)

        logger.debug(f"Refresh {generation} published {len(repositories)} repositories")
        self._notify(listeners, repositories)
        return True

    def _notify(self, listeners: List[ModelListener], snapshot: Snapshot) -> None:
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"Model listener {listener!r} failed: {e}", exc_info=True)

