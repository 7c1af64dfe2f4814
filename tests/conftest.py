"""Pytest fixtures for git-worktree-manager tests"""
import tempfile
from pathlib import Path
import pytest
import git

from git_worktree_manager.config import Config
from git_worktree_manager.services.git.runner import CommandResult, GitRunner


class FakeRunner(GitRunner):
    """GitRunner that answers from a table instead of spawning git.

    Responses are looked up by (cwd, argv) first, then by argv alone. A
    response may be an exception instance, which is raised. Unknown calls
    fail like git would.
    """

    def __init__(self):
        super().__init__()
        self.responses = {}
        self.calls = []

    def add(self, args, stdout="", stderr="", success=True, cwd=None, status=None):
        key = (cwd, tuple(args)) if cwd else tuple(args)
        if status is None:
            status = 0 if success else 128
        self.responses[key] = CommandResult(stdout, stderr, success, status)

    def raise_for(self, cwd, args, error):
        self.responses[(cwd, tuple(args))] = error

    def run(self, args, cwd):
        self.calls.append((tuple(args), cwd))
        for key in ((cwd, tuple(args)), tuple(args)):
            if key in self.responses:
                response = self.responses[key]
                if isinstance(response, Exception):
                    raise response
                return response
        return CommandResult("", f"fatal: unexpected call {list(args)}", False, 128)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolved so paths match what git prints (e.g. /private/var on macOS)
        yield Path(tmpdir).resolve()


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def mock_config():
    """Create a configuration dictionary for a single fake root."""
    return {
        'roots': ['/work/myproj'],
        'remote_name': 'origin',
        'watch': False,
        'debounce_seconds': 0.3,
        'normalize_paths': True,
        'sequential': False,
        'workers': None,
        'verbose': False,
        'debug': False,
    }


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit on main branch
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    # The repository is named after this remote
    repo.create_remote('origin', 'git@github.com:test/myproj.git')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def git_repo_with_worktree(git_repo, temp_dir):
    """Repository with a second worktree on branch feature-x."""
    worktree_path = temp_dir / "feature-x-wt"
    git_repo.git.worktree('add', str(worktree_path), '-b', 'feature-x')

    # A remote-tracking branch without fetching from anywhere
    git_repo.git.update_ref('refs/remotes/origin/feature-y', 'HEAD')

    yield git_repo


@pytest.fixture
def repo_config(git_repo):
    """Config rooted at the real test repository, without file watching."""
    return Config(roots=[git_repo.working_dir], watch=False)
