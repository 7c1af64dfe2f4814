"""Tests for BranchDiscovery"""
from git_worktree_manager.constants import BRANCH_LIST_ARGS
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.services.git.branches import BranchDiscovery
from git_worktree_manager.services.git.runner import GitRunner


class TestBranchDiscovery:
    """Test listing branches for a worktree."""

    def test_parses_runner_output(self, fake_runner):
        fake_runner.add(BRANCH_LIST_ARGS, stdout="* main\n  remotes/origin/main\n", cwd="/repo")

        branches = BranchDiscovery(fake_runner).get_branches("/repo")

        assert branches == [Branch("main", is_current=True), Branch("origin/main", is_remote=True)]
        assert fake_runner.calls == [(BRANCH_LIST_ARGS, "/repo")]

    def test_failure_gives_empty_list(self, fake_runner):
        fake_runner.add(BRANCH_LIST_ARGS, stderr="fatal: not a git repository", success=False, cwd="/gone")

        assert BranchDiscovery(fake_runner).get_branches("/gone") == []

    def test_relative_path_gives_empty_list(self, fake_runner):
        assert BranchDiscovery(GitRunner()).get_branches("not/absolute") == []

    def test_real_worktrees(self, git_repo_with_worktree, temp_dir):
        discovery = BranchDiscovery(GitRunner())

        main_branches = discovery.get_branches(git_repo_with_worktree.working_dir)
        feature_branches = discovery.get_branches(str(temp_dir / "feature-x-wt"))

        assert [b.name for b in main_branches if b.is_current] == ["main"]
        assert [b.name for b in feature_branches if b.is_current] == ["feature-x"]
        names = {b.name for b in main_branches}
        assert {"main", "feature-x", "origin/feature-y"} <= names
        assert [b for b in main_branches if b.name == "origin/feature-y"][0].is_remote is True
