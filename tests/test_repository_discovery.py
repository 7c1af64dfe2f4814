"""Tests for RepositoryDiscovery"""
import os

import pytest

from git_worktree_manager.constants import (
    GIT_COMMON_DIR_ARGS,
    GIT_DIR_ARGS,
    WORKTREE_LIST_ARGS,
    remote_url_args,
)
from git_worktree_manager.services.git.repositories import RepositoryDiscovery
from git_worktree_manager.services.git.runner import GitRunner


def listing(*records):
    """Porcelain text for (path, branch) records."""
    chunks = []
    for index, (path, branch) in enumerate(records):
        chunk = f"worktree {path}\nHEAD {index:040d}\n"
        if branch:
            chunk += f"branch refs/heads/{branch}\n"
        chunks.append(chunk)
    return "\n".join(chunks)


def add_repository(runner, root, records, url=None):
    runner.add(GIT_DIR_ARGS, stdout=".git", cwd=root)
    runner.add(WORKTREE_LIST_ARGS, stdout=listing(*records), cwd=root)
    if url:
        runner.add(remote_url_args("origin"), stdout=url, cwd=root)
    else:
        runner.add(remote_url_args("origin"), success=False, status=1, cwd=root)


class TestDiscover:
    """Test discovery of a single root."""

    def test_named_after_remote(self, fake_runner):
        add_repository(
            fake_runner,
            "/repo",
            [("/repo", "main"), ("/repo-feature", "feature-x")],
            url="git@host:org/myproj.git",
        )
        discovery = RepositoryDiscovery(fake_runner)

        repository = discovery.discover("/repo")

        assert repository.name == "myproj"
        assert repository.root_path == "/repo"
        assert [(wt.path, wt.branch) for wt in repository.worktrees] == [
            ("/repo", "main"),
            ("/repo-feature", "feature-x"),
        ]

    def test_falls_back_to_directory_name(self, fake_runner):
        add_repository(fake_runner, "/src/tools", [("/src/tools", "main")])
        discovery = RepositoryDiscovery(fake_runner)

        assert discovery.discover("/src/tools").name == "tools"

    def test_configured_remote_is_used(self, fake_runner):
        add_repository(fake_runner, "/repo", [("/repo", "main")])
        fake_runner.add(remote_url_args("upstream"), stdout="https://host/org/upstream-name", cwd="/repo")
        discovery = RepositoryDiscovery(fake_runner, remote_name="upstream")

        assert discovery.discover("/repo").name == "upstream-name"

    def test_not_a_repository(self, fake_runner):
        fake_runner.add(GIT_DIR_ARGS, stderr="fatal: not a git repository", success=False, cwd="/plain")
        discovery = RepositoryDiscovery(fake_runner)

        assert discovery.discover("/plain") is None
        # Not a repository, so nothing else was asked
        assert fake_runner.calls == [(GIT_DIR_ARGS, "/plain")]

    def test_failed_listing_skips_root(self, fake_runner):
        fake_runner.add(GIT_DIR_ARGS, stdout=".git", cwd="/repo")
        fake_runner.add(WORKTREE_LIST_ARGS, stderr="fatal: broken", success=False, cwd="/repo")
        discovery = RepositoryDiscovery(fake_runner)

        assert discovery.list_worktrees("/repo") == []
        assert discovery.discover("/repo") is None

    def test_worktrees_are_not_marked_current(self, fake_runner):
        add_repository(fake_runner, "/repo", [("/repo", "main")])
        discovery = RepositoryDiscovery(fake_runner)

        assert discovery.discover("/repo").worktrees[0].is_current is False


class TestDiscoverAll:
    """Test discovery across several roots."""

    @pytest.mark.parametrize("sequential", [True, False])
    def test_one_failing_root_does_not_affect_others(self, fake_runner, sequential):
        roots = ["/a", "/b", "/c", "/d"]
        for root in roots:
            add_repository(fake_runner, root, [(root, "main")])
        fake_runner.raise_for("/b", GIT_DIR_ARGS, OSError("git-dir check exploded"))

        discovery = RepositoryDiscovery(fake_runner, sequential=sequential)
        repositories = discovery.discover_all(roots)

        assert [repo.root_path for repo in repositories] == ["/a", "/c", "/d"]

    def test_results_keep_root_order(self, fake_runner):
        roots = [f"/r{i}" for i in range(10)]
        for root in roots:
            add_repository(fake_runner, root, [(root, "main")])

        discovery = RepositoryDiscovery(fake_runner, workers=4)

        assert [repo.root_path for repo in discovery.discover_all(roots)] == roots

    def test_non_repositories_are_excluded(self, fake_runner):
        add_repository(fake_runner, "/repo", [("/repo", "main")])
        discovery = RepositoryDiscovery(fake_runner)

        assert [repo.root_path for repo in discovery.discover_all(["/plain", "/repo"])] == ["/repo"]

    def test_no_roots(self, fake_runner):
        assert RepositoryDiscovery(fake_runner).discover_all([]) == []


class TestMetadataDir:
    """Test locating the shared git directory."""

    def test_relative_output_is_joined_with_root(self, fake_runner):
        fake_runner.add(GIT_COMMON_DIR_ARGS, stdout=".git\n", cwd="/repo")
        discovery = RepositoryDiscovery(fake_runner)

        assert discovery.get_metadata_dir("/repo") == os.path.normpath("/repo/.git")

    def test_trailing_space_in_output_is_kept(self, fake_runner):
        fake_runner.add(GIT_COMMON_DIR_ARGS, stdout="/srv/proj.git \n", cwd="/repo")

        assert RepositoryDiscovery(fake_runner).get_metadata_dir("/repo") == "/srv/proj.git "

    def test_linked_worktree_points_at_main_repository(self, git_repo_with_worktree, temp_dir):
        discovery = RepositoryDiscovery(GitRunner())

        expected = os.path.join(git_repo_with_worktree.working_dir, ".git")
        assert os.path.realpath(discovery.get_metadata_dir(str(temp_dir / "feature-x-wt"))) == (
            os.path.realpath(expected)
        )

    def test_not_a_repository(self, temp_dir):
        assert RepositoryDiscovery(GitRunner()).get_metadata_dir(str(temp_dir)) is None


class TestDiscoverRealRepository:
    """Test discovery against real repositories."""

    def test_main_and_linked_worktree(self, git_repo_with_worktree, temp_dir):
        discovery = RepositoryDiscovery(GitRunner())
        root = git_repo_with_worktree.working_dir

        repository = discovery.discover(root)

        assert repository.name == "myproj"
        assert [(os.path.realpath(wt.path), wt.branch) for wt in repository.worktrees] == [
            (os.path.realpath(root), "main"),
            (os.path.realpath(str(temp_dir / "feature-x-wt")), "feature-x"),
        ]

    def test_worktree_path_with_trailing_space(self, git_repo, temp_dir):
        spacey = temp_dir / "wt "
        git_repo.git.worktree("add", str(spacey), "-b", "spacey")

        repository = RepositoryDiscovery(GitRunner()).discover(git_repo.working_dir)

        paths = {os.path.realpath(wt.path): wt.branch for wt in repository.worktrees}
        assert paths[os.path.realpath(str(spacey))] == "spacey"
        assert os.path.isdir(next(wt.path for wt in repository.worktrees if wt.branch == "spacey"))

    def test_plain_directory(self, temp_dir):
        assert RepositoryDiscovery(GitRunner()).discover(str(temp_dir)) is None
