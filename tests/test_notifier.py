"""Tests for ChangeNotifier"""
import os
import threading
import time
from unittest.mock import Mock

import pytest
from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileOpenedEvent

from git_worktree_manager.services.notifier import ChangeNotifier, _MetadataHandler, is_relevant_path


class CountingCallback:
    def __init__(self):
        self.count = 0
        self.called = threading.Event()

    def __call__(self):
        self.count += 1
        self.called.set()


@pytest.fixture
def callback():
    return CountingCallback()


@pytest.fixture
def notifier(callback):
    notifier = ChangeNotifier(callback, debounce_seconds=0.05)
    yield notifier
    notifier.stop()


class TestIsRelevantPath:
    """Test filtering of metadata paths."""

    @pytest.mark.parametrize("relative", [
        "HEAD",
        "index",
        os.path.join("refs", "heads", "main"),
        os.path.join("worktrees", "feature-x", "HEAD"),
        "packed-refs",
    ])
    def test_relevant(self, relative):
        assert is_relevant_path(os.path.join("/repo/.git", relative), "/repo/.git") is True

    @pytest.mark.parametrize("relative", [
        os.path.join("objects", "ab", "cdef"),
        os.path.join("logs", "HEAD"),
    ])
    def test_ignored_subtrees(self, relative):
        assert is_relevant_path(os.path.join("/repo/.git", relative), "/repo/.git") is False

    def test_outside_metadata_dir(self):
        assert is_relevant_path("/repo/src/main.py", "/repo/.git") is False


class TestDebounce:
    """Test coalescing of change bursts."""

    def test_burst_runs_callback_once(self, notifier, callback):
        notifier.start()
        for _ in range(10):
            notifier.trigger()
            time.sleep(0.005)

        assert callback.called.wait(timeout=2)
        time.sleep(0.2)
        assert callback.count == 1

    def test_each_event_restarts_the_timer(self, callback):
        notifier = ChangeNotifier(callback, debounce_seconds=0.15)
        notifier.start()
        try:
            for _ in range(5):
                notifier.trigger()
                time.sleep(0.05)
            # 0.25s have passed since the first event but only 0.05s since the last
            assert callback.count == 0
            assert callback.called.wait(timeout=2)
        finally:
            notifier.stop()

    def test_separate_bursts_run_separately(self, notifier, callback):
        notifier.start()
        notifier.trigger()
        assert callback.called.wait(timeout=2)
        callback.called.clear()

        notifier.trigger()
        assert callback.called.wait(timeout=2)
        assert callback.count == 2

    def test_trigger_before_start_is_ignored(self, notifier, callback):
        notifier.trigger()
        time.sleep(0.2)
        assert callback.count == 0

    def test_stop_cancels_pending_callback(self, notifier, callback):
        notifier.start()
        notifier.trigger()
        notifier.stop()
        time.sleep(0.2)
        assert callback.count == 0
        assert notifier.is_running is False

    def test_callback_error_is_contained(self):
        failing = Mock(side_effect=RuntimeError("refresh failed"))
        notifier = ChangeNotifier(failing, debounce_seconds=0.01)
        notifier.start()
        try:
            notifier.trigger()
            time.sleep(0.2)
            failing.assert_called_once()
            notifier.trigger()
            time.sleep(0.2)
            assert failing.call_count == 2
        finally:
            notifier.stop()


class TestMetadataHandler:
    """Test event filtering in the watchdog handler."""

    def test_forwards_relevant_events(self):
        notifier = Mock()
        handler = _MetadataHandler(notifier, "/repo/.git")

        handler.on_any_event(FileCreatedEvent("/repo/.git/refs/heads/new"))
        handler.on_any_event(DirModifiedEvent("/repo/.git/worktrees"))

        assert notifier.trigger.call_count == 2

    def test_drops_object_churn_and_reads(self):
        notifier = Mock()
        handler = _MetadataHandler(notifier, "/repo/.git")

        handler.on_any_event(FileCreatedEvent("/repo/.git/objects/ab/cdef"))
        handler.on_any_event(FileOpenedEvent("/repo/.git/HEAD"))

        notifier.trigger.assert_not_called()


class TestWatching:
    """Test watching real metadata directories."""

    def test_rewatch_adds_and_drops(self, notifier, git_repo, temp_dir):
        other = temp_dir / "other-meta"
        other.mkdir()
        metadata_dir = os.path.join(git_repo.working_dir, ".git")

        notifier.start([metadata_dir])
        assert notifier.watched_paths == [metadata_dir]

        notifier.rewatch([str(other), str(temp_dir / "missing")])
        assert notifier.watched_paths == [str(other)]

    def test_rewatch_before_start_is_ignored(self, notifier, git_repo):
        notifier.rewatch([os.path.join(git_repo.working_dir, ".git")])
        assert notifier.watched_paths == []

    def test_branch_creation_fires_callback(self, notifier, callback, git_repo):
        notifier.start([os.path.join(git_repo.working_dir, ".git")])

        git_repo.git.branch("created-elsewhere")

        assert callback.called.wait(timeout=5)
