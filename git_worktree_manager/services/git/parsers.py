"""Parsers for git porcelain output.

Pure functions: text in, model objects out, no I/O.
"""

import os
import re
from dataclasses import replace
from typing import Dict, List, Optional

from git_worktree_manager.constants import DETACHED_BRANCH, REFS_HEADS_PREFIX, REMOTES_PREFIX
from git_worktree_manager.exceptions import ParseAnomaly
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.branch import Branch
from git_worktree_manager.models.worktree import Worktree

logger = get_logger(__name__)

# Attribute lines git may emit in a worktree record that carry nothing we model
_WORKTREE_FLAG_PREFIXES = ("bare", "detached", "locked", "prunable")

# Last "/" (or scp-style ":") delimited segment, without a trailing ".git"
_REMOTE_NAME_RE = re.compile(r"([^/:]+?)(?:\.git)?/*$")


def _build_worktree(record: Dict[str, str]) -> Worktree:
    """Turn the collected attributes of one record into a Worktree."""
    path = record.get("worktree")
    if not path:
        raise ParseAnomaly(str(record), "no worktree line")
    return Worktree(
        path=path,
        branch=record.get("branch") or DETACHED_BRANCH,
        head_commit=record.get("HEAD", ""),
    )


def parse_worktree_list(output: str) -> List[Worktree]:
    """Parse ``git worktree list --porcelain``.

    Format (records separated by blank lines):
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name

    A record without a branch line is a detached worktree. The last record
    is flushed even when the output has no trailing blank line. Malformed
    records are logged and skipped.

    Args:
        output: Raw stdout of the listing command

    Returns:
        Worktrees in listing order, all with is_current False
    """
    worktrees: List[Worktree] = []
    record: Dict[str, str] = {}

    def flush():
        if not record:
            return
        try:
            worktrees.append(_build_worktree(record))
        except ParseAnomaly as e:
            logger.debug(f"Skipping worktree record: {e}")
        record.clear()

    for raw_line in output.splitlines():
        # Paths may end in whitespace, so only the line terminator goes
        line = raw_line.rstrip("\r")

        if not line.strip():
            # Empty line marks end of worktree entry
            flush()
            continue

        if line.startswith("worktree "):
            if "worktree" in record:
                # A new record started without a separating blank line
                flush()
            record["worktree"] = line[len("worktree "):]
        elif line.startswith("HEAD "):
            record["HEAD"] = line[len("HEAD "):]
        elif line.startswith("branch "):
            ref = line[len("branch "):]
            if ref.startswith(REFS_HEADS_PREFIX):
                ref = ref[len(REFS_HEADS_PREFIX):]
            record["branch"] = ref
        elif line.split(" ", 1)[0] in _WORKTREE_FLAG_PREFIXES:
            continue
        else:
            logger.debug(f"Ignoring unexpected worktree line: {line!r}")

    # Handle last entry if no trailing blank line
    flush()

    return worktrees


def parse_branch_list(output: str) -> List[Branch]:
    """Parse ``git branch --list --all``.

    Lines look like::

        * main
        + feature-x          (checked out in another worktree)
          remotes/origin/HEAD -> origin/main
          remotes/origin/main

    Symbolic refs (``HEAD -> ...``) and the ``(HEAD detached at ...)``
    pseudo-entry are dropped. Remote branches keep their remote qualifier
    in ``name`` and are never current.
    """
    branches: List[Branch] = []
    seen_current = False

    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        is_current = False
        if line.startswith("*"):
            is_current = True
            line = line[1:].strip()
        elif line.startswith("+"):
            line = line[1:].strip()

        if not line:
            continue
        if "HEAD" in line and "->" in line:
            continue
        if line.startswith("("):
            logger.debug(f"Skipping pseudo-branch line: {line!r}")
            continue

        is_remote = line.startswith(REMOTES_PREFIX)
        if is_remote:
            line = line[len(REMOTES_PREFIX):]
            is_current = False

        if is_current:
            if seen_current:
                logger.debug(f"Ignoring second current marker on {line!r}")
                is_current = False
            seen_current = True

        branches.append(Branch(name=line, is_current=is_current, is_remote=is_remote))

    return branches


def parse_remote_name(url: Optional[str]) -> Optional[str]:
    """Derive a repository name from a remote URL.

    ``git@host:org/myproj.git`` and ``https://host/org/myproj`` both give
    ``myproj``. Returns None for an empty or unusable URL.
    """
    if not url:
        return None
    match = _REMOTE_NAME_RE.search(url.strip())
    if not match:
        return None
    return match.group(1) or None


def normalize_path(path: str) -> str:
    """Resolve symlinks and fold case where the filesystem does."""
    return os.path.normcase(os.path.realpath(path))


def mark_current_worktree(worktrees: List[Worktree], root: str, normalize: bool = True) -> List[Worktree]:
    """Return a copy of ``worktrees`` with the one located at ``root`` marked current.

    Args:
        worktrees: Parsed worktrees (is_current is ignored)
        root: The workspace root the listing was queried from
        normalize: Compare realpath/normcase forms instead of raw strings

    Returns:
        New list; at most one worktree has is_current set
    """
    target = normalize_path(root) if normalize else root
    found = False
    marked = []
    for wt in worktrees:
        candidate = normalize_path(wt.path) if normalize else wt.path
        is_current = not found and candidate == target
        found = found or is_current
        marked.append(replace(wt, is_current=is_current))
    return marked
