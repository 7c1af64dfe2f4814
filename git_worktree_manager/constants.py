"""Shared constants for git-worktree-manager."""

# Branch name given to worktrees with no branch checked out
DETACHED_BRANCH = "detached"

REFS_HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "remotes/"

# git argv fragments (passed to the runner as discrete arguments, never a shell string)
GIT_DIR_ARGS = ("rev-parse", "--git-dir")
GIT_COMMON_DIR_ARGS = ("rev-parse", "--git-common-dir")
WORKTREE_LIST_ARGS = ("worktree", "list", "--porcelain")
BRANCH_LIST_ARGS = ("branch", "--list", "--all", "--no-color")


def remote_url_args(remote_name: str) -> tuple:
    """argv for reading the URL of a remote."""
    return ("config", "--get", f"remote.{remote_name}.url")


# Metadata subtrees whose churn never changes the worktree/branch listing
IGNORED_METADATA_DIRS = ("objects", "logs")

# Symbol constants
SYMBOL_CURRENT = "✓"
SYMBOL_WORKTREE = "⊢"
SYMBOL_BRANCH = "⎇"
SYMBOL_REMOTE = "☁"

# Colors (Rich/Textual color names)
COLOR_CURRENT = "green"
COLOR_REMOTE = "cyan"
COLOR_DETACHED = "yellow"
