"""Command-line argument parsing for git-worktree-manager."""

import argparse
from git_worktree_manager.__version__ import __version__


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="gwm",
        description="Browse and manage the git worktrees and branches of your workspace",
        epilog="Without a command, the interactive TUI starts when running in a terminal "
        "and the worktree list is printed otherwise.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-worktree-manager {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "-r",
        "--root",
        action="append",
        metavar="PATH",
        help="Workspace root to scan (repeatable, default: current directory). "
        "The first root is used to create and remove worktrees.",
    )
    parser.add_argument("--config", metavar="FILE", help="JSON config file")
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel git queries (default: auto-detect)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Query repositories one at a time (disable parallelism)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    list_parser = subparsers.add_parser("list", help="Print repositories and worktrees")
    list_parser.add_argument(
        "-b", "--branches", action="store_true", help="Also list the branches of every worktree"
    )

    create_parser = subparsers.add_parser("create", help="Create a worktree on a new branch")
    create_parser.add_argument("branch", help="Name of the new branch, e.g. feature/my-feature")
    create_parser.add_argument("path", help="Path of the new worktree, e.g. ../my-feature")

    remove_parser = subparsers.add_parser("remove", help="Remove a worktree")
    remove_parser.add_argument("path", help="Path of the worktree to remove")
    remove_parser.add_argument(
        "--force", action="store_true", help="Remove even with uncommitted changes"
    )
    remove_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    switch_parser = subparsers.add_parser(
        "switch-branch", help="Check out a branch in a worktree"
    )
    switch_parser.add_argument("worktree", help="Path of the worktree")
    switch_parser.add_argument(
        "branch", help="Branch to check out (origin/x checks out x)"
    )

    open_parser = subparsers.add_parser(
        "open", help="Print a worktree path, for use as: cd \"$(gwm open PATH)\""
    )
    open_parser.add_argument("path", help="Path of the worktree")

    subparsers.add_parser("tui", help="Launch the interactive TUI")

    # Without a command, "list" may still run and reads this
    parser.set_defaults(branches=False)

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
