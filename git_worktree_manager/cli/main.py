"""Command-line interface for git-worktree-manager"""

import os
import sys

from rich.console import Console
from rich.prompt import Confirm

from git_worktree_manager.cli.args import parse_args
from git_worktree_manager.config import load_config
from git_worktree_manager.core import WorktreeManager
from git_worktree_manager.exceptions import WorktreeManagerError
from git_worktree_manager.formatters import build_repository_tree
from git_worktree_manager.logging_config import setup_logging
from git_worktree_manager.services.git.operations import OperationResult
from git_worktree_manager.utils.threading import get_threading_info

console = Console()
error_console = Console(stderr=True)


def _report(result: OperationResult) -> int:
    if result.success:
        console.print(f"[green]{result.message}[/green]")
        return 0
    error_console.print(f"[red]{result.message}[/red]")
    return 1


def _list(manager: WorktreeManager, show_branches: bool) -> int:
    repositories = manager.get_repositories()
    if not repositories:
        console.print("[yellow]No git repositories found in the workspace[/yellow]")
        return 0

    branches = None
    if show_branches:
        paths = [wt.path for repo in repositories for wt in repo.worktrees]
        branches = manager.model.get_branches_for(paths)

    console.print(build_repository_tree(repositories, branches))
    return 0


def _switch_branch(manager: WorktreeManager, worktree_path: str, branch_name: str) -> int:
    # Look the name up so a local branch containing "/" is not mistaken for a remote one
    listed = next((b for b in manager.get_branches(worktree_path) if b.name == branch_name), None)
    is_remote = listed.is_remote if listed is not None else None
    return _report(manager.switch_branch(worktree_path, branch_name, is_remote=is_remote))


def _run_tui(manager: WorktreeManager) -> int:
    from git_worktree_manager.tui import WorktreeManagerApp

    app = WorktreeManagerApp(manager)
    opened_path = app.run()
    if opened_path:
        # Shell integration: cd "$(gwm)"
        print(opened_path)
    return 0


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        command = parsed_args.command
        if command is None:
            command = "tui" if sys.stdin.isatty() and sys.stdout.isatty() else "list"
        use_tui = command == "tui"

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, tui_mode=use_tui)

        config = load_config(
            parsed_args.config,
            roots=parsed_args.root,
            workers=parsed_args.workers,
            sequential=parsed_args.sequential or None,
            verbose=parsed_args.verbose or None,
            debug=parsed_args.debug or None,
            # Only the TUI lives long enough to benefit from file watching
            watch=None if use_tui else False,
        )

        if parsed_args.debug and not use_tui:
            console.print("[yellow]Debug mode enabled[/yellow]")
            threading_info = get_threading_info()
            console.print("[yellow]Threading Information:[/yellow]")
            for key, value in threading_info.items():
                console.print(f"  {key}: {value}")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        if command == "open":
            manager = WorktreeManager(config, open_workspace=print)
        else:
            manager = WorktreeManager(config)

        if command == "tui":
            with manager:
                return _run_tui(manager)
        if command == "list":
            with manager:
                return _list(manager, parsed_args.branches)
        if command == "create":
            return _report(manager.create_worktree(parsed_args.branch, os.path.abspath(parsed_args.path)))
        if command == "remove":
            path = os.path.abspath(parsed_args.path)
            if not parsed_args.yes and not Confirm.ask(f"Remove worktree at {path}?", console=console):
                console.print("Removal cancelled")
                return 1
            return _report(manager.remove_worktree(path, force=parsed_args.force))
        if command == "switch-branch":
            return _switch_branch(manager, os.path.abspath(parsed_args.worktree), parsed_args.branch)
        if command == "open":
            result = manager.switch_to_worktree(os.path.abspath(parsed_args.path))
            if not result.success:
                error_console.print(f"[red]{result.message}[/red]")
                return 1
            return 0

        error_console.print(f"[red]Unknown command: {command}[/red]")
        return 2
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (WorktreeManagerError, ValueError) as e:
        error_console.print(f"[red]Error: {e}[/red]")
        return 1
    except Exception as e:
        error_console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            error_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
