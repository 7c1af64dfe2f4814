"""Process runner: the only place git is executed."""

import os
from typing import NamedTuple, Optional, Sequence

import git

from git_worktree_manager.exceptions import ToolInvocationError
from git_worktree_manager.logging_config import get_logger

logger = get_logger(__name__)


class CommandResult(NamedTuple):
    """Outcome of one git invocation."""

    stdout: str
    stderr: str
    success: bool
    status: Optional[int] = None


class GitRunner:
    """Runs git subcommands as argv lists through GitPython.

    Arguments are always handed to the process as discrete argv elements, so
    branch names and paths are never interpreted by a shell.
    """

    def __init__(self, git_binary: str = "git", timeout: Optional[float] = None):
        """Initialize the runner.

        Args:
            git_binary: git executable to invoke
            timeout: Seconds before a git process is killed (None = wait forever)
        """
        self.git_binary = git_binary
        self.timeout = timeout

    def run(self, args: Sequence[str], cwd: str) -> CommandResult:
        """Run ``git <args>`` in ``cwd`` and capture its output.

        stdout is captured even when git exits non-zero. A process that
        cannot be spawned (git missing, cwd gone) is reported as a failed
        result with the OS error as stderr.

        Args:
            args: git arguments, e.g. ("worktree", "list", "--porcelain")
            cwd: Absolute working directory

        Returns:
            CommandResult

        Raises:
            ValueError: If cwd is not an absolute path
        """
        if not cwd or not os.path.isabs(cwd):
            raise ValueError(f"cwd must be an absolute path, got {cwd!r}")

        command = [self.git_binary, *args]
        logger.debug(f"Running {command} in {cwd}")
        try:
            status, stdout, stderr = git.Git(cwd).execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                kill_after_timeout=self.timeout,
            )
        except (git.exc.GitCommandNotFound, OSError) as e:
            logger.debug(f"Could not run {command} in {cwd}: {e}")
            return CommandResult("", str(e), False, None)

        success = status == 0
        if not success:
            logger.debug(f"{command} exited {status}: {stderr.strip()}")
        return CommandResult(stdout, stderr, success, status)

    def check(self, args: Sequence[str], cwd: str) -> str:
        """Run ``git <args>`` in ``cwd`` and return stdout.

        Raises:
            ToolInvocationError: If git exits non-zero or cannot be spawned
        """
        result = self.run(args, cwd)
        if not result.success:
            raise ToolInvocationError.from_command(list(args), result.stderr, result.status)
        return result.stdout
