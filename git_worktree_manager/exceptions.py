"""Custom exceptions for git-worktree-manager"""

from typing import Optional, Sequence


class WorktreeManagerError(Exception):
    """Base exception for all git-worktree-manager errors."""
    pass


class ToolInvocationError(WorktreeManagerError):
    """Exception raised when a git command exits non-zero or cannot be spawned."""

    def __init__(
        self,
        operation: str,
        message: Optional[str] = None,
        stderr: str = "",
        status: Optional[int] = None,
    ):
        self.operation = operation
        self.message = message
        self.stderr = stderr
        self.status = status

        error_msg = f"Git operation '{operation}' failed"
        if status is not None:
            error_msg += f" (exit {status})"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)

    @classmethod
    def from_command(cls, args: Sequence[str], stderr: str, status: Optional[int]) -> "ToolInvocationError":
        """Build the error for a finished git command."""
        stderr = (stderr or "").strip()
        return cls(" ".join(args[:2]) if args else "git", message=stderr or None, stderr=stderr, status=status)

    @property
    def detail(self) -> str:
        """Most specific human-readable description of the failure."""
        return self.stderr or self.message or str(self)


class ParseAnomaly(WorktreeManagerError):
    """Raised for a porcelain record that does not have the expected shape."""

    def __init__(self, record: str, reason: str):
        self.record = record
        self.reason = reason
        super().__init__(f"Malformed record ({reason}): {record!r}")


class NoWorkspaceError(WorktreeManagerError):
    """Raised when no workspace root is configured."""

    def __init__(self):
        super().__init__("No workspace folder open")


class InvalidArgumentError(WorktreeManagerError):
    """Exception raised for an unusable branch name or path argument."""

    def __init__(self, argument: str, value: str, reason: str):
        self.argument = argument
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {argument} {value!r}: {reason}")
