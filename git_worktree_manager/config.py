"""Configuration handling for git-worktree-manager"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Union

DEFAULT_CONFIG_PATH = Path.home() / ".git-worktree-manager" / "config.json"


@dataclass
class Config:
    """Configuration for git-worktree-manager with validation."""

    # Workspace roots, the first one is the primary root for create/remove
    roots: List[str] = field(default_factory=lambda: [os.getcwd()])
    remote_name: str = "origin"

    # Change notification
    watch: bool = True
    debounce_seconds: float = 0.3

    # Discovery behaviour
    normalize_paths: bool = True  # Compare worktree paths after realpath/normcase
    git_timeout: Optional[float] = None  # Seconds, None = no timeout
    sequential: bool = False  # Force sequential discovery (disable parallelism)
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_roots()
        self._validate_remote_name()
        self._validate_debounce()
        self._validate_git_timeout()
        self._validate_workers()

    def _validate_roots(self):
        """Validate roots is a list and make every root absolute."""
        if isinstance(self.roots, str):
            self.roots = [self.roots]
        if not isinstance(self.roots, list):
            raise ValueError("roots must be a list")

        normalized = []
        for root in self.roots:
            if not root or not str(root).strip():
                raise ValueError("roots cannot contain empty paths")
            root = os.path.abspath(os.path.expanduser(str(root)))
            if root not in normalized:
                normalized.append(root)
        self.roots = normalized

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_debounce(self):
        """Validate debounce_seconds is in (0, 5]."""
        if not 0 < self.debounce_seconds <= 5:
            raise ValueError(f"debounce_seconds must be in (0, 5], got {self.debounce_seconds}")

    def _validate_git_timeout(self):
        """Validate git_timeout is positive when set."""
        if self.git_timeout is not None and self.git_timeout <= 0:
            raise ValueError(f"git_timeout must be positive, got {self.git_timeout}")

    def _validate_workers(self):
        """Validate workers is positive when set."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    @property
    def primary_root(self) -> Optional[str]:
        """The first configured root, or None when there is none."""
        return self.roots[0] if self.roots else None

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "roots": list(self.roots),
            "remote_name": self.remote_name,
            "watch": self.watch,
            "debounce_seconds": self.debounce_seconds,
            "normalize_paths": self.normalize_paths,
            "git_timeout": self.git_timeout,
            "sequential": self.sequential,
            "workers": self.workers,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key for dict-style access."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "roots",
            "remote_name",
            "watch",
            "debounce_seconds",
            "normalize_paths",
            "git_timeout",
            "sequential",
            "workers",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


def load_config(path: Union[str, Path, None] = None, **overrides) -> Config:
    """Load configuration from a JSON file, then apply overrides.

    A missing file is not an error; the defaults are used instead. Overrides
    whose value is None are ignored so unset command-line flags do not clobber
    values from the file.

    Args:
        path: Path to the JSON config file (defaults to DEFAULT_CONFIG_PATH)
        **overrides: Field values that take precedence over the file

    Returns:
        Validated Config

    Raises:
        ValueError: If the file is not valid JSON or a value fails validation
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    values: dict = {}

    if config_path.is_file():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                values = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config file {config_path}: {e}") from e
        if not isinstance(values, dict):
            raise ValueError(f"Config file {config_path} must contain a JSON object")

    values.update({k: v for k, v in overrides.items() if v is not None})
    return Config.from_dict(values)
