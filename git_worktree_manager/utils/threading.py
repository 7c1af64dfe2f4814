"""Worker-count helpers for running git queries in parallel."""

import os
import sys
from typing import Dict, Any, Optional

# git subprocesses are I/O bound; more workers than this mostly adds lock contention
MAX_WORKERS = 16


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with free-threading enabled.

    Returns:
        True if running on Python 3.13+ with the GIL disabled
    """
    is_gil_enabled = getattr(sys, "_is_gil_enabled", None)
    return is_gil_enabled is not None and not is_gil_enabled()


def get_optimal_worker_count(
    task_count: int, user_specified: Optional[int] = None, sequential: bool = False
) -> int:
    """Calculate how many threads to use for ``task_count`` independent git queries.

    Args:
        task_count: Number of independent queries to run
        user_specified: User-specified worker count, if provided
        sequential: Force a single worker

    Returns:
        Number of workers, at least 1 and never more than task_count
    """
    if sequential or task_count <= 1:
        return 1

    if user_specified is not None and user_specified > 0:
        return min(user_specified, task_count)

    cpu_count = os.cpu_count() or 1
    if is_free_threading_enabled():
        limit = cpu_count * 2
    else:
        limit = cpu_count + 4

    return max(1, min(task_count, limit, MAX_WORKERS))


def get_threading_info() -> Dict[str, Any]:
    """Describe the interpreter's threading configuration (shown with --debug)."""
    return {
        "free_threading": is_free_threading_enabled(),
        "cpu_count": os.cpu_count() or 1,
        "max_workers": MAX_WORKERS,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
