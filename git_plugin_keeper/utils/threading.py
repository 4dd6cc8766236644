"""Worker pool sizing for background git operations."""

import os
import sys
from typing import Optional


def is_free_threading_enabled() -> bool:
    """True on Python 3.13+ builds running with the GIL disabled."""
    is_gil_enabled = getattr(sys, "_is_gil_enabled", None)
    return is_gil_enabled is not None and not is_gil_enabled()


def get_worker_count(user_specified: Optional[int] = None) -> int:
    """Number of threads for the background operation pool.

    Git operations mostly wait on child processes and the network, so the
    pool is sized above the CPU count. At least two workers are kept so a
    Refresh-All never starves single-checkout operations.
    """
    if user_specified is not None and user_specified > 0:
        return max(2, user_specified)

    cpu_count = os.cpu_count() or 1
    if is_free_threading_enabled():
        return min(32, cpu_count * 2)
    return min(16, cpu_count + 4)
