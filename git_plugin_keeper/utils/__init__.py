"""Utility functions for git-plugin-keeper.

- filesystem: removal of checkout trees containing read-only files
- threading: worker pool sizing
"""

from .filesystem import clear_readonly, remove_tree
from .threading import get_worker_count, is_free_threading_enabled

__all__ = [
    "clear_readonly",
    "remove_tree",
    "get_worker_count",
    "is_free_threading_enabled",
]
