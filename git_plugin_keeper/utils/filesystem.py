"""Filesystem helpers for removing checkouts."""

import os
import shutil
import stat


def clear_readonly(path: str) -> None:
    """Make every file and directory below ``path`` writable.

    Git writes pack and object files read-only, which blocks removal on
    some platforms.
    """
    for dirpath, dirnames, filenames in os.walk(path):
        for entry in dirnames + filenames:
            full_path = os.path.join(dirpath, entry)
            mode = os.lstat(full_path).st_mode
            if stat.S_ISLNK(mode):
                continue
            if not mode & stat.S_IWRITE:
                os.chmod(full_path, mode | stat.S_IWRITE)


def remove_tree(path: str) -> None:
    """Delete a directory tree, read-only entries included."""
    clear_readonly(path)
    shutil.rmtree(path)
