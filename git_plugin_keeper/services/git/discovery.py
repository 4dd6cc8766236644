"""Discovery of plugin checkouts under the plugin root."""

import os
from typing import List, Set

from git_plugin_keeper.constants import VCS_MARKER
from git_plugin_keeper.exceptions import DiscoveryIOError
from git_plugin_keeper.logging_config import get_logger
from git_plugin_keeper.models.checkout import CheckoutRecord

logger = get_logger(__name__)


def _list_directories(root: str) -> List[os.DirEntry]:
    try:
        with os.scandir(root) as entries:
            return list(entries)
    except OSError as e:
        raise DiscoveryIOError(root, e.strerror or str(e)) from e


def _classify(root: str, want_tracked: bool) -> List[os.DirEntry]:
    matches = []
    for entry in _list_directories(root):
        try:
            if not entry.is_dir():
                continue
            tracked = os.path.exists(os.path.join(entry.path, VCS_MARKER))
        except OSError as e:
            # Directory vanished or became unreadable mid-scan
            logger.debug(f"Skipping {entry.path}: {e}")
            continue
        if tracked == want_tracked:
            matches.append(entry)
    return matches


def discover_tracked(root: str) -> Set[CheckoutRecord]:
    """Return a bare record for every subdirectory holding git metadata.

    Raises:
        DiscoveryIOError: if the root itself cannot be listed
    """
    return {
        CheckoutRecord(name=entry.name, path=os.path.abspath(entry.path))
        for entry in _classify(root, want_tracked=True)
    }


def discover_manual(root: str) -> Set[str]:
    """Return the names of subdirectories without git metadata."""
    return {entry.name for entry in _classify(root, want_tracked=False)}
