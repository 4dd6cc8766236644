"""Shared constants for git-plugin-keeper."""

from dataclasses import dataclass
from typing import List

# Directory entry that marks a checkout as tracked
VCS_MARKER = ".git"

# Length of abbreviated commit ids shown to users
SHORT_SHA_LENGTH = 7

# Remote tried when the tracked branch does not name one
DEFAULT_REMOTE = "origin"

# Clone URL suffix that selects a branch (hosting provider web URL convention)
BRANCH_SELECTOR = "/tree/"

DEFAULT_CREDENTIAL_HELPER = ["git", "credential", "fill"]

# Schemes served by git credential helpers
CREDENTIAL_SCHEMES = ("http", "https")

# Identity used when an update has to create a merge commit
UPDATER_NAME = "Plugin Updater"
UPDATER_EMAIL = "updater@local"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("name", "Plugin", 28),
    ColumnDefinition("branch", "Branch", 16),
    ColumnDefinition("current", "Current", 9),
    ColumnDefinition("latest", "Latest", 9),
    ColumnDefinition("divergence", "Behind/Ahead", 18),
    ColumnDefinition("changes", "Changes", 8),
    ColumnDefinition("message", "Last Message", 40),
]

# Rich color names for console log levels
LOG_COLORS = {
    "info": "white",
    "warning": "yellow",
    "error": "red",
    "success": "green",
}

UPDATE_AVAILABLE_COLOR = "yellow"
LOCAL_CHANGES_COLOR = "red"
