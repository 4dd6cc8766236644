"""Checkout model and related enums"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from git_plugin_keeper.exceptions import PluginKeeperError


class OperationState(Enum):
    """What the engine is currently doing with a checkout."""
    IDLE = "idle"
    REFRESHING = "refreshing"
    UPDATING = "updating"
    REVERTING = "reverting"
    SWITCHING = "switching"
    DELETING = "deleting"
    CLONING = "cloning"


@dataclass(frozen=True)
class CheckoutRecord:
    """Snapshot of one plugin checkout.

    Records are never mutated; a new record replaces the old one in the
    engine's state map after every inspection.
    """
    name: str
    path: str
    is_tracked: bool = True
    current_commit: str = ""
    latest_commit: str = ""
    behind_ahead: str = ""
    last_operation_message: str = ""
    latest_commit_summary: Optional[str] = None
    previous_commit_summary: Optional[str] = None
    uncommitted_change_count: int = 0
    available_branches: Tuple[str, ...] = ()
    current_branch: str = ""
    selected_branch: str = ""

    @property
    def has_update(self) -> bool:
        """True when the upstream tip is known and differs from HEAD."""
        return bool(self.latest_commit) and self.current_commit != self.latest_commit

    @property
    def has_local_changes(self) -> bool:
        return self.uncommitted_change_count > 0


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a single-checkout operation."""
    name: str
    ok: bool
    message: str = ""
    error: Optional[PluginKeeperError] = None
    skipped: bool = False  # checkout vanished before the operation ran

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None

    @classmethod
    def success(cls, name: str, message: str = "") -> "OperationResult":
        return cls(name=name, ok=True, message=message)

    @classmethod
    def failure(cls, name: str, error: PluginKeeperError) -> "OperationResult":
        return cls(name=name, ok=False, message=str(error), error=error)

    @classmethod
    def skip(cls, name: str) -> "OperationResult":
        return cls(name=name, ok=True, message=f"{name} is no longer present", skipped=True)
