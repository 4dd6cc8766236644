"""Configuration handling for git-plugin-keeper"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from git_plugin_keeper.constants import DEFAULT_CREDENTIAL_HELPER, DEFAULT_REMOTE


@dataclass
class Config:
    """Configuration for git-plugin-keeper with validation."""

    # Folder whose immediate subdirectories are plugin checkouts
    plugin_root: str = ""

    # Update checks
    check_updates_on_startup: bool = False
    auto_check_updates: bool = False
    update_check_interval_minutes: int = 60
    last_update_check: datetime = field(default_factory=datetime.now)

    # Remote access
    credential_helper: List[str] = field(default_factory=lambda: list(DEFAULT_CREDENTIAL_HELPER))
    credential_timeout: float = 10.0
    fallback_remote: str = DEFAULT_REMOTE

    # Concurrency
    restart_timeout: float = 5.0
    workers: Optional[int] = None  # None = auto-detect

    # Plugin catalog
    catalog_org: Optional[str] = None
    github_token: Optional[str] = None

    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_plugin_root()
        self._validate_interval()
        self._validate_credential_helper()
        self._validate_timeouts()
        self._validate_workers()
        if not self.fallback_remote or not self.fallback_remote.strip():
            raise ValueError("fallback_remote cannot be empty")
        if self.github_token is None:
            self.github_token = os.environ.get("GITHUB_TOKEN")

    def _validate_plugin_root(self):
        if not self.plugin_root or not str(self.plugin_root).strip():
            raise ValueError("plugin_root cannot be empty")
        self.plugin_root = os.path.abspath(os.path.expanduser(str(self.plugin_root).strip()))

    def _validate_interval(self):
        if self.update_check_interval_minutes <= 0:
            raise ValueError(
                f"update_check_interval_minutes must be positive, got {self.update_check_interval_minutes}"
            )

    def _validate_credential_helper(self):
        if not isinstance(self.credential_helper, list) or not self.credential_helper:
            raise ValueError("credential_helper must be a non-empty command list")

    def _validate_timeouts(self):
        if self.credential_timeout <= 0:
            raise ValueError(f"credential_timeout must be positive, got {self.credential_timeout}")
        if self.restart_timeout < 0:
            raise ValueError(f"restart_timeout cannot be negative, got {self.restart_timeout}")

    def _validate_workers(self):
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def should_perform_periodic_check(self, now: Optional[datetime] = None) -> bool:
        """Whether an automatic update check is due."""
        if not self.auto_check_updates:
            return False

        now = now or datetime.now()
        return now - self.last_update_check >= timedelta(minutes=self.update_check_interval_minutes)

    def mark_checked(self, now: Optional[datetime] = None) -> None:
        self.last_update_check = now or datetime.now()

    def to_dict(self) -> dict:
        """Convert config to dictionary. The GitHub token is never included."""
        return {
            "plugin_root": self.plugin_root,
            "check_updates_on_startup": self.check_updates_on_startup,
            "auto_check_updates": self.auto_check_updates,
            "update_check_interval_minutes": self.update_check_interval_minutes,
            "credential_helper": list(self.credential_helper),
            "credential_timeout": self.credential_timeout,
            "fallback_remote": self.fallback_remote,
            "restart_timeout": self.restart_timeout,
            "workers": self.workers,
            "catalog_org": self.catalog_org,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "plugin_root",
            "check_updates_on_startup",
            "auto_check_updates",
            "update_check_interval_minutes",
            "credential_helper",
            "credential_timeout",
            "fallback_remote",
            "restart_timeout",
            "workers",
            "catalog_org",
            "github_token",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
