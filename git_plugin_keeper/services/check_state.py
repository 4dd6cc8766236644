"""Persisted time of the last update check, one file per plugin root."""
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from git_plugin_keeper.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_STATE_DIR = Path.home() / ".git-plugin-keeper" / "state"


class CheckStateStore:
    """Remembers when a plugin root was last checked for updates."""

    def __init__(self, plugin_root: str, state_dir: Optional[Path] = None):
        self.plugin_root = Path(plugin_root).resolve()
        self.state_dir = Path(state_dir) if state_dir else DEFAULT_STATE_DIR
        self.state_file = self.state_dir / f"{self._get_root_hash()}.json"

    def _get_root_hash(self) -> str:
        return hashlib.md5(str(self.plugin_root).encode()).hexdigest()

    def load(self) -> Optional[datetime]:
        """Return the stored check time, or None if there is none or it is unreadable."""
        if not self.state_file.exists():
            logger.debug("No update check state found")
            return None

        try:
            with open(self.state_file, "r") as f:
                data = json.load(f)
            return datetime.fromisoformat(data["last_update_check"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable update check state {self.state_file}: {e}")
            return None

    def save(self, checked_at: datetime) -> None:
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, "w") as f:
                json.dump(
                    {"plugin_root": str(self.plugin_root), "last_update_check": checked_at.isoformat()},
                    f,
                    indent=2,
                )
            logger.debug(f"Saved update check time for {self.plugin_root}")
        except OSError as e:
            logger.warning(f"Failed to save update check state: {e}")
