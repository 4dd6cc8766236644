"""User-facing event log for engine operations."""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import List, Optional, Protocol

from rich.console import Console
from rich.markup import escape

from git_plugin_keeper.constants import LOG_COLORS
from git_plugin_keeper.logging_config import get_logger

logger = get_logger(__name__)


class LogSink(Protocol):
    """Receiver for operation events shown to the user."""

    def log_info(self, message: str) -> None: ...

    def log_warning(self, message: str) -> None: ...

    def log_error(self, message: str) -> None: ...

    def log_success(self, message: str) -> None: ...


@dataclass(frozen=True)
class LogEntry:
    level: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] {self.message}"


class ConsoleLog:
    """Thread-safe LogSink that keeps recent entries and echoes them to a rich console."""

    def __init__(self, console: Optional[Console] = None, max_entries: int = 1000, echo: bool = True):
        self.console = console or Console(stderr=True)
        self.echo = echo
        self._entries: deque = deque(maxlen=max_entries)
        self._lock = Lock()

    def _add(self, level: str, message: str, log_level: str) -> None:
        entry = LogEntry(level, message)
        with self._lock:
            self._entries.append(entry)
        getattr(logger, log_level)(message)
        if self.echo:
            self.console.print(f"[{LOG_COLORS[level]}]{escape(entry.format())}[/{LOG_COLORS[level]}]")

    def log_info(self, message: str) -> None:
        self._add("info", message, "info")

    def log_warning(self, message: str) -> None:
        self._add("warning", message, "warning")

    def log_error(self, message: str) -> None:
        self._add("error", message, "error")

    def log_success(self, message: str) -> None:
        self._add("success", message, "info")

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
