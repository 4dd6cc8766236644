"""
git-plugin-keeper - Keep a folder of git-managed plugin checkouts in sync
"""

from .__version__ import __version__
from .config import Config
from .core import PluginKeeper
from .services.console_log import ConsoleLog, LogSink

__all__ = ["PluginKeeper", "Config", "ConsoleLog", "LogSink", "__version__"]
