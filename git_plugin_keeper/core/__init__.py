"""Core engine for git-plugin-keeper."""

from .plugin_keeper import PluginKeeper

__all__ = ["PluginKeeper"]
