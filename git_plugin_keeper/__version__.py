"""Version information for git-plugin-keeper."""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("git-plugin-keeper")
except PackageNotFoundError:
    # Running from a source tree that was never installed
    __version__ = "0.0.0+unknown"
