"""Command-line argument parsing for git-plugin-keeper."""

import argparse
import os
import shlex

from git_plugin_keeper.__version__ import __version__
from git_plugin_keeper.constants import DEFAULT_CREDENTIAL_HELPER, DEFAULT_REMOTE


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="git-plugin-keeper",
        description="Keep git-managed plugin checkouts up to date",
        epilog="Private remotes are accessed with the credentials your git credential helper provides.",
    )
    parser.add_argument("--version", action="version", version=f"git-plugin-keeper {__version__}")
    parser.add_argument(
        "--root",
        default=os.environ.get("PLUGIN_KEEPER_ROOT", os.getcwd()),
        help="Folder containing the plugin checkouts (default: $PLUGIN_KEEPER_ROOT or current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of background workers (default: auto-detect)",
    )
    parser.add_argument(
        "--restart-timeout",
        type=float,
        default=5.0,
        metavar="SECONDS",
        help="How long to wait for a running update check to stop before restarting it",
    )

    checks = parser.add_argument_group("update checks")
    checks.add_argument(
        "--check-on-startup",
        action="store_true",
        help="Fetch every plugin before running the command",
    )
    checks.add_argument(
        "--auto-check",
        action="store_true",
        help="Fetch every plugin when the last check is older than --check-interval",
    )
    checks.add_argument(
        "--check-interval",
        type=int,
        default=60,
        metavar="MINUTES",
        help="Minutes between automatic update checks (default: 60)",
    )
    checks.add_argument(
        "--state-dir",
        default=os.environ.get("PLUGIN_KEEPER_STATE_DIR"),
        help="Where the time of the last update check is kept "
        "(default: $PLUGIN_KEEPER_STATE_DIR or ~/.git-plugin-keeper/state)",
    )

    remotes = parser.add_argument_group("remote access")
    remotes.add_argument(
        "--credential-helper",
        type=shlex.split,
        default=list(DEFAULT_CREDENTIAL_HELPER),
        metavar="COMMAND",
        help="Command that answers git credential requests (default: 'git credential fill')",
    )
    remotes.add_argument(
        "--credential-timeout",
        type=float,
        default=10.0,
        metavar="SECONDS",
        help="How long to wait for the credential helper",
    )
    remotes.add_argument(
        "--fallback-remote",
        default=DEFAULT_REMOTE,
        metavar="NAME",
        help="Remote to fetch from when the current branch tracks none (default: origin)",
    )
    remotes.add_argument(
        "--catalog-org",
        default=os.environ.get("PLUGIN_KEEPER_CATALOG_ORG"),
        metavar="ORG",
        help="GitHub organization browsed by default (default: $PLUGIN_KEEPER_CATALOG_ORG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show plugin checkouts")
    list_parser.add_argument(
        "--fetch", action="store_true", help="Fetch from remotes before listing"
    )

    subparsers.add_parser("manual", help="Show plugins that were not installed with git")
    subparsers.add_parser("refresh", help="Fetch every plugin and show available updates")

    update_parser = subparsers.add_parser("update", help="Update one plugin or all outdated plugins")
    update_target = update_parser.add_mutually_exclusive_group(required=True)
    update_target.add_argument("name", nargs="?", help="Plugin to update")
    update_target.add_argument("--all", action="store_true", help="Update every outdated plugin")

    revert_parser = subparsers.add_parser("revert", help="Reset a plugin to the previous commit")
    revert_parser.add_argument("name", help="Plugin to revert")

    switch_parser = subparsers.add_parser("switch", help="Switch a plugin to another branch")
    switch_parser.add_argument("name", help="Plugin to switch")
    switch_parser.add_argument("branch", help="Local or remote branch name")

    clone_parser = subparsers.add_parser("clone", help="Install a plugin from a repository URL")
    clone_parser.add_argument(
        "url", help="Repository URL; append /tree/<branch> to check out a branch"
    )

    delete_parser = subparsers.add_parser("delete", help="Remove a plugin checkout")
    delete_parser.add_argument("name", help="Plugin to delete")
    delete_parser.add_argument("--yes", action="store_true", help="Skip confirmation")

    browse_parser = subparsers.add_parser("browse", help="List plugins published by a GitHub organization")
    browse_parser.add_argument("--org", help="GitHub organization (default: --catalog-org)")

    return parser.parse_args(argv)
