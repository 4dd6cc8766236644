"""Command-line entry point for git-plugin-keeper"""

import sys
from concurrent.futures import Future, wait
from datetime import datetime
from typing import Callable, Optional

from rich.console import Console
from rich.progress import Progress
from rich.prompt import Confirm

from git_plugin_keeper.cli.args import parse_args
from git_plugin_keeper.config import Config
from git_plugin_keeper.core import PluginKeeper
from git_plugin_keeper.core.plugin_keeper import ProgressCallback
from git_plugin_keeper.exceptions import CatalogError
from git_plugin_keeper.logging_config import setup_logging
from git_plugin_keeper.models.checkout import OperationResult
from git_plugin_keeper.services.catalog_service import CatalogService
from git_plugin_keeper.services.check_state import CheckStateStore
from git_plugin_keeper.services.console_log import ConsoleLog
from git_plugin_keeper.services.display_service import DisplayService

console = Console()


def _confirm_restart() -> bool:
    return Confirm.ask("Update in progress, do you want to restart?", default=False, console=console)


def _track_refresh(start: Callable[[ProgressCallback], Optional[Future]], description: str) -> None:
    """Start a refresh with a progress callback and wait for it, if one was started."""
    with Progress(console=console, transient=True) as progress:
        task = progress.add_task(description, total=None)

        def on_progress(completed: int, total: int) -> None:
            progress.update(task, completed=completed, total=total)

        future = start(on_progress)
        if future is not None:
            future.result()


def _run_refresh(keeper: PluginKeeper, fetch: bool = True) -> None:
    """Run a refresh in the background and show its progress."""
    description = "Checking for updates..." if fetch else "Reading plugin state..."
    _track_refresh(lambda on_progress: keeper.refresh_all(on_progress=on_progress, fetch=fetch), description)


def _startup_checks(keeper: PluginKeeper) -> None:
    """Run the startup check, then the periodic one if it is still due."""
    _track_refresh(keeper.startup, "Checking for updates...")
    _track_refresh(keeper.maybe_auto_refresh, "Checking for updates...")


def _exit_code(result: Optional[OperationResult]) -> int:
    if result is None:
        console.print("[yellow]Another operation is already running for this plugin[/yellow]")
        return 1
    if result.skipped:
        console.print(f"[red]No plugin named {result.name}[/red]")
        return 1
    return 0 if result.ok else 1


def _single(keeper: PluginKeeper, future) -> int:
    result = future.result() if future is not None else None
    code = _exit_code(result)
    if code == 0:
        _run_refresh(keeper, fetch=False)
        DisplayService(console).display_checkouts(keeper.list_checkouts())
    return code


def cmd_list(keeper: PluginKeeper, args) -> int:
    _run_refresh(keeper, fetch=args.fetch)
    DisplayService(console).display_checkouts(keeper.list_checkouts())
    return 0


def cmd_manual(keeper: PluginKeeper, args) -> int:
    names = keeper.list_manual_checkouts()
    if not names:
        console.print("No manually installed plugins")
    for name in names:
        console.print(name)
    return 0


def cmd_refresh(keeper: PluginKeeper, args) -> int:
    _run_refresh(keeper)
    DisplayService(console).display_checkouts(keeper.list_checkouts())
    return 0


def cmd_update(keeper: PluginKeeper, args) -> int:
    if not args.all:
        return _single(keeper, keeper.update(args.name))

    _run_refresh(keeper)
    futures = keeper.update_outdated()
    wait(futures)
    results = [future.result() for future in futures]
    DisplayService(console).display_checkouts(keeper.list_checkouts())
    return 0 if all(result.ok for result in results) else 1


def cmd_revert(keeper: PluginKeeper, args) -> int:
    return _single(keeper, keeper.revert(args.name))


def cmd_switch(keeper: PluginKeeper, args) -> int:
    return _single(keeper, keeper.switch_branch(args.name, args.branch))


def cmd_clone(keeper: PluginKeeper, args) -> int:
    return _exit_code(keeper.clone(args.url).result())


def cmd_delete(keeper: PluginKeeper, args) -> int:
    if not args.yes and not Confirm.ask(f"Delete plugin {args.name}?", default=False, console=console):
        console.print("[yellow]Delete cancelled[/yellow]")
        return 1
    future = keeper.delete(args.name)
    return _exit_code(future.result() if future is not None else None)


def cmd_browse(keeper: PluginKeeper, args) -> int:
    org = args.org or keeper.config.catalog_org
    if not org:
        console.print("[red]No organization given: use --org, --catalog-org or $PLUGIN_KEEPER_CATALOG_ORG[/red]")
        return 1

    installed = [record.name for record in keeper.list_checkouts()] + keeper.list_manual_checkouts()
    catalog = CatalogService(keeper.config.github_token)
    try:
        with console.status(f"[bold blue]Loading plugins from {org}...", spinner="dots"):
            entries = catalog.list_available(org, installed)
    except CatalogError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    finally:
        catalog.close()

    DisplayService(console).display_catalog(entries)
    return 0


COMMANDS = {
    "list": cmd_list,
    "manual": cmd_manual,
    "refresh": cmd_refresh,
    "update": cmd_update,
    "revert": cmd_revert,
    "switch": cmd_switch,
    "clone": cmd_clone,
    "delete": cmd_delete,
    "browse": cmd_browse,
}


def main(argv=None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug)

    check_state = CheckStateStore(args.root, args.state_dir)
    # Without a recorded check the first periodic check is due immediately
    last_update_check = check_state.load() or datetime.min

    try:
        config = Config(
            plugin_root=args.root,
            check_updates_on_startup=args.check_on_startup,
            auto_check_updates=args.auto_check,
            update_check_interval_minutes=args.check_interval,
            last_update_check=last_update_check,
            credential_helper=args.credential_helper,
            credential_timeout=args.credential_timeout,
            fallback_remote=args.fallback_remote,
            restart_timeout=args.restart_timeout,
            workers=args.workers,
            catalog_org=args.catalog_org,
            verbose=args.verbose,
            debug=args.debug,
        )
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        return 2

    if args.debug:
        console.print("[yellow]Configuration:[/yellow]")
        for key, value in config.to_dict().items():
            console.print(f"  {key}: {value}")

    try:
        with PluginKeeper(config, ConsoleLog(), confirm_restart=_confirm_restart) as keeper:
            _startup_checks(keeper)
            return COMMANDS[args.command](keeper, args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    finally:
        if config.last_update_check != last_update_check:
            check_state.save(config.last_update_check)


if __name__ == "__main__":
    sys.exit(main())
