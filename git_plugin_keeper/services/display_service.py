"""Display service for plugin checkouts"""
from typing import List

from rich.console import Console
from rich.table import Table

from git_plugin_keeper.constants import COLUMNS, LOCAL_CHANGES_COLOR, UPDATE_AVAILABLE_COLOR
from git_plugin_keeper.models.catalog import CatalogEntry
from git_plugin_keeper.models.checkout import CheckoutRecord


def format_message(message: str) -> str:
    """First line of an operation message, marked when more lines follow."""
    lines = [line for line in message.splitlines() if line.strip()]
    if not lines:
        return ""
    return lines[0] + (" …" if len(lines) > 1 else "")


def format_branch(record: CheckoutRecord) -> str:
    branch = record.current_branch or "(detached)"
    if record.selected_branch and record.selected_branch != record.current_branch:
        branch += f" → {record.selected_branch}"
    return branch


class DisplayService:
    def __init__(self, console: Console = None):
        self.console = console or Console()

    def display_checkouts(self, records: List[CheckoutRecord]) -> None:
        """Display a table of plugin checkouts."""
        if not records:
            self.console.print("No plugins found")
            return

        table = Table()
        for col in COLUMNS:
            table.add_column(col.label, max_width=col.width or None)

        for record in records:
            row_style = UPDATE_AVAILABLE_COLOR if record.has_update else None
            changes = str(record.uncommitted_change_count) if record.has_local_changes else ""
            table.add_row(
                record.name,
                format_branch(record),
                record.current_commit or "?",
                record.latest_commit or "?",
                record.behind_ahead,
                f"[{LOCAL_CHANGES_COLOR}]{changes}[/{LOCAL_CHANGES_COLOR}]" if changes else "",
                format_message(record.last_operation_message),
                style=row_style,
            )

        self.console.print(table)

        outdated = sum(1 for record in records if record.has_update)
        if outdated:
            self.console.print(f"\n[{UPDATE_AVAILABLE_COLOR}]{outdated} plugin(s) have updates available[/{UPDATE_AVAILABLE_COLOR}]")

    def display_catalog(self, entries: List[CatalogEntry]) -> None:
        table = Table()
        table.add_column("Plugin")
        table.add_column("Installed")
        table.add_column("Clone URL")
        table.add_column("Description", max_width=50)

        for entry in entries:
            table.add_row(
                entry.name,
                "✓" if entry.installed else "",
                entry.clone_url,
                entry.description or "",
                style="dim" if entry.installed else None,
            )

        self.console.print(table)
