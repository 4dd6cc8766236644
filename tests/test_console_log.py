"""Tests for ConsoleLog"""
from datetime import datetime
from io import StringIO
from threading import Thread

from rich.console import Console

from git_plugin_keeper.services.console_log import ConsoleLog, LogEntry


class TestConsoleLog:
    """Test the user-facing event log."""

    def test_entries_keep_level_and_order(self):
        log = ConsoleLog(echo=False)
        log.log_info("first")
        log.log_warning("second")
        log.log_error("third")
        log.log_success("fourth")

        assert [(entry.level, entry.message) for entry in log.entries()] == [
            ("info", "first"),
            ("warning", "second"),
            ("error", "third"),
            ("success", "fourth"),
        ]

    def test_max_entries(self):
        log = ConsoleLog(echo=False, max_entries=2)
        for i in range(5):
            log.log_info(f"message {i}")
        assert [entry.message for entry in log.entries()] == ["message 3", "message 4"]

    def test_clear(self):
        log = ConsoleLog(echo=False)
        log.log_info("something")
        log.clear()
        assert log.entries() == []

    def test_echo_escapes_markup(self):
        output = StringIO()
        log = ConsoleLog(console=Console(file=output, force_terminal=False, width=200))

        log.log_error("Error updating plugin [bold]x[/bold]")

        assert "Error updating plugin [bold]x[/bold]" in output.getvalue()

    def test_forwards_to_logging(self, caplog):
        log = ConsoleLog(echo=False)
        with caplog.at_level("WARNING"):
            log.log_warning("disk is full")
        assert "disk is full" in caplog.text

    def test_concurrent_writers(self):
        log = ConsoleLog(echo=False)

        def write(n):
            for i in range(100):
                log.log_info(f"{n}-{i}")

        threads = [Thread(target=write, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(log.entries()) == 400

    def test_entry_format(self):
        entry = LogEntry("info", "hello", timestamp=datetime(2024, 1, 2, 3, 4, 5))
        assert entry.format() == "[03:04:05] hello"
