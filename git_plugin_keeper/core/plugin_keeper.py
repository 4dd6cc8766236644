"""Core functionality for git-plugin-keeper"""

import dataclasses
import os
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from threading import Event, Lock
from typing import Callable, Dict, List, Optional, Set

from git_plugin_keeper.config import Config
from git_plugin_keeper.exceptions import (
    DirectoryNotFoundError,
    DiscoveryIOError,
    GitOperationError,
    PluginKeeperError,
    TargetAlreadyExistsError,
)
from git_plugin_keeper.logging_config import get_logger
from git_plugin_keeper.models.checkout import CheckoutRecord, OperationResult, OperationState
from git_plugin_keeper.services.console_log import LogSink
from git_plugin_keeper.services.git.discovery import discover_manual, discover_tracked
from git_plugin_keeper.services.git.operations import CheckoutOperations, parse_clone_url
from git_plugin_keeper.utils.threading import get_worker_count

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]
ConfirmCallback = Callable[[], bool]

# (verb, gerund, past tense) used in user-facing messages
_WORDING = {
    OperationState.UPDATING: ("update", "updating", "updated"),
    OperationState.REVERTING: ("revert", "reverting", "reverted"),
    OperationState.SWITCHING: ("branch switch", "switching branch of", "switched"),
    OperationState.CLONING: ("clone", "cloning", "cloned"),
    OperationState.DELETING: ("delete", "deleting", "deleted"),
}


@dataclass
class _RefreshRun:
    cancel_event: Event
    future: Optional[Future] = None


class PluginKeeper:
    """Keeps the plugin checkouts under one folder in sync with their remotes.

    Operations run on a background thread pool and return futures. The state
    map is only locked while a record is read or replaced, never during git
    I/O, so ``list_checkouts()`` does not wait on running operations.
    """

    def __init__(
        self,
        config: Config,
        log_sink: LogSink,
        operations: Optional[CheckoutOperations] = None,
        confirm_restart: Optional[ConfirmCallback] = None,
    ):
        """Initialize PluginKeeper.

        Args:
            config: Configuration object
            log_sink: Receiver for user-facing operation messages
            operations: Git operations service (built from config if omitted)
            confirm_restart: Asked whether to cancel a running refresh when a
                new one is requested; declining by default
        """
        self.config = config
        self.log = log_sink
        self.operations = operations or CheckoutOperations(config)
        self._confirm_restart = confirm_restart or (lambda: False)

        self._records: Dict[str, CheckoutRecord] = {}
        self._records_lock = Lock()
        self._states: Dict[str, OperationState] = {}
        self._states_lock = Lock()
        self._manual: Set[str] = set()

        self._refresh_lock = Lock()
        self._refresh_run: Optional[_RefreshRun] = None

        max_workers = get_worker_count(config.workers)
        logger.debug(f"Using {max_workers} workers for background operations")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="plugin-keeper")

        self._discover()

    # State map

    def list_checkouts(self) -> List[CheckoutRecord]:
        """Snapshot of all tracked checkouts, ordered by name."""
        with self._records_lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.name.lower())

    def get_checkout(self, name: str) -> Optional[CheckoutRecord]:
        with self._records_lock:
            return self._records.get(name)

    def list_manual_checkouts(self) -> List[str]:
        """Names of directories without git metadata, found at the last discovery."""
        with self._records_lock:
            manual = list(self._manual)
        return sorted(manual, key=str.lower)

    def _publish(self, record: CheckoutRecord) -> None:
        with self._records_lock:
            self._records[record.name] = record

    def _remove(self, name: str) -> None:
        with self._records_lock:
            self._records.pop(name, None)
            self._manual.discard(name)

    def _discover(self) -> List[CheckoutRecord]:
        """Scan the plugin root and add newly found checkouts to the state map."""
        root = self.config.plugin_root
        try:
            tracked = discover_tracked(root)
            manual = discover_manual(root)
        except DiscoveryIOError as e:
            self.log.log_warning(str(e))
            return []

        with self._records_lock:
            for record in tracked:
                self._records.setdefault(record.name, record)
            self._manual = manual
        return sorted(tracked, key=lambda r: r.name.lower())

    # Per-checkout guards

    def operation_state(self, name: str) -> OperationState:
        with self._states_lock:
            return self._states.get(name, OperationState.IDLE)

    def is_busy(self, name: str) -> bool:
        return self.operation_state(name) is not OperationState.IDLE

    def _try_begin(self, name: str, state: OperationState) -> bool:
        """Move ``name`` from IDLE to ``state``; False if something else holds it."""
        with self._states_lock:
            if self._states.get(name, OperationState.IDLE) is not OperationState.IDLE:
                return False
            self._states[name] = state
            return True

    def _finish(self, name: str) -> None:
        with self._states_lock:
            self._states.pop(name, None)

    # Refresh-All

    @property
    def refresh_in_progress(self) -> bool:
        run = self._refresh_run
        return run is not None and run.future is not None and not run.future.done()

    def refresh_all(
        self,
        on_progress: Optional[ProgressCallback] = None,
        confirm_restart: Optional[ConfirmCallback] = None,
        fetch: bool = True,
    ) -> Optional[Future]:
        """Fetch and re-inspect every tracked checkout in the background.

        If a refresh is already running, ``confirm_restart`` (or the callback
        given at construction) decides whether to cancel it and start over.
        Declining returns None and leaves the running refresh alone. With
        ``fetch=False`` checkouts are only re-inspected locally.

        Returns:
            Future resolving to the number of checkouts processed, or None
        """
        confirm = confirm_restart or self._confirm_restart
        with self._refresh_lock:
            previous = self._refresh_run
            if previous is not None and previous.future is not None and not previous.future.done():
                if not confirm():
                    logger.debug("Refresh already in progress; restart declined")
                    return None

                previous.cancel_event.set()
                done, _ = wait([previous.future], timeout=self.config.restart_timeout)
                if not done:
                    self.log.log_warning(
                        f"Previous update check did not stop within {self.config.restart_timeout}s; starting anyway"
                    )

            run = _RefreshRun(cancel_event=Event())
            run.future = self._executor.submit(self._refresh_all_worker, run.cancel_event, on_progress, fetch)
            self._refresh_run = run
            return run.future

    def _refresh_all_worker(
        self, cancel_event: Event, on_progress: Optional[ProgressCallback], fetch: bool = True
    ) -> int:
        self._discover()
        checkouts = self.list_checkouts()
        total = len(checkouts)
        completed = 0
        self._report_progress(on_progress, completed, total)

        for record in checkouts:
            if cancel_event.is_set():
                self.log.log_info(f"Update check cancelled after {completed}/{total} plugins")
                return completed

            try:
                self._refresh_one(record.name, fetch)
            except PluginKeeperError as e:
                self.log.log_error(f"Error processing {record.name}: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error refreshing {record.name}")
                self.log.log_error(f"Error processing {record.name}: {e}")
            finally:
                completed += 1
                self._report_progress(on_progress, completed, total)

        if fetch:
            self.config.mark_checked()
        logger.info(f"Checked {total} plugins for updates")
        return completed

    def _refresh_one(self, name: str, fetch: bool = True) -> None:
        if not self._try_begin(name, OperationState.REFRESHING):
            logger.debug(f"Skipping refresh of {name}: {self.operation_state(name).value}")
            return
        try:
            record = self.get_checkout(name)
            if record is None or not os.path.isdir(record.path):
                logger.debug(f"Skipping refresh of {name}: no longer present")
                return
            refreshed = self.operations.refresh(record) if fetch else self.operations.inspect(record)
            self._publish(refreshed)
        finally:
            self._finish(name)

    def _report_progress(self, on_progress: Optional[ProgressCallback], completed: int, total: int) -> None:
        if on_progress is None:
            return
        try:
            on_progress(completed, total)
        except Exception:
            logger.exception("Progress callback failed")

    def startup(self, on_progress: Optional[ProgressCallback] = None) -> Optional[Future]:
        """Report manual checkouts and run the startup update check if enabled."""
        for name in self.list_manual_checkouts():
            self.log.log_warning(f"{name} was downloaded manually so cannot be updated via this plugin")

        if self.config.check_updates_on_startup:
            return self.refresh_all(on_progress)
        return None

    def maybe_auto_refresh(self, on_progress: Optional[ProgressCallback] = None) -> Optional[Future]:
        """Start a refresh when a periodic check is due and none is running."""
        if not self.config.should_perform_periodic_check() or self.refresh_in_progress:
            return None

        self.config.mark_checked()
        logger.info("Starting periodic update check")
        # An automatic check never interrupts a refresh started in the meantime
        return self.refresh_all(on_progress, confirm_restart=lambda: False)

    # Single-checkout operations

    def update(self, name: str) -> Optional[Future]:
        """Fetch and fast-forward/merge ``name``. None if it is already busy."""
        return self._submit(name, OperationState.UPDATING, self.operations.update)

    def revert(self, name: str) -> Optional[Future]:
        """Hard-reset ``name`` to the parent of HEAD. None if it is already busy."""
        return self._submit(name, OperationState.REVERTING, self.operations.revert)

    def switch_branch(self, name: str, branch: str) -> Optional[Future]:
        """Check out ``branch`` in ``name`` and reset it to the upstream tip."""

        def switch(record: CheckoutRecord) -> CheckoutRecord:
            try:
                return self.operations.switch_branch(record, branch)
            except Exception:
                current = self.get_checkout(name)
                if current is not None:
                    self._publish(dataclasses.replace(current, selected_branch=current.current_branch))
                raise

        if not self._try_begin(name, OperationState.SWITCHING):
            logger.debug(f"Ignoring branch switch request for {name}: {self.operation_state(name).value}")
            return None
        record = self.get_checkout(name)
        if record is not None:
            self._publish(dataclasses.replace(record, selected_branch=branch))
        try:
            return self._dispatch(name, OperationState.SWITCHING, switch)
        except RuntimeError:
            if record is not None:
                self._publish(record)
            raise

    def update_outdated(self) -> List[Future]:
        """Start an update for every checkout with a newer upstream commit."""
        outdated = [record for record in self.list_checkouts() if record.has_update]
        self.log.log_info(f"Starting update for {len(outdated)} plugins...")
        futures = [self.update(record.name) for record in outdated]
        return [future for future in futures if future is not None]

    def _submit(
        self,
        name: str,
        state: OperationState,
        operation: Callable[[CheckoutRecord], CheckoutRecord],
    ) -> Optional[Future]:
        if not self._try_begin(name, state):
            logger.debug(f"Ignoring {state.value} request for {name}: {self.operation_state(name).value}")
            return None
        return self._dispatch(name, state, operation)

    def _dispatch(
        self,
        name: str,
        state: OperationState,
        operation: Callable[[CheckoutRecord], CheckoutRecord],
    ) -> Future:
        """Run an operation for a checkout already claimed with _try_begin."""
        try:
            return self._executor.submit(self._run_operation, name, state, operation)
        except RuntimeError:
            self._finish(name)
            raise

    def _run_operation(
        self,
        name: str,
        state: OperationState,
        operation: Callable[[CheckoutRecord], CheckoutRecord],
    ) -> OperationResult:
        verb, gerund, past = _WORDING[state]
        try:
            record = self.get_checkout(name)
            if record is None or not os.path.isdir(record.path):
                logger.debug(f"Skipping {verb} of {name}: no longer present")
                return OperationResult.skip(name)

            self.log.log_info(f"Starting {verb} for {name}...")
            result = operation(record)
            self._publish(result)
            self._log_lines(result.last_operation_message)
            self.log.log_success(f"Successfully {past} {name} to {result.current_commit}")
            return OperationResult.success(name, result.last_operation_message)
        except Exception as e:
            return self._fail(name, gerund, e, verb)
        finally:
            self._finish(name)

    def _fail(self, name: str, gerund: str, error: Exception, verb: str) -> OperationResult:
        if not isinstance(error, PluginKeeperError):
            logger.exception(f"Unexpected error during {verb} of {name}")
            error = GitOperationError(verb, name, str(error))
        self.log.log_error(f"Error {gerund} plugin {name}: {error}")
        return OperationResult.failure(name, error)

    def _log_lines(self, message: str) -> None:
        for line in message.splitlines():
            if line.strip():
                self.log.log_info(line.strip())

    def clone(self, url: str) -> Future:
        """Clone ``url`` into the plugin root."""
        try:
            _, name, _ = parse_clone_url(url)
        except PluginKeeperError as e:
            return self._completed(self._fail(url, "cloning", e, "clone"))

        if not self._claim_clone_target(name):
            return self._completed(self._fail(name, "cloning", TargetAlreadyExistsError(name), "clone"))

        try:
            return self._executor.submit(self._run_clone, name, url)
        except RuntimeError:
            self._finish(name)
            raise

    def _run_clone(self, name: str, url: str) -> OperationResult:
        try:
            self.log.log_info(f"Cloning repository: {url}")
            record = self.operations.clone(url)
            self._publish(record)
            with self._records_lock:
                self._manual.discard(name)
            self._log_lines(record.last_operation_message)
            self.log.log_success(f"Successfully cloned {name} at {record.current_commit}")
            return OperationResult.success(name, record.last_operation_message)
        except Exception as e:
            if not os.path.isdir(self.operations.checkout_path(name)):
                # Discovery may have picked up the partial clone
                self._remove(name)
            return self._fail(name, "cloning", e, "clone")
        finally:
            self._finish(name)

    def _claim_clone_target(self, name: str) -> bool:
        """Claim ``name`` for a clone unless a checkout or running operation uses it, ignoring case."""
        folded = name.casefold()
        with self._records_lock:
            names = list(self._records) + list(self._manual)
        with self._states_lock:
            if any(existing.casefold() == folded for existing in names + list(self._states)):
                return False
            self._states[name] = OperationState.CLONING
            return True

    def delete(self, name: str) -> Optional[Future]:
        """Remove a tracked checkout's directory and its entry. None if it is busy.

        Only names in the state map can be deleted; manual folders and any
        other path are refused with DirectoryNotFoundError.
        """
        if self.get_checkout(name) is None:
            error = DirectoryNotFoundError(name, self.operations.checkout_path(name))
            return self._completed(self._fail(name, "deleting", error, "delete"))

        if not self._try_begin(name, OperationState.DELETING):
            logger.debug(f"Ignoring delete request for {name}: {self.operation_state(name).value}")
            return None
        try:
            return self._executor.submit(self._run_delete, name)
        except RuntimeError:
            self._finish(name)
            raise

    def _run_delete(self, name: str) -> OperationResult:
        try:
            self.operations.delete(name)
            self._remove(name)
            self.log.log_success(f"Deleted {name}")
            return OperationResult.success(name, f"Deleted {name}")
        except Exception as e:
            return self._fail(name, "deleting", e, "delete")
        finally:
            self._finish(name)

    @staticmethod
    def _completed(result: OperationResult) -> Future:
        future: Future = Future()
        future.set_result(result)
        return future

    # Lifecycle

    def close(self, wait_for_tasks: bool = True) -> None:
        """Cancel any running refresh and shut down the worker pool."""
        logger.debug("Closing PluginKeeper resources")
        run = self._refresh_run
        if run is not None:
            run.cancel_event.set()
        self._executor.shutdown(wait=wait_for_tasks)

    def __enter__(self) -> "PluginKeeper":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
