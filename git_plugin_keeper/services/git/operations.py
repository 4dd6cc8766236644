"""Mutating git operations on a single plugin checkout."""

import gc
import os
import re
from contextlib import contextmanager
from typing import Optional, Tuple, Union, TYPE_CHECKING

import git

from git_plugin_keeper.constants import BRANCH_SELECTOR, UPDATER_EMAIL, UPDATER_NAME, VCS_MARKER
from git_plugin_keeper.exceptions import (
    BranchNotFoundError,
    DirectoryNotFoundError,
    GitOperationError,
    InvalidCloneUrlError,
    NoParentCommitError,
    NoTrackingBranchError,
    PluginKeeperError,
    RemoteResolutionAmbiguousError,
    TargetAlreadyExistsError,
)
from git_plugin_keeper.logging_config import get_logger
from git_plugin_keeper.models.checkout import CheckoutRecord
from git_plugin_keeper.services.git.credentials import CredentialResolver
from git_plugin_keeper.services.git.inspector import get_tracking_branch, inspect_record, short_sha
from git_plugin_keeper.utils.filesystem import remove_tree

if TYPE_CHECKING:
    from git_plugin_keeper.config import Config

logger = get_logger(__name__)

_MERGE_ENV = {
    "GIT_AUTHOR_NAME": UPDATER_NAME,
    "GIT_AUTHOR_EMAIL": UPDATER_EMAIL,
    "GIT_COMMITTER_NAME": UPDATER_NAME,
    "GIT_COMMITTER_EMAIL": UPDATER_EMAIL,
    "GIT_MERGE_AUTOEDIT": "no",
}


def parse_clone_url(url: str) -> Tuple[str, str, Optional[str]]:
    """Split a clone URL into (fetch_url, checkout_name, branch).

    A trailing ``/tree/<branch>`` selects a branch, as in a hosting
    provider's web URL; it is stripped and ``.git`` appended to get the
    fetch URL. The checkout name is the last path segment without ``.git``.
    """
    fetch_url = url.strip()
    branch = None

    selector_index = fetch_url.find(BRANCH_SELECTOR)
    if selector_index != -1:
        branch = fetch_url[selector_index + len(BRANCH_SELECTOR):].strip("/") or None
        fetch_url = fetch_url[:selector_index].rstrip("/")
        if not fetch_url.endswith(".git"):
            fetch_url += ".git"

    name = re.split(r"[/:\\]", fetch_url.rstrip("/"))[-1]
    if name.endswith(".git"):
        name = name[:-4]
    if not name or name in (".", ".."):
        raise InvalidCloneUrlError(url)

    return fetch_url, name, branch


def find_remote_branch(repo: git.Repo, remote_name: str, branch: str) -> Optional[git.RemoteReference]:
    ref = git.RemoteReference(repo, f"refs/remotes/{remote_name}/{branch}")
    return ref if ref.is_valid() else None


def _describe_git_error(error: Exception) -> str:
    if isinstance(error, git.exc.GitCommandError):
        stderr = (error.stderr or "").strip()
        if stderr.startswith("stderr:"):
            stderr = stderr[len("stderr:"):].strip()
        return stderr.strip("'").strip() or f"git exited with status {error.status}"
    return str(error)


class CheckoutOperations:
    """Service for git operations on plugin checkouts.

    Every method opens its own ``git.Repo`` so calls for different checkouts
    can run on different threads.
    """

    def __init__(self, config: "Config", credential_resolver: Optional[CredentialResolver] = None):
        self.plugin_root = config.plugin_root
        self.fallback_remote = config.fallback_remote
        self.credential_resolver = credential_resolver or CredentialResolver(
            config.credential_helper, config.credential_timeout
        )

    @contextmanager
    def _git_operation(self, operation: str, checkout: Optional[str]):
        """Translate git failures into GitOperationError."""
        try:
            yield
        except PluginKeeperError:
            raise
        except (git.exc.GitError, ValueError, OSError) as e:
            raise GitOperationError(operation, checkout, _describe_git_error(e)) from e

    def checkout_path(self, name: str) -> str:
        return os.path.join(self.plugin_root, name)

    def resolve_remote(self, repo: git.Repo, checkout: str) -> git.Remote:
        """Pick the remote to fetch from.

        Order: the tracked branch's remote, the fallback name, then the only
        remote if there is exactly one.
        """
        remotes = {remote.name: remote for remote in repo.remotes}

        if not repo.head.is_detached:
            tracking = repo.active_branch.tracking_branch()
            if tracking is not None and tracking.remote_name in remotes:
                return remotes[tracking.remote_name]

        if self.fallback_remote in remotes:
            return remotes[self.fallback_remote]

        if len(remotes) == 1:
            return next(iter(remotes.values()))

        raise RemoteResolutionAmbiguousError(checkout, list(remotes))

    def fetch(self, repo: git.Repo, remote: git.Remote) -> None:
        credentials = self.credential_resolver.resolve(remote.url)
        with repo.git.custom_environment(**credentials.to_git_env()):
            remote.fetch()

    def ensure_tracking(self, repo: git.Repo, remote: git.Remote) -> Optional[git.RemoteReference]:
        """Return the upstream of HEAD, setting it up from a like-named remote branch if unset."""
        tracking = get_tracking_branch(repo)
        if tracking is not None or repo.head.is_detached:
            return tracking

        head = repo.active_branch
        if head.tracking_branch() is not None:
            # Configured upstream that no longer exists on the remote
            return None

        remote_branch = find_remote_branch(repo, remote.name, head.name)
        if remote_branch is None:
            return None

        head.set_tracking_branch(remote_branch)
        logger.info(f"Set {head.name} to track {remote_branch.name} in {os.path.basename(repo.working_dir)}")
        return remote_branch

    def refresh(self, record: CheckoutRecord) -> CheckoutRecord:
        """Fetch and re-inspect a checkout."""
        with self._git_operation("refresh", record.name), git.Repo(record.path) as repo:
            remote = self.resolve_remote(repo, record.name)
            self.fetch(repo, remote)
            self.ensure_tracking(repo, remote)
            return inspect_record(repo, record)

    def inspect(self, record: CheckoutRecord) -> CheckoutRecord:
        """Re-inspect a checkout without touching the network."""
        with self._git_operation("inspect", record.name), git.Repo(record.path) as repo:
            return inspect_record(repo, record)

    def update(self, record: CheckoutRecord) -> CheckoutRecord:
        """Fetch and merge the tracked branch into HEAD."""
        with self._git_operation("update", record.name), git.Repo(record.path) as repo:
            remote = self.resolve_remote(repo, record.name)
            self.fetch(repo, remote)
            tracking = self.ensure_tracking(repo, remote)
            if tracking is None:
                branch = None if repo.head.is_detached else repo.active_branch.name
                raise NoTrackingBranchError(record.name, branch)

            before = repo.head.commit.hexsha
            try:
                with repo.git.custom_environment(**_MERGE_ENV):
                    output = repo.git.merge(tracking.name, "--no-edit")
            except git.exc.GitCommandError:
                self._abort_merge(repo)
                raise

            if repo.head.commit.hexsha == before:
                message = "Already up to date"
            else:
                message = f"Updated to {short_sha(repo.head.commit)}"
                if output:
                    message += f"\n{output}"
            return inspect_record(repo, record, message=message)

    def _abort_merge(self, repo: git.Repo) -> None:
        try:
            repo.git.merge("--abort")
        except git.exc.GitCommandError as e:
            logger.debug(f"No merge to abort in {repo.working_dir}: {_describe_git_error(e)}")

    def revert(self, record: CheckoutRecord) -> CheckoutRecord:
        """Hard-reset HEAD to its first parent."""
        with self._git_operation("revert", record.name), git.Repo(record.path) as repo:
            head_commit = repo.head.commit
            if not head_commit.parents:
                raise NoParentCommitError(record.name)

            parent = head_commit.parents[0]
            repo.head.reset(parent, index=True, working_tree=True)
            return inspect_record(repo, record, message=f"Reset to parent commit {short_sha(parent)}")

    def switch_branch(self, record: CheckoutRecord, branch: str) -> CheckoutRecord:
        """Check out ``branch`` and snap it to its upstream tip."""
        with self._git_operation("switch_branch", record.name), git.Repo(record.path) as repo:
            remote = self.resolve_remote(repo, record.name)
            self.fetch(repo, remote)

            if branch in repo.heads:
                local = repo.heads[branch]
            else:
                remote_branch = find_remote_branch(repo, remote.name, branch)
                if remote_branch is None:
                    raise BranchNotFoundError(record.name, branch)
                local = repo.create_head(branch, remote_branch)
                local.set_tracking_branch(remote_branch)

            local.checkout()

            tracking = local.tracking_branch()
            if tracking is not None and tracking.is_valid():
                repo.head.reset(tracking.commit, index=True, working_tree=True)
                message = f"Switched to {branch} at {short_sha(tracking.commit)}"
            else:
                message = f"Switched to {branch}"
            return inspect_record(repo, record, message=message)

    def clone(self, url: str) -> CheckoutRecord:
        """Clone ``url`` into the plugin root.

        Either a usable checkout exists afterwards or the target directory
        is gone.
        """
        fetch_url, name, branch = parse_clone_url(url)
        target = self.checkout_path(name)
        if os.path.exists(target):
            raise TargetAlreadyExistsError(name)

        credentials = self.credential_resolver.resolve(fetch_url)
        try:
            with self._git_operation("clone", name):
                repo = git.Repo.clone_from(fetch_url, target, env=credentials.to_git_env())
                with repo:
                    message = f"Cloned {fetch_url}"
                    if branch:
                        remote = repo.remotes[0]
                        remote_branch = find_remote_branch(repo, remote.name, branch)
                        if remote_branch is None:
                            raise BranchNotFoundError(name, branch, operation="clone")
                        local = repo.create_head(branch, remote_branch)
                        local.set_tracking_branch(remote_branch)
                        local.checkout()
                        message += f" on branch {branch}"
                    return inspect_record(repo, CheckoutRecord(name=name, path=target), message=message)
        except Exception:
            self._rollback_clone(target)
            raise

    def _rollback_clone(self, target: str) -> None:
        if not os.path.exists(target):
            return
        try:
            remove_tree(target)
            logger.debug(f"Removed partial clone at {target}")
        except OSError as e:
            logger.error(f"Could not remove partial clone at {target}: {e}")

    def is_checkout_dir(self, path: str) -> bool:
        """True for a directory directly below the plugin root that holds git metadata."""
        real_path = os.path.realpath(path)
        if os.path.dirname(real_path) != os.path.realpath(self.plugin_root):
            return False
        return os.path.isdir(real_path) and os.path.exists(os.path.join(real_path, VCS_MARKER))

    def delete(self, name: Union[str, CheckoutRecord]) -> None:
        """Remove a checkout directory from disk.

        Only git checkouts directly below the plugin root are removed; any
        other name, manual folders included, is refused.
        """
        if isinstance(name, CheckoutRecord):
            name = name.name
        path = self.checkout_path(name)
        if not self.is_checkout_dir(path):
            raise DirectoryNotFoundError(name, path)

        # Release file handles held by repository objects that are no longer referenced
        gc.collect()
        try:
            remove_tree(path)
        except OSError as e:
            raise GitOperationError("delete", name, f"Failed to delete plugin: {e}") from e
