"""Read-only inspection of a checkout's git state."""

import dataclasses
from typing import Any, Dict, Optional

import git

from git_plugin_keeper.constants import SHORT_SHA_LENGTH
from git_plugin_keeper.exceptions import GitOperationError
from git_plugin_keeper.logging_config import get_logger
from git_plugin_keeper.models.checkout import CheckoutRecord

logger = get_logger(__name__)


def short_sha(commit: git.Commit) -> str:
    return commit.hexsha[:SHORT_SHA_LENGTH]


def describe_commit(commit: git.Commit) -> str:
    """One-line description: abbreviated id and summary."""
    summary = commit.summary
    if isinstance(summary, bytes):
        summary = summary.decode("utf-8", errors="ignore")
    return f"{short_sha(commit)} {summary}"


def format_divergence(behind: int, ahead: int) -> str:
    return f"{behind} behind, {ahead} ahead"


def get_tracking_branch(repo: git.Repo) -> Optional[git.RemoteReference]:
    """Upstream of the current branch, or None when detached, unset or not fetched."""
    if repo.head.is_detached:
        return None
    tracking = repo.active_branch.tracking_branch()
    if tracking is None or not tracking.is_valid():
        return None
    return tracking


def list_branch_names(repo: git.Repo) -> tuple:
    """Sorted union of local branch names and remote branch names without the remote prefix."""
    names = {head.name for head in repo.heads}
    for ref in repo.refs:
        if isinstance(ref, git.RemoteReference) and ref.remote_head != "HEAD":
            names.add(ref.remote_head)
    return tuple(sorted(names))


def count_divergence(repo: git.Repo, tracking: git.RemoteReference) -> tuple:
    """Return (behind, ahead) of HEAD relative to ``tracking``."""
    ahead = sum(1 for _ in repo.iter_commits(f"{tracking.path}..HEAD"))
    behind = sum(1 for _ in repo.iter_commits(f"HEAD..{tracking.path}"))
    return behind, ahead


def inspect_repository(repo: git.Repo) -> Dict[str, Any]:
    """Compute the checkout fields for an open repository.

    Pure read: nothing in the repository or its config is modified.
    """
    try:
        head_commit = repo.head.commit
    except ValueError as e:
        raise GitOperationError("inspect", message=f"repository has no commits: {e}") from e

    current_commit = short_sha(head_commit)
    current_branch = "" if repo.head.is_detached else repo.active_branch.name

    latest_commit = current_commit
    latest_summary = None
    behind_ahead = ""
    tracking = get_tracking_branch(repo)
    if tracking is not None:
        latest_commit = short_sha(tracking.commit)
        latest_summary = describe_commit(tracking.commit)
        if latest_commit != current_commit:
            behind_ahead = format_divergence(*count_divergence(repo, tracking))

    previous_summary = None
    if head_commit.parents:
        previous_summary = describe_commit(head_commit.parents[0])

    return {
        "current_commit": current_commit,
        "latest_commit": latest_commit,
        "behind_ahead": behind_ahead,
        "latest_commit_summary": latest_summary,
        "previous_commit_summary": previous_summary,
        "uncommitted_change_count": len(head_commit.diff(None)),
        "available_branches": list_branch_names(repo),
        "current_branch": current_branch,
        "selected_branch": current_branch,
    }


def inspect_record(repo: git.Repo, base: CheckoutRecord, message: Optional[str] = None) -> CheckoutRecord:
    """Return a fresh record for ``base`` built from the repository state."""
    fields = inspect_repository(repo)
    if message is not None:
        fields["last_operation_message"] = message
    record = dataclasses.replace(base, is_tracked=True, **fields)
    logger.debug(f"Inspected {record.name}: {record.current_commit} -> {record.latest_commit or '?'}")
    return record
