"""Custom exceptions for git-plugin-keeper"""

from typing import Optional


class PluginKeeperError(Exception):
    """Base exception for all git-plugin-keeper errors."""

    kind = "PluginKeeperError"


class DiscoveryIOError(PluginKeeperError):
    """Raised when the plugin root itself cannot be scanned."""

    kind = "DiscoveryIOError"

    def __init__(self, root: str, message: Optional[str] = None):
        self.root = root
        error_msg = f"Cannot scan plugin folder {root}"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class CredentialResolutionError(PluginKeeperError):
    """Raised internally when the credential helper gives no usable answer."""

    kind = "CredentialResolutionFailure"


class GitOperationError(PluginKeeperError):
    """Exception raised for errors in Git operations."""

    kind = "GitOperationFailed"

    def __init__(self, operation: str, checkout: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.checkout = checkout
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if checkout:
            error_msg += f" for '{checkout}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class RemoteResolutionAmbiguousError(GitOperationError):
    """No remote could be chosen safely for a fetch."""

    kind = "RemoteResolutionAmbiguous"

    def __init__(self, checkout: str, remotes: list):
        self.remotes = remotes
        if remotes:
            detail = f"cannot choose between remotes {', '.join(sorted(remotes))}"
        else:
            detail = "no remotes configured"
        super().__init__("resolve_remote", checkout, detail)


class NoTrackingBranchError(GitOperationError):
    """The current branch has no upstream to pull from."""

    kind = "NoTrackingBranch"

    def __init__(self, checkout: str, branch: Optional[str] = None):
        self.branch = branch
        detail = f"branch '{branch}' has no tracking branch" if branch else "no tracking branch found"
        super().__init__("update", checkout, detail)


class NoParentCommitError(GitOperationError):
    """HEAD is a root commit, there is nothing to revert to."""

    kind = "NoParentCommit"

    def __init__(self, checkout: str):
        super().__init__("revert", checkout, "Cannot revert: no parent commit found")


class BranchNotFoundError(GitOperationError):
    """Exception raised when a branch is not found locally or on the remote."""

    kind = "BranchNotFound"

    def __init__(self, checkout: str, branch: str, operation: str = "switch_branch"):
        self.branch = branch
        super().__init__(operation, checkout, f"Branch '{branch}' not found")


class TargetAlreadyExistsError(GitOperationError):
    """A checkout with the clone target name already exists."""

    kind = "TargetAlreadyExists"

    def __init__(self, checkout: str):
        super().__init__("clone", checkout, f"A plugin with the name {checkout} already exists")


class InvalidCloneUrlError(GitOperationError):
    """The clone URL does not yield a usable checkout name."""

    kind = "InvalidCloneUrl"

    def __init__(self, url: str):
        self.url = url
        super().__init__("clone", None, f"Cannot derive a plugin name from '{url}'")


class DirectoryNotFoundError(GitOperationError):
    """The checkout directory does not exist on disk."""

    kind = "DirectoryNotFound"

    def __init__(self, checkout: str, path: str):
        self.path = path
        super().__init__("delete", checkout, f"Plugin directory not found: {path}")


class CatalogError(PluginKeeperError):
    """Exception raised when the plugin catalog cannot be loaded."""

    kind = "CatalogError"
