"""Git-related services for git-plugin-keeper."""

from .credentials import CredentialResolver
from .discovery import discover_manual, discover_tracked
from .inspector import inspect_record, inspect_repository
from .operations import CheckoutOperations, parse_clone_url

__all__ = [
    "CredentialResolver",
    "discover_manual",
    "discover_tracked",
    "inspect_record",
    "inspect_repository",
    "CheckoutOperations",
    "parse_clone_url",
]
