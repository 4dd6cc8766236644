"""Data models for git-plugin-keeper."""

from .checkout import CheckoutRecord, OperationResult, OperationState
from .credentials import Credentials
from .catalog import CatalogEntry

__all__ = [
    "CheckoutRecord",
    "OperationResult",
    "OperationState",
    "Credentials",
    "CatalogEntry",
]
