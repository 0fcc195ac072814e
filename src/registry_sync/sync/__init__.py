"""Synchronization transactions and their scheduling."""

from .context import RunContext
from .processor import ItemError, Processor
from .processors import RefreshProcessor, ReportOnlyProcessor
from .scheduler import process_references
from .transaction import SyncResult, SyncState, SyncTransaction, compare_digests

__all__ = [
    "ItemError",
    "Processor",
    "RefreshProcessor",
    "ReportOnlyProcessor",
    "RunContext",
    "SyncResult",
    "SyncState",
    "SyncTransaction",
    "compare_digests",
    "process_references",
]
