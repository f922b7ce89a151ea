"""Ledger package.

Public API:
- LedgerStore: owns entries, live total, newest-first history view, blob flush.
- Entry: immutable ledger record.
- hydrate / parse_blob: load a persisted blob without ever raising.
"""

from .codec import ParseResult, dump_blob, parse_blob
from .model import HISTORY_LIMIT, STORAGE_KEY, UNIT, Entry, new_id
from .store import LedgerStore, hydrate

__all__ = [
    "Entry",
    "HISTORY_LIMIT",
    "LedgerStore",
    "ParseResult",
    "STORAGE_KEY",
    "UNIT",
    "dump_blob",
    "hydrate",
    "new_id",
    "parse_blob",
]
