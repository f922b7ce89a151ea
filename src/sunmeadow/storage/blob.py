"""
Key-value blob stores backing the ledger.

A blob store holds opaque strings under named slots. The ledger keeps its
whole entry set serialized in a single slot and overwrites it after every
mutation, so backends only need `get` and `set`.

Backends:
- `MemoryBlobStore`: process-local dict, optional byte quota (tests, demos).
- `SQLiteBlobStore`: one `blobs` table, overwrite-on-write, optional quota.

Write failures surface as `BlobWriteError` carrying a short `reason` label
(`quota_exceeded`, `io_error`) that callers use for metrics.
"""

from __future__ import annotations

import os
import sqlite3
from typing import Dict, Optional


DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class BlobStoreError(Exception):
    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class BlobReadError(BlobStoreError):
    pass


class BlobWriteError(BlobStoreError):
    pass


def _check_quota(key: str, value: str, quota_bytes: Optional[int]) -> None:
    if quota_bytes is None:
        return
    size = len(key.encode("utf-8")) + len(value.encode("utf-8"))
    if size > quota_bytes:
        raise BlobWriteError(
            "quota_exceeded",
            f"Blob '{key}' needs {size} bytes, quota is {quota_bytes}",
        )


class BlobStore:
    """Base blob store interface."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    def __init__(self, quota_bytes: Optional[int] = None, initial: Optional[Dict[str, str]] = None):
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        self._data[key] = value


DDL = """
CREATE TABLE IF NOT EXISTS blobs (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);
"""


class SQLiteBlobStore(BlobStore):
    def __init__(self, path: str = "data/meadow.sqlite", quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES):
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.path = path
        self.quota_bytes = quota_bytes
        with sqlite3.connect(self.path) as con:
            con.execute(DDL)

    def get(self, key: str) -> Optional[str]:
        try:
            with sqlite3.connect(self.path) as con:
                row = con.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise BlobReadError("io_error", f"Failed to read blob '{key}': {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        try:
            with sqlite3.connect(self.path) as con:
                con.execute(
                    "INSERT INTO blobs(key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as e:
            raise BlobWriteError("io_error", f"Failed to write blob '{key}': {e}") from e


def build_blob_store(backend: str, path: str, quota_bytes: Optional[int]) -> BlobStore:
    """Construct the blob store named by `backend` (`sqlite` or `memory`)."""
    if backend == "memory":
        return MemoryBlobStore(quota_bytes=quota_bytes)
    if backend == "sqlite":
        return SQLiteBlobStore(path, quota_bytes=quota_bytes)
    raise ValueError(f"Unknown storage backend: {backend}")
