"""Blob storage backends for the ledger."""

from .blob import (
    BlobReadError,
    BlobStore,
    BlobStoreError,
    BlobWriteError,
    MemoryBlobStore,
    SQLiteBlobStore,
    build_blob_store,
)

__all__ = [
    "BlobReadError",
    "BlobStore",
    "BlobStoreError",
    "BlobWriteError",
    "MemoryBlobStore",
    "SQLiteBlobStore",
    "build_blob_store",
]
