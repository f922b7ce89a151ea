from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, List, Optional, Set

from ..layout.generator import element_count
from ..logs.event_log import log_ledger_event
from ..metrics.ledger import (
    get_clears_total,
    get_entries_deleted_total,
    get_entries_inserted_total,
    get_flush_errors_total,
    get_hydrate_errors_total,
    set_live_total,
    sign_label,
)
from ..storage.blob import BlobReadError, BlobStore, BlobWriteError
from .codec import dump_blob, parse_blob
from .model import HISTORY_LIMIT, STORAGE_KEY, UNIT, Entry, Number, new_id

log = logging.getLogger("sunmeadow.ledger")


def _now_ms() -> int:
    return int(time.time() * 1000)


class LedgerStore:
    """Owns the set of ledger entries and persists it after every mutation.

    The store is an explicit handle: callers create one (usually via
    `hydrate`/`load`) and pass it around. Derived views (`live_total`,
    `ordered_view`) are recomputed from the entry list on every call.

    The store performs no authorization: `delete_by_id` and `clear_all` are
    expected to be reachable only behind the admin gate.
    """

    def __init__(
        self,
        blob_store: Optional[BlobStore] = None,
        key: str = STORAGE_KEY,
        entries: Optional[List[Entry]] = None,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = new_id,
        unit: int = UNIT,
    ):
        self.blob_store = blob_store
        self.key = key
        self.unit = int(unit)
        self._clock = clock
        self._id_factory = id_factory
        # Insertion order; later index == more recently inserted
        self._entries: List[Entry] = list(entries or [])
        self.last_flush_error: Optional[str] = None

    # ---- construction ----

    @classmethod
    def hydrate(
        cls,
        raw: Any,
        blob_store: Optional[BlobStore] = None,
        key: str = STORAGE_KEY,
        id_factory: Callable[[], str] = new_id,
        **kwargs,
    ) -> "LedgerStore":
        """Build a store from a persisted blob. Never raises.

        Malformed content (bad JSON, not a list) yields an empty ledger.
        """
        result = parse_blob(raw, id_factory=id_factory)
        if not result.ok:
            log.warning(f"Discarding malformed ledger blob '{key}': {result.error}")
            get_hydrate_errors_total().labels(result.error.split(":", 1)[0]).inc()
        elif result.skipped:
            log.warning(f"Skipped {result.skipped} unusable record(s) in ledger blob '{key}'")
        store = cls(blob_store=blob_store, key=key, entries=result.entries, id_factory=id_factory, **kwargs)
        set_live_total(store.live_total())
        return store

    @classmethod
    def load(cls, blob_store: BlobStore, key: str = STORAGE_KEY, **kwargs) -> "LedgerStore":
        """Read the named slot from `blob_store` and hydrate from it."""
        try:
            raw = blob_store.get(key)
        except BlobReadError as e:
            log.warning(f"Failed to read ledger blob '{key}': {e}")
            get_hydrate_errors_total().labels(e.reason).inc()
            raw = None
        return cls.hydrate(raw, blob_store=blob_store, key=key, **kwargs)

    # ---- mutations ----

    def insert(self, value: Number) -> Entry:
        """Append a new entry and flush.

        Precondition: `value` is a non-zero multiple of `unit`, checked by the
        input validator before it gets here. A value breaking that contract is
        still recorded; ids and the live total stay correct either way.
        Non-finite values are refused with `ValueError` before any mutation.
        """
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Refusing non-finite ledger value {value!r}")
        if value % self.unit != 0:
            log.warning(f"Inserting value {value} that is not a multiple of {self.unit}")
        ids = self._ids()
        entry_id = self._id_factory()
        while entry_id in ids:
            entry_id = self._id_factory()
        ts = self._clock()
        if self._entries:
            ts = max(ts, max(e.timestamp for e in self._entries))
        entry = Entry(
            id=entry_id,
            value=value,
            timestamp=ts,
            cumulative_at_point=self.live_total() + value,
        )
        self._entries.append(entry)
        total = self.live_total()
        get_entries_inserted_total().labels(sign_label(value)).inc()
        set_live_total(total)
        log_ledger_event("entry_inserted", entry.id, value, total, ts)
        self.flush()
        return entry

    def delete_by_id(self, entry_id: Any) -> bool:
        """Remove the entry whose id matches (string-normalized). Idempotent."""
        wanted = str(entry_id)
        kept = [e for e in self._entries if str(e.id) != wanted]
        if len(kept) == len(self._entries):
            return False
        self._entries = kept
        total = self.live_total()
        get_entries_deleted_total().inc()
        set_live_total(total)
        log_ledger_event("entry_deleted", wanted, None, total)
        self.flush()
        return True

    def clear_all(self) -> None:
        """Empty the ledger immediately. Confirmation is the caller's job."""
        removed = len(self._entries)
        self._entries = []
        get_clears_total().inc()
        set_live_total(0)
        log_ledger_event("ledger_cleared", total=0, extra={"removed": removed})
        self.flush()

    # ---- derived views ----

    def live_total(self) -> Number:
        return sum(e.value for e in self._entries)

    def element_count(self) -> int:
        """Number of meadow elements for the current total."""
        return element_count(self.live_total(), self.unit)

    def ordered_view(self, limit: int = HISTORY_LIMIT) -> List[Entry]:
        """Entries newest first, truncated to `limit`.

        Equal timestamps are ordered by insertion recency (later first).
        """
        ranked = sorted(
            enumerate(self._entries),
            key=lambda pair: (pair[1].timestamp, pair[0]),
            reverse=True,
        )
        return [e for _idx, e in ranked[: max(0, int(limit))]]

    def entries(self) -> List[Entry]:
        """Snapshot of all entries in insertion order."""
        return list(self._entries)

    def get(self, entry_id: Any) -> Optional[Entry]:
        wanted = str(entry_id)
        for e in self._entries:
            if str(e.id) == wanted:
                return e
        return None

    def __len__(self) -> int:
        return len(self._entries)

    # ---- persistence ----

    def flush(self) -> bool:
        """Overwrite the blob slot with the full entry set.

        Failures are logged and counted but never roll back memory: the
        in-memory ledger stays authoritative for the session.
        """
        if self.blob_store is None:
            return True
        try:
            self.blob_store.set(self.key, dump_blob(self._entries))
        except BlobWriteError as e:
            self.last_flush_error = str(e)
            get_flush_errors_total().labels(e.reason).inc()
            log_ledger_event(
                "flush_failed",
                total=self.live_total(),
                severity="WARNING",
                extra={"reason": e.reason, "error": str(e)},
            )
            return False
        self.last_flush_error = None
        return True

    def _ids(self) -> Set[str]:
        return {e.id for e in self._entries}


def hydrate(raw: Any, blob_store: Optional[BlobStore] = None, key: str = STORAGE_KEY, **kwargs) -> LedgerStore:
    return LedgerStore.hydrate(raw, blob_store=blob_store, key=key, **kwargs)
