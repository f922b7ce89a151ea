from __future__ import annotations

from typing import Optional
import os
from prometheus_client import Counter, Gauge, REGISTRY

_entries_inserted: Optional[Counter] = None
_entries_deleted: Optional[Counter] = None
_clears_total: Optional[Counter] = None
_flush_errors: Optional[Counter] = None
_hydrate_errors: Optional[Counter] = None
_live_total: Optional[Gauge] = None
_meadow_flowers: Optional[Gauge] = None


class _NoOp:
    def labels(self, *args, **kwargs):
        return self
    def inc(self, *args, **kwargs):
        return None
    def set(self, *args, **kwargs):
        return None


def _existing_collector(name: str):
    coll = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
    if coll is not None:
        return coll
    for coll in list(getattr(REGISTRY, "_collector_to_names", {}).keys()):
        if getattr(coll, "_name", None) == name:
            return coll
    return None


def _safe_counter(name: str, doc: str, labelnames):
    if os.getenv("DISABLE_PROMETHEUS", "0") == "1":
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        # Already registered (e.g. module reloaded in tests)
        return _existing_collector(name) or _NoOp()


def _safe_gauge(name: str, doc: str, labelnames=()):
    if os.getenv("DISABLE_PROMETHEUS", "0") == "1":
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        return _existing_collector(name) or _NoOp()


def get_entries_inserted_total():
    """Counter: ledger_entries_inserted_total{sign}"""
    global _entries_inserted
    if _entries_inserted is None:
        _entries_inserted = _safe_counter(
            "ledger_entries_inserted_total", "Ledger entries inserted", ["sign"]
        )
    return _entries_inserted


def get_entries_deleted_total():
    global _entries_deleted
    if _entries_deleted is None:
        _entries_deleted = _safe_counter("ledger_entries_deleted_total", "Ledger entries deleted", [])
    return _entries_deleted


def get_clears_total():
    global _clears_total
    if _clears_total is None:
        _clears_total = _safe_counter("ledger_clears_total", "Full ledger clears", [])
    return _clears_total


def get_flush_errors_total():
    """Counter: ledger_flush_errors_total{reason}"""
    global _flush_errors
    if _flush_errors is None:
        _flush_errors = _safe_counter(
            "ledger_flush_errors_total", "Failed ledger persistence flushes", ["reason"]
        )
    return _flush_errors


def get_hydrate_errors_total():
    """Counter: ledger_hydrate_errors_total{reason}"""
    global _hydrate_errors
    if _hydrate_errors is None:
        _hydrate_errors = _safe_counter(
            "ledger_hydrate_errors_total", "Persisted ledger blobs discarded at load", ["reason"]
        )
    return _hydrate_errors


def get_live_total_gauge():
    global _live_total
    if _live_total is None:
        _live_total = _safe_gauge("ledger_live_total", "Sum of all current ledger entry values")
    return _live_total


def get_meadow_flowers_gauge():
    """Gauge: meadow_flowers{kind} with kind in total|displayed"""
    global _meadow_flowers
    if _meadow_flowers is None:
        _meadow_flowers = _safe_gauge("meadow_flowers", "Meadow flower counts", ["kind"])
    return _meadow_flowers


def sign_label(value: float) -> str:
    if value > 0:
        return "deposit"
    if value < 0:
        return "withdrawal"
    return "zero"


def set_live_total(total: float) -> None:
    try:
        get_live_total_gauge().set(float(total))
    except Exception:
        # Metrics are optional in constrained environments
        pass


def set_meadow_counts(element_count: int, display_count: int) -> None:
    g = get_meadow_flowers_gauge()
    try:
        g.labels(kind="total").set(int(element_count))
        g.labels(kind="displayed").set(int(display_count))
    except Exception:
        pass
