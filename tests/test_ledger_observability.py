import logging

from prometheus_client import REGISTRY

from sunmeadow.ledger.store import LedgerStore, hydrate
from sunmeadow.logs.event_log import log_ledger_event


def _sample(metric: str, labels: dict = None) -> float:
    val = REGISTRY.get_sample_value(metric, labels or {})
    return 0.0 if val is None else float(val)


def test_mutations_emit_json_logs(caplog):
    caplog.set_level(logging.INFO)
    store = LedgerStore()
    e = store.insert(2000)
    store.delete_by_id(e.id)
    store.clear_all()
    out = "\n".join(r.message for r in caplog.records)
    assert '"event":"entry_inserted"' in out
    assert f'"entry_id":"{e.id}"' in out
    assert '"event":"entry_deleted"' in out
    assert '"event":"ledger_cleared"' in out


def test_mutation_counters_and_total_gauge():
    ins_before = _sample("ledger_entries_inserted_total", {"sign": "withdrawal"})
    del_before = _sample("ledger_entries_deleted_total")
    clr_before = _sample("ledger_clears_total")
    store = LedgerStore()
    store.insert(5000)
    e = store.insert(-1000)
    assert _sample("ledger_live_total") == 4000.0
    store.delete_by_id(e.id)
    store.delete_by_id(e.id)
    store.clear_all()
    assert _sample("ledger_entries_inserted_total", {"sign": "withdrawal"}) - ins_before == 1.0
    assert _sample("ledger_entries_deleted_total") - del_before == 1.0
    assert _sample("ledger_clears_total") - clr_before == 1.0
    assert _sample("ledger_live_total") == 0.0


def test_hydrate_error_is_counted_and_logged(caplog):
    before = _sample("ledger_hydrate_errors_total", {"reason": "invalid_json"})
    hydrate("{oops")
    assert _sample("ledger_hydrate_errors_total", {"reason": "invalid_json"}) - before == 1.0
    assert any("Discarding malformed ledger blob" in r.message for r in caplog.records)


def test_log_ledger_event_never_throws(caplog):
    caplog.set_level(logging.INFO)
    log_ledger_event("entry_inserted", entry_id=object(), value=1000, total=1000, ts=1, extra={"bad": object()})
    log_ledger_event("entry_inserted", entry_id="ok", value=1000, total=1000, ts=1)
    assert any('"entry_id":"ok"' in r.message for r in caplog.records)
