import pandas as pd

from sunmeadow.history.series import cumulative_series, entries_frame, export_parquet
from sunmeadow.ledger.model import Entry


def _entries():
    return [
        Entry(id="c", value=2000, timestamp=3_000, cumulative_at_point=2500),
        Entry(id="a", value=1000, timestamp=1_000, cumulative_at_point=1000),
        Entry(id="b", value=-500, timestamp=1_000, cumulative_at_point=500),
    ]


def test_cumulative_series_sorted_with_running_total():
    s = cumulative_series(_entries())
    assert list(s["timestamp"]) == [1_000, 1_000, 3_000]
    # equal timestamps keep insertion order
    assert list(s["value"]) == [1000, -500, 2000]
    assert list(s["total"]) == [1000, 500, 2500]
    assert str(s["time"].dt.tz) == "UTC"


def test_cumulative_series_ignores_stale_snapshots():
    entries = [
        Entry(id="a", value=1000, timestamp=1, cumulative_at_point=9_999),
        Entry(id="b", value=3000, timestamp=2, cumulative_at_point=1),
    ]
    assert list(cumulative_series(entries)["total"]) == [1000, 4000]


def test_empty_series():
    s = cumulative_series([])
    assert s.empty
    assert list(s.columns) == ["timestamp", "time", "value", "total"]


def test_export_parquet(tmp_path):
    path = export_parquet(_entries(), str(tmp_path / "out" / "entries.parquet"))
    df = pd.read_parquet(path)
    assert list(df["id"]) == ["c", "a", "b"]
    assert df["value"].sum() == 2500
    assert entries_frame(_entries()).shape == (3, 4)
