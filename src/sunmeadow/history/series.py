"""
Tabular views over ledger entries.

- `entries_frame`: one row per entry, insertion order.
- `cumulative_series`: entries sorted by timestamp ascending with a running
  `total` column recomputed from values (snapshots are ignored, they may be
  stale after deletions).
- `export_parquet`: write the entries table for offline analysis.
"""

from __future__ import annotations

import os
from typing import Iterable

import pandas as pd

from ..ledger.model import Entry

COLUMNS = ["id", "value", "timestamp", "cumulative_at_point"]


def entries_frame(entries: Iterable[Entry]) -> pd.DataFrame:
    rows = [e.__dict__ for e in entries]
    return pd.DataFrame(rows, columns=COLUMNS)


def cumulative_series(entries: Iterable[Entry]) -> pd.DataFrame:
    df = entries_frame(entries)
    # Stable sort keeps insertion order among equal timestamps
    df = df.sort_values("timestamp", kind="mergesort").reset_index(drop=True)
    df["total"] = df["value"].cumsum()
    df["time"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
    return df[["timestamp", "time", "value", "total"]]


def export_parquet(entries: Iterable[Entry], path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    entries_frame(entries).to_parquet(path)
    return os.path.abspath(path)
