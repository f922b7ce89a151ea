"""
Serialization of the ledger blob.

The persisted blob is a JSON list of records
`{id, value, timestamp, cumulativeAtPoint}`. Parsing is fallible and returns a
`ParseResult` instead of raising, so the "start empty on bad data" rule is
visible at the call site: the store collapses a failed result to an empty
ledger.

Sanitization applied per record:
- non-object items are skipped;
- `id` becomes `str(id)` when present and truthy, otherwise a fresh id;
  duplicate ids after coercion are replaced with fresh ones;
- `value` must coerce to a finite float, else the record is skipped
  (it would corrupt the live total); integers too large for a float count
  as unusable in any numeric field;
- missing `timestamp` becomes 0, missing `cumulativeAtPoint` becomes `value`.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Set

from .model import Entry, Number, new_id


@dataclass
class ParseResult:
    entries: List[Entry] = field(default_factory=list)
    error: Optional[str] = None
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _coerce_number(raw: Any) -> Optional[Number]:
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        num = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(num):
        return None
    return int(num) if num.is_integer() else num


def _coerce_timestamp(raw: Any) -> int:
    num = _coerce_number(raw)
    return int(num) if num is not None else 0


def parse_blob(raw: Any, id_factory: Callable[[], str] = new_id) -> ParseResult:
    """Parse a persisted blob (JSON text, bytes, or a decoded list)."""
    if raw is None:
        return ParseResult()
    data = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            data = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            return ParseResult(error=f"invalid_encoding: {e}")
    if isinstance(data, str):
        if not data.strip():
            return ParseResult()
        try:
            data = json.loads(data)
        except (ValueError, RecursionError) as e:
            return ParseResult(error=f"invalid_json: {e}")
    if not isinstance(data, list):
        return ParseResult(error=f"not_a_list: {type(data).__name__}")

    entries: List[Entry] = []
    seen: Set[str] = set()
    skipped = 0
    for item in data:
        if not isinstance(item, dict):
            skipped += 1
            continue
        value = _coerce_number(item.get("value"))
        if value is None:
            skipped += 1
            continue
        raw_id = item.get("id")
        entry_id = str(raw_id) if raw_id else id_factory()
        while entry_id in seen:
            entry_id = id_factory()
        seen.add(entry_id)
        snapshot = _coerce_number(item.get("cumulativeAtPoint", item.get("cumulative_at_point")))
        entries.append(
            Entry(
                id=entry_id,
                value=value,
                timestamp=_coerce_timestamp(item.get("timestamp")),
                cumulative_at_point=snapshot if snapshot is not None else value,
            )
        )
    return ParseResult(entries=entries, skipped=skipped)


def dump_blob(entries: Sequence[Entry]) -> str:
    return json.dumps([e.to_record() for e in entries], ensure_ascii=False, separators=(",", ":"))
