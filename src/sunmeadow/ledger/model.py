from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union
import uuid

Number = Union[int, float]

# Every entry value is expected to be a multiple of this unit.
UNIT = 1000
HISTORY_LIMIT = 50
STORAGE_KEY = "accumulate_pro_data"


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Entry:
    """One immutable ledger record.

    Attributes:
        id: Opaque unique identifier, generated at creation and never reused.
        value: Signed amount (deposit > 0, withdrawal < 0), a multiple of UNIT.
        timestamp: Creation instant in epoch milliseconds. Used for ordering
            and display only, never for identity.
        cumulative_at_point: Total immediately after this entry was inserted.
            A historical snapshot: it is never recomputed and goes stale when
            other entries are deleted. The live total is always the sum of
            `value` over the entries currently present.
    """

    id: str
    value: Number
    timestamp: int
    cumulative_at_point: Number

    def to_record(self) -> Dict[str, Any]:
        # camelCase keys keep blobs written by earlier releases readable
        return {
            "id": self.id,
            "value": self.value,
            "timestamp": self.timestamp,
            "cumulativeAtPoint": self.cumulative_at_point,
        }
