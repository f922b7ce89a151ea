from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional


def log_ledger_event(
    event_type: str,
    entry_id: Optional[str] = None,
    value: Optional[float] = None,
    total: Optional[float] = None,
    ts: Optional[int] = None,
    severity: str = "INFO",
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Emit a structured JSON log line for a ledger mutation.

    Keys: event, entry_id, value, total, ts, severity, component, schema_version
    """
    try:
        logger = logging.getLogger("sunmeadow.ledger")
        payload: Dict[str, Any] = {
            "event": str(event_type),
            "entry_id": str(entry_id) if entry_id is not None else None,
            "value": value,
            "total": total,
            "ts": int(ts if ts is not None else int(time.time() * 1000)),
            "severity": severity,
            "component": "ledger",
            "schema_version": "v1",
        }
        if extra:
            payload["extra"] = extra
        level = logging.WARNING if severity == "WARNING" else logging.INFO
        logger.log(level, json.dumps(payload, separators=(",", ":"), ensure_ascii=False))
    except Exception:
        # Logging must never throw
        pass
