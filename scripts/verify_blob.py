#!/usr/bin/env python3
"""
Check that the persisted ledger blob loads cleanly.

Reads the configured slot from the SQLite blob store (or a JSON file given
on the command line) and reports whether it parses, how many records would
be skipped, and the live total it yields.

Usage:
  python3 scripts/verify_blob.py [blob.json]

Exit codes:
  0 = OK
  1 = Failure (blob unreadable or records dropped; prints JSON report)
"""

import json
import sys
from typing import Any, Dict, Optional

from sunmeadow.config.loader import load_settings
from sunmeadow.ledger.codec import parse_blob
from sunmeadow.storage.blob import BlobReadError, SQLiteBlobStore


def check_blob(raw: Optional[str]) -> Dict[str, Any]:
    result = parse_blob(raw)
    ids = [e.id for e in result.entries]
    status = 'ok' if result.ok and not result.skipped else 'failed'
    return {
        'status': status,
        'error': result.error,
        'entries': len(result.entries),
        'skipped': result.skipped,
        'unique_ids': len(set(ids)) == len(ids),
        'total': sum(e.value for e in result.entries),
    }


def main() -> int:
    if len(sys.argv) > 1:
        with open(sys.argv[1], 'r', encoding='utf-8') as f:
            raw = f.read()
    else:
        settings = load_settings()
        try:
            raw = SQLiteBlobStore(settings.storage.path, quota_bytes=None).get(settings.storage.key)
        except BlobReadError as e:
            print(json.dumps({'status': 'failed', 'error': str(e)}, indent=2))
            return 1

    report = check_blob(raw)
    print(json.dumps(report, indent=2))

    return 0 if report['status'] == 'ok' else 1


if __name__ == '__main__':
    raise SystemExit(main())
