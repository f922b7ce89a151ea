"""
Main entrypoint for sunmeadow.

What it does:
- Loads settings from `config/config.yaml` and environment variables.
- Opens the configured blob store and hydrates the ledger from it.
- Runs one command against the ledger and exits.

Usage:
    sunmeadow add VALUE
    sunmeadow show [--limit N]
    sunmeadow meadow [--json]
    sunmeadow delete ENTRY_ID --secret SECRET
    sunmeadow clear --secret SECRET --yes
    sunmeadow export PATH
    sunmeadow report [--out DIR]

Environment Variables:
    SUNMEADOW_ADMIN_SECRET: Shared secret guarding delete/clear
    SUNMEADOW_STORAGE_BACKEND: sqlite (default) or memory
    SUNMEADOW_STORAGE_PATH: SQLite file holding the ledger blob
    PROMETHEUS_PORT: Metrics port for long-running commands
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from sunmeadow.auth.admin import AdminGate
from sunmeadow.config.loader import DEFAULT_CONFIG_PATH, Settings, load_settings
from sunmeadow.history.series import export_parquet
from sunmeadow.input.validator import EntryValidationError, validate_entry_input
from sunmeadow.layout.generator import generate_layout
from sunmeadow.ledger.store import LedgerStore
from sunmeadow.metrics.ledger import set_meadow_counts
from sunmeadow.storage.blob import build_blob_store


def open_store(settings: Settings) -> LedgerStore:
    blob_store = build_blob_store(
        settings.storage.backend, settings.storage.path, settings.storage.quota_bytes
    )
    return LedgerStore.load(blob_store, key=settings.storage.key, unit=settings.ledger.unit)


def _admin_ok(settings: Settings, secret: str) -> bool:
    try:
        gate = AdminGate(settings.admin_secret)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return False
    if not gate.login(secret):
        print("error: wrong admin secret", file=sys.stderr)
        return False
    return True


def _warn_flush(store: LedgerStore) -> None:
    if store.last_flush_error:
        print(f"warning: change kept in memory but not saved: {store.last_flush_error}", file=sys.stderr)


def cmd_add(store: LedgerStore, settings: Settings, args) -> int:
    try:
        value = validate_entry_input(args.value, unit=settings.ledger.unit)
    except EntryValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    entry = store.insert(value)
    _warn_flush(store)
    print(f"added {entry.id} value={entry.value:,} total={store.live_total():,}")
    return 0


def cmd_show(store: LedgerStore, settings: Settings, args) -> int:
    limit = args.limit if args.limit is not None else settings.ledger.history_limit
    print(f"total: {store.live_total():,} ({len(store)} entries)")
    for e in store.ordered_view(limit):
        when = datetime.fromtimestamp(e.timestamp / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        print(f"{when}  {e.value:>12,}  {e.id}")
    return 0


def cmd_meadow(store: LedgerStore, settings: Settings, args) -> int:
    layout = generate_layout(store.element_count(), cap=settings.meadow.cap)
    set_meadow_counts(layout.element_count, layout.display_count)
    if args.json:
        print(json.dumps(layout.to_dict(), separators=(",", ":")))
        return 0
    print(f"flowers: {layout.element_count:,} (showing {layout.display_count:,})")
    if layout.overflow:
        print(f"{layout.overflow:,} more hidden by the display cap")
    return 0


def cmd_delete(store: LedgerStore, settings: Settings, args) -> int:
    if not _admin_ok(settings, args.secret):
        return 3
    removed = store.delete_by_id(args.entry_id)
    _warn_flush(store)
    print(f"deleted {args.entry_id}" if removed else f"no entry with id {args.entry_id}")
    return 0


def cmd_clear(store: LedgerStore, settings: Settings, args) -> int:
    if not _admin_ok(settings, args.secret):
        return 3
    if not args.yes:
        print("refusing to delete all entries without --yes (this cannot be undone)", file=sys.stderr)
        return 1
    store.clear_all()
    _warn_flush(store)
    print("cleared all entries")
    return 0


def cmd_export(store: LedgerStore, settings: Settings, args) -> int:
    print(f"wrote {export_parquet(store.entries(), args.path)}")
    return 0


def cmd_report(store: LedgerStore, settings: Settings, args) -> int:
    # matplotlib/jinja2 are only needed here
    from sunmeadow.reports.generate import render_report

    print(f"Report written to: {render_report(store, settings, args.out)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sunmeadow", description="Ledger-driven sunflower meadow")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML config path")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add an entry (multiple of the unit, may be negative)")
    p.add_argument("value")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("show", help="Show total and newest entries")
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("meadow", help="Show the flower count, or the full layout as JSON")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_meadow)

    p = sub.add_parser("delete", help="Delete one entry (admin)")
    p.add_argument("entry_id")
    p.add_argument("--secret", required=True)
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("clear", help="Delete every entry (admin)")
    p.add_argument("--secret", required=True)
    p.add_argument("--yes", action="store_true", help="Confirm the irreversible clear")
    p.set_defaults(func=cmd_clear)

    p = sub.add_parser("export", help="Write entries to a parquet file")
    p.add_argument("path")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("report", help="Render the HTML meadow report")
    p.add_argument("--out", default="reports")
    p.set_defaults(func=cmd_report)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    store = open_store(settings)
    return args.func(store, settings, args)


if __name__ == "__main__":
    sys.exit(main())
