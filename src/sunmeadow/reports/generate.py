"""
Generate a static HTML meadow report: live total, history, cumulative chart
and the flower field.

Usage (venv):
  sunmeadow report --out reports
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config.loader import Settings
from ..history.series import cumulative_series
from ..layout.generator import generate_layout
from ..ledger.store import LedgerStore
from ..metrics.ledger import set_meadow_counts
from .charts import save_cumulative_png, save_meadow_png


def _template_env(template_dir: str) -> Environment:
    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(["html", "xml"]),
    )


def _history_rows(store: LedgerStore, limit: int) -> List[Dict[str, Any]]:
    rows = []
    for e in store.ordered_view(limit):
        rows.append({
            "id": e.id,
            "when": datetime.fromtimestamp(e.timestamp / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            "value": e.value,
            "direction": "up" if e.value > 0 else ("down" if e.value < 0 else ""),
        })
    return rows


def render_report(store: LedgerStore, settings: Settings, out_dir: str = "reports") -> str:
    """Write `index.html` plus chart images under `out_dir`; return the HTML path."""
    img_dir = os.path.join(out_dir, "images")
    os.makedirs(img_dir, exist_ok=True)

    layout = generate_layout(store.element_count(), cap=settings.meadow.cap)
    set_meadow_counts(layout.element_count, layout.display_count)
    meadow_png = save_meadow_png(layout, os.path.join(img_dir, "meadow.png"))

    chart = None
    series = cumulative_series(store.entries())
    if not series.empty:
        chart_png = save_cumulative_png(series, os.path.join(img_dir, "cumulative.png"))
        chart = os.path.relpath(chart_png, start=out_dir)

    template_dir = os.path.join(os.path.dirname(__file__), "templates")
    env = _template_env(template_dir)
    tpl = env.get_template("report.html.j2")
    html = tpl.render(
        generated_at=datetime.now(timezone.utc).isoformat(),
        total=store.live_total(),
        entry_count=len(store),
        unit=settings.ledger.unit,
        history=_history_rows(store, settings.ledger.history_limit),
        history_limit=settings.ledger.history_limit,
        layout=layout,
        meadow_image=os.path.relpath(meadow_png, start=out_dir),
        chart_image=chart,
    )

    out_html = os.path.join(out_dir, "index.html")
    with open(out_html, "w", encoding="utf-8") as f:
        f.write(html)
    return out_html
