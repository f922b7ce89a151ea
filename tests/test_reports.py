import os

import pytest

from sunmeadow.config.loader import MeadowConfig, Settings
from sunmeadow.history.series import cumulative_series
from sunmeadow.layout.generator import generate_layout
from sunmeadow.ledger.store import LedgerStore
from sunmeadow.reports.charts import save_cumulative_png, save_meadow_png
from sunmeadow.reports.generate import render_report


def test_report_with_entries_and_overflow(tmp_path):
    store = LedgerStore()
    store.insert(5000)
    store.insert(-1000)
    store.insert(4000)
    out = str(tmp_path / "report")
    html_path = render_report(store, Settings(meadow=MeadowConfig(cap=5)), out)
    html = open(html_path, encoding="utf-8").read()
    assert "8,000" in html
    assert "Meadow: 8 sunflowers" in html
    assert "3 more flowers are hidden by the display cap" in html
    assert os.path.exists(os.path.join(out, "images", "meadow.png"))
    assert os.path.exists(os.path.join(out, "images", "cumulative.png"))
    assert html.index("4,000") < html.index("-1,000")


def test_report_empty_ledger(tmp_path):
    out = str(tmp_path / "empty")
    html = open(render_report(LedgerStore(), Settings(), out), encoding="utf-8").read()
    assert "No seeds sown yet" in html
    assert "No entries yet." in html
    assert "more flowers are hidden" not in html
    assert not os.path.exists(os.path.join(out, "images", "cumulative.png"))


def test_charts_write_png(tmp_path):
    store = LedgerStore()
    store.insert(2000)
    p1 = save_meadow_png(generate_layout(1500), str(tmp_path / "m.png"))
    p2 = save_cumulative_png(cumulative_series(store.entries()), str(tmp_path / "c.png"))
    for p in (p1, p2):
        with open(p, "rb") as f:
            assert f.read(8) == b"\x89PNG\r\n\x1a\n"


def test_cumulative_chart_requires_data(tmp_path):
    with pytest.raises(ValueError):
        save_cumulative_png(cumulative_series([]), str(tmp_path / "x.png"))
