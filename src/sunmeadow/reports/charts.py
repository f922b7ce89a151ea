"""
Chart utilities for the meadow report.

- `save_cumulative_png`: area chart of the running total over time.
- `save_meadow_png`: the flower field, drawn back-to-front in layout order
  with marker size following each flower's scale.
Saves PNGs to a destination path (ensures parent directories exist).
"""

from __future__ import annotations

import os

import numpy as np
import pandas as pd
import matplotlib

# Use a non-interactive backend for headless environments
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import matplotlib.dates as mdates  # noqa: E402
import matplotlib.ticker as mticker  # noqa: E402

from ..layout.generator import MeadowLayout  # noqa: E402

FLOWER_BASE_SIZE = 220.0


def _ensure_parent(out_path: str) -> None:
    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def save_cumulative_png(series: pd.DataFrame, out_path: str) -> str:
    """Render the running total (from `cumulative_series`) and save as PNG.

    Returns the absolute path to the saved file.
    """
    if series.empty:
        raise ValueError("No entries provided for charting")

    _ensure_parent(out_path)
    times = mdates.date2num(series["time"].dt.tz_localize(None).to_numpy())
    totals = series["total"].astype(float).to_numpy()

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.set_title("Cumulative total")
    ax.plot(times, totals, color="#6366f1", linewidth=2.0)
    ax.fill_between(times, totals, 0, color="#6366f1", alpha=0.2)
    ax.xaxis_date()
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M\n%m-%d"))
    ax.yaxis.set_major_formatter(
        mticker.FuncFormatter(lambda v, _pos: f"{v / 1000:.1f}k" if v >= 1000 else f"{v:g}")
    )
    ax.grid(True, linestyle=":", alpha=0.5)

    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return os.path.abspath(out_path)


def save_meadow_png(layout: MeadowLayout, out_path: str) -> str:
    """Render the meadow layout and save as PNG.

    Flowers are scattered in layout order (ascending depth), so nearer
    flowers are painted over farther ones.
    """
    _ensure_parent(out_path)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.set_xlim(0, 100)
    # y is measured from the top of the field
    ax.set_ylim(100, 0)
    ax.axis("off")
    ax.axhspan(0, 100, color="#34d399", zorder=0)

    if layout.display_count == 0:
        ax.text(50, 50, "No seeds sown yet: one flower blooms per 1000",
                ha="center", va="center", color="#064e3b", fontsize=12)
    else:
        xs = np.array([f.x for f in layout.flowers])
        ys = np.array([f.y for f in layout.flowers])
        sizes = FLOWER_BASE_SIZE * np.square([f.scale for f in layout.flowers])
        ax.scatter(xs, ys, s=sizes, marker=(12, 1, 0), c="#facc15",
                   edgecolors="#78350f", linewidths=0.6, zorder=2)

    if layout.overflow > 0:
        ax.text(98, 97, f"+{layout.overflow:,} more not shown (display cap {layout.cap:,})",
                ha="right", va="bottom", fontsize=9, color="white",
                bbox={"facecolor": "black", "alpha": 0.6, "boxstyle": "round"}, zorder=3)

    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return os.path.abspath(out_path)
