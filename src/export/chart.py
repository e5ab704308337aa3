"""
Occupancy trend chart over the history log.

History is stored newest first; the chart plots it oldest first.
"""

from __future__ import annotations

import io
from typing import Any, Dict, List

from matplotlib.figure import Figure

from models.history import HistoryItem

LINE_COLOR = "#2563eb"
AXIS_COLOR = "#94a3b8"
GRID_COLOR = "#f1f5f9"


def chart_series(history: List[HistoryItem]) -> Dict[str, Any]:
    """Chronological labels/counts for a client-side chart."""
    ordered = list(reversed(history))
    return {
        "labels": [item.timestamp for item in ordered],
        "counts": [item.count for item in ordered],
    }


def render_trend_png(history: List[HistoryItem], width_in: float = 8.0, height_in: float = 3.0) -> bytes:
    series = chart_series(history)
    fig = Figure(figsize=(width_in, height_in), dpi=100)
    ax = fig.add_subplot(1, 1, 1)

    # Positional x so two snapshots in the same second stay distinct.
    xs = list(range(len(series["counts"])))
    ax.plot(xs, series["counts"], color=LINE_COLOR, linewidth=3, marker="o", markersize=6)
    ax.set_xticks(xs)
    ax.set_xticklabels(series["labels"], fontsize=9, color=AXIS_COLOR)
    ax.tick_params(axis="y", labelsize=9, colors=AXIS_COLOR)
    ax.grid(axis="y", linestyle="--", color=GRID_COLOR)
    ax.set_ylim(bottom=0)
    for spine in ("top", "right"):
        ax.spines[spine].set_visible(False)
    fig.tight_layout()

    buf = io.BytesIO()
    fig.savefig(buf, format="png")
    return buf.getvalue()
