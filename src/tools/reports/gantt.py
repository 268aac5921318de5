"""Render a schedule as a per-worker timeline chart."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

__all__ = ["render"]

_BAR_HEIGHT = 0.6


def render(report: Mapping[str, Any], out_path: str | Path, *, title: str | None = None) -> Path:
    """Draw every assignment of ``report`` as a bar on its worker's lane.

    Scheduled steps always last at least one time unit; bars are still
    clamped to a thin marker so a zero-length span in a hand-edited report
    stays visible.  The image format follows the suffix of ``out_path``.
    """

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    worker_count = int(report["settings"]["worker_count"])
    elapsed = int(report["elapsed"])
    width = max(6.0, min(24.0, 0.05 * elapsed + 6.0))
    fig, ax = plt.subplots(figsize=(width, 1.0 + 0.6 * worker_count))
    try:
        for item in report["assignments"]:
            lane = int(item["worker"])
            start = int(item["start"])
            span = max(int(item["finish"]) - start, 0.2)
            ax.broken_barh([(start, span)], (lane - _BAR_HEIGHT / 2, _BAR_HEIGHT), edgecolor="k")
            ax.text(start + span / 2, lane, item["task"], ha="center", va="center", fontsize=8)

        ax.set_yticks(range(worker_count))
        ax.set_yticklabels([f"worker {index}" for index in range(worker_count)])
        ax.set_ylim(-0.75, worker_count - 0.25)
        ax.set_xlim(0, max(elapsed, 1))
        ax.invert_yaxis()
        ax.set_xlabel("simulated time")
        ax.set_title(title or f"{report['mode']} schedule: answer {report['answer']}")
        fig.tight_layout()
        fig.savefig(out)
    finally:
        plt.close(fig)
    return out
