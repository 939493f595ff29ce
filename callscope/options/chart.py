"""Per-expiration chain charts — option value bars + underlying target lines."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from callscope.options.models import ChainResult, ValuedContract

logger = logging.getLogger(__name__)

# ── Palette (dark) ──────────────────────────────────────────────────────────
BG = "#0a1222"
GRID = "#1f2b3a"
TEXT = "#c5cee3"
TEXT_DIM = "#7e8ca5"
INTRINSIC = "#5ec2a2"
EXTRINSIC = "#5b8ef0"
BREAK_EVEN = "#f0c36d"
TARGET_2X = "#f88379"
TARGET_3X = "#c084fc"
SPOT = "#ffffff"


def _safe_name(s: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", s)


def render_expiry_chart(
    options: Sequence[ValuedContract],
    *,
    expiration: str,
    underlying_price: float | None,
    output_path: Path,
    ticker: str = "",
) -> Path | None:
    """
    Draw one expiration: stacked intrinsic/extrinsic bars per strike (left axis)
    with break-even, 2x and 3x target lines (right axis) and a dashed spot line.

    Returns the written path, or None when there is nothing to plot.
    """
    rows = sorted(options, key=lambda o: o.strike)
    if not rows:
        return None

    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import matplotlib.ticker as mticker

    strikes = [o.strike for o in rows]
    # Bar width from the tightest strike spacing so adjacent bars don't overlap.
    gaps = [b - a for a, b in zip(strikes, strikes[1:]) if b > a]
    width = (min(gaps) if gaps else max(strikes[0] * 0.02, 0.5)) * 0.8

    fig, ax = plt.subplots(figsize=(12, 6), facecolor=BG)
    ax.set_facecolor(BG)
    ax_r = ax.twinx()

    ax.bar(strikes, [o.intrinsic for o in rows], width=width, color=INTRINSIC, label="Intrinsic", zorder=3)
    ax.bar(
        strikes,
        [o.extrinsic for o in rows],
        width=width,
        bottom=[o.intrinsic for o in rows],
        color=EXTRINSIC,
        label="Extrinsic",
        zorder=3,
    )
    ax_r.plot(strikes, [o.break_even for o in rows], color=BREAK_EVEN, marker="o", markersize=3, label="Break-even")
    ax_r.plot(strikes, [o.target2x for o in rows], color=TARGET_2X, label="2× target")
    ax_r.plot(strikes, [o.target3x for o in rows], color=TARGET_3X, label="3× target")

    if underlying_price is not None:
        ax.axvline(underlying_price, color=SPOT, linestyle="--", linewidth=1, zorder=4)
        ax.annotate(
            f"Spot ${underlying_price:,.2f}",
            xy=(underlying_price, 1.0),
            xycoords=("data", "axes fraction"),
            color=SPOT,
            fontsize=9,
            ha="center",
            va="bottom",
        )

    dollars = mticker.FuncFormatter(lambda v, _: f"${v:,.0f}")
    for a in (ax, ax_r):
        a.tick_params(colors=TEXT, labelsize=9)
        a.yaxis.set_major_formatter(dollars)
        for spine in a.spines.values():
            spine.set_color(GRID)
    ax.xaxis.set_major_formatter(dollars)
    ax.grid(True, color=GRID, linestyle=(0, (3, 3)), linewidth=0.6, zorder=0)
    ax.set_xlabel("Strike", color=TEXT)
    ax.set_ylabel("Option $/share", color=TEXT)
    ax_r.set_ylabel("Underlying $", color=TEXT)
    ax.set_title(f"{ticker} calls · expiry {expiration}".strip(), color=TEXT, loc="left", fontsize=12)

    handles, labels = [], []
    for a in (ax, ax_r):
        h, lab = a.get_legend_handles_labels()
        handles += h
        labels += lab
    legend = ax.legend(handles, labels, loc="upper left", fontsize=8, frameon=False)
    for t in legend.get_texts():
        t.set_color(TEXT)

    fig.text(
        0.01, 0.01,
        "Bars = option value now (intrinsic + extrinsic). Lines = underlying price levels at expiry.",
        fontsize=8, color=TEXT_DIM,
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150, facecolor=BG, edgecolor="none", bbox_inches="tight", pad_inches=0.15)
    plt.close(fig)
    return output_path


def render_chain_charts(result: ChainResult, output_dir: Path) -> list[Path]:
    """One PNG per selected expiration that has at least one valued contract."""
    written: list[Path] = []
    for expiration, rows in result.by_expiration().items():
        path = output_dir / f"{_safe_name(result.ticker)}_{_safe_name(expiration)}.png"
        out = render_expiry_chart(
            rows,
            expiration=expiration,
            underlying_price=result.underlying_price,
            output_path=path,
            ticker=result.ticker,
        )
        if out is None:
            logger.debug("No options to chart for %s %s", result.ticker, expiration)
            continue
        written.append(out)
    return written
