from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import os
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from ..estimators.cs_did import DynamicEffects
from ..helpers.utils import centered_moving_average, confidence_bounds, round_half_up


# ================================
# Theme + Figure Finalizer
# ================================

@dataclass
class PlotTheme:
    """Global plotting theme used by FigFinalizer.
    Keep all aesthetic knobs here so the drawing function deals ONLY
    with the artists and not with styling.
    """
    figsize: Tuple[float, float] = (14.0, 10.0)
    dpi: int = 1000

    # Fonts / sizing
    title_size: int = 24
    label_size: int = 20
    tick_size: int = 18
    legend_size: int = 18
    annotation_size: int = 20
    tick_rotation: int = 45

    # X ticks every `xtick_step` years, anchored at `xtick_origin`
    xtick_origin: int = -15
    xtick_step: int = 2

    # Reference lines
    ref_line_color: str = "0.5"
    ref_line_style: str = "--"
    ref_line_width: float = 0.8

    # Colors
    band_color: str = "#B0E0E6"
    band_alpha: float = 0.3
    ma_color: str = "#DC143C"
    ma_width: float = 3.0
    point_color: str = "navy"
    point_size: float = 120.0
    reference_color: str = "red"
    annotation_color: str = "0.3"


class FigFinalizer:
    """Centralizes figure creation, axis styling and saving."""

    def __init__(self, theme: Optional[PlotTheme] = None) -> None:
        self.theme = theme or PlotTheme()

    def new_figure(self) -> Tuple[plt.Figure, plt.Axes]:
        fig, ax = plt.subplots(figsize=self.theme.figsize)
        return fig, ax

    def style_axes(
        self,
        ax: plt.Axes,
        *,
        title: Optional[str],
        xlabel: Optional[str],
        ylabel: Optional[str],
        xlim: Optional[Tuple[float, float]] = None,
    ) -> None:
        t = self.theme
        if title is not None:
            ax.set_title(title, fontsize=t.title_size, fontweight="bold")
        if xlabel is not None:
            ax.set_xlabel(xlabel, fontsize=t.label_size)
        if ylabel is not None:
            ax.set_ylabel(ylabel, fontsize=t.label_size)

        if xlim is not None:
            lo, hi = xlim
            start = t.xtick_origin + int(np.ceil((lo - t.xtick_origin) / t.xtick_step)) * t.xtick_step
            ax.set_xticks(np.arange(start, hi + 1, t.xtick_step))

        ax.grid(True, which="major", alpha=0.3)
        ax.minorticks_off()
        for tick in ax.get_xticklabels():
            tick.set_fontsize(t.tick_size)
            tick.set_rotation(t.tick_rotation)
            tick.set_horizontalalignment("right")
        for tick in ax.get_yticklabels():
            tick.set_fontsize(t.tick_size)
        for spine in ax.spines.values():
            spine.set_edgecolor("black")
            spine.set_linewidth(1.0)

    def finalize(self, fig: plt.Figure, save: Optional[str] = None) -> plt.Figure:
        fig.tight_layout()
        if save:
            parent = os.path.dirname(save)
            if parent:
                os.makedirs(parent, exist_ok=True)
            fig.savefig(save, dpi=self.theme.dpi)
        return fig


# ================================
# Plot data
# ================================

def build_plot_frame(
    result: DynamicEffects,
    window: Tuple[int, int] = (-10, 15),
    reference_period: int = -1,
    ma_window: int = 3,
) -> pd.DataFrame:
    """Per-event-time frame used by :func:`plot_cs_event_study`.

    The reference period is pinned to zero (estimate, SE and bounds),
    replacing any estimate the backend returned for it.  Rows outside
    ``window`` are dropped before the centred moving average ``ma`` is
    computed, so the smoothing never sees them.
    """
    res_df = result.to_frame().rename(columns={"att": "coef"})
    res_df["lower_ci"], res_df["upper_ci"] = confidence_bounds(
        res_df["coef"], res_df["se"], res_df["crit_val"]
    )
    res_df["is_reference"] = False

    ref_row = pd.DataFrame(
        {
            "event_time": [int(reference_period)],
            "coef": [0.0],
            "se": [0.0],
            "crit_val": [0.0],
            "lower_ci": [0.0],
            "upper_ci": [0.0],
            "is_reference": [True],
        }
    )
    res_df = res_df[res_df["event_time"] != reference_period]
    plot_df = pd.concat([res_df, ref_row], ignore_index=True)
    plot_df["event_time"] = plot_df["event_time"].astype(int)
    plot_df["is_reference"] = plot_df["is_reference"].astype(bool)
    plot_df = plot_df.sort_values("event_time", kind="mergesort")

    lo, hi = window
    plot_df = plot_df[(plot_df["event_time"] >= lo) & (plot_df["event_time"] <= hi)]
    plot_df = plot_df.reset_index(drop=True)

    # the zero reference point pulls the trend toward 0 around it
    plot_df["ma"] = centered_moving_average(plot_df["coef"], ma_window)
    return plot_df


def annotation_text(model_desc: str, overall_att: float, reference_period: int = -1) -> str:
    return (
        f"{model_desc}\nReference period: {reference_period}"
        f"\nOverall ATT: {round_half_up(overall_att, 2)}"
    )


def _draw(
    ax: plt.Axes,
    plot_df: pd.DataFrame,
    t: PlotTheme,
    reference_period: int,
    full_desc: str,
) -> None:
    x = plot_df["event_time"].astype(float).values

    # 95% band
    ax.fill_between(
        x, plot_df["lower_ci"].values, plot_df["upper_ci"].values,
        color=t.band_color, alpha=t.band_alpha, linewidth=0, zorder=1,
    )
    # zero and reference lines sit above the band
    ax.axhline(0.0, color=t.ref_line_color, linestyle=t.ref_line_style,
               linewidth=t.ref_line_width, zorder=2)
    ax.axvline(float(reference_period), color=t.ref_line_color, linestyle=t.ref_line_style,
               linewidth=t.ref_line_width, zorder=2)
    # moving average
    ax.plot(x, plot_df["ma"].values, color=t.ma_color, linewidth=t.ma_width, zorder=3)
    # point estimates
    est = plot_df[~plot_df["is_reference"]]
    ax.scatter(
        est["event_time"].values, est["coef"].values,
        s=t.point_size, color=t.point_color, edgecolors="white", linewidths=1.2, zorder=4,
    )
    # reference point
    ref = plot_df[plot_df["is_reference"]]
    ax.scatter(
        ref["event_time"].values, ref["coef"].values,
        s=t.point_size, marker="D", color=t.reference_color, edgecolors="black",
        linewidths=1.0, zorder=5,
    )

    handles = [
        Patch(facecolor=t.band_color, alpha=t.band_alpha, label="95% CI"),
        Line2D([0], [0], color=t.ma_color, linewidth=t.ma_width, label="3-Period Moving Average"),
        Line2D([0], [0], marker="o", linestyle="none", markerfacecolor=t.point_color,
               markeredgecolor="white", markersize=11, label="Point Estimates"),
        Line2D([0], [0], marker="D", linestyle="none", markerfacecolor=t.reference_color,
               markeredgecolor="black", markersize=10, label="Reference Point (CI=0)"),
    ]
    ax.legend(handles=handles, loc="upper right", fontsize=t.legend_size, frameon=False)

    ax.text(
        0.98, 0.02, full_desc, transform=ax.transAxes,
        ha="right", va="bottom", fontsize=t.annotation_size, color=t.annotation_color,
        bbox=dict(boxstyle="round,pad=0.5", facecolor="white", alpha=0.6, edgecolor="0.6"),
    )


# ================================
# Event-study figure
# ================================

def plot_cs_event_study(
    result: Optional[DynamicEffects],
    title_text: str,
    model_desc: str,
    output_filename: Optional[str],
    *,
    theme: Optional[PlotTheme] = None,
    window: Tuple[int, int] = (-10, 15),
    reference_period: int = -1,
    ma_window: int = 3,
    xlabel: str = "Years Relative to Award",
    ylabel: str = "Estimated Effect (Days)",
    close: bool = True,
) -> Optional[Tuple[plt.Figure, plt.Axes, Dict[str, Any]]]:
    """CS-DID event-study chart: CI band, MA(3) trend, points and reference.

    Returns ``(fig, ax, info)`` with the plotted frame and annotation text in
    ``info``, or None (no I/O at all) when ``result`` is None.
    """
    if result is None:
        print("[plot] !!! Skipping plot generation (no estimation result).")
        return None

    fin = FigFinalizer(theme)
    t = fin.theme
    plot_df = build_plot_frame(result, window, reference_period, ma_window)
    full_desc = annotation_text(model_desc, result.overall_att, reference_period)

    fig, ax = fin.new_figure()
    try:
        _draw(ax, plot_df, t, reference_period, full_desc)
        fin.style_axes(ax, title=title_text, xlabel=xlabel, ylabel=ylabel, xlim=window)
        fin.finalize(fig, save=output_filename)
    finally:
        if close:
            plt.close(fig)
    if output_filename:
        print(f"[plot] Plot saved to: {output_filename}")

    info = {"plot_df": plot_df, "annotation": full_desc, "path": output_filename}
    return fig, ax, info
