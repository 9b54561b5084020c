# summary.py
from __future__ import annotations

from typing import Any, Optional

import numpy as np
import pandas as pd

from ..estimators.cs_did import DynamicEffects
from ..helpers.utils import coefficient_table

# ================================
# Formatting helpers
# ================================

def _fmt(x: Optional[float], digits: int = 4) -> str:
    if x is None or (isinstance(x, float) and (np.isnan(x) or np.isinf(x))):
        return "NA"
    return f"{x:.{digits}f}"

def _ci_str(lo: float, hi: float) -> str:
    return f"[{_fmt(lo)}, {_fmt(hi)}]"

def _rule(title: str | None = None) -> None:
    line = "=" * 78
    if title:
        print(f"\n{line}\n{title}\n{line}")
    else:
        print(f"\n{line}")


# ================================
# Print blocks
# ================================

def print_dynamic_effects(result: Optional[DynamicEffects], title: str = "Dynamic effects") -> None:
    """Overall ATT plus the event-time table, in the spirit of R's aggte print."""
    _rule(title)
    if result is None:
        print("(no estimation result)")
        return

    lo, hi = result.overall_ci
    print("Overall summary of ATT's based on event-study/dynamic aggregation:")
    print(f"  ATT = {_fmt(result.overall_att)} | SE = {_fmt(result.overall_se)} | 95% CI {_ci_str(lo, hi)}")
    if result.n_obs is not None:
        print(f"  Observations: {result.n_obs}")

    tbl = coefficient_table(result)
    print("\nDynamic effects (simultaneous 95% band):")
    with pd.option_context("display.max_rows", 100, "display.width", 120):
        print(tbl.to_string(index=False))


def print_panel_block(info: dict) -> None:
    _rule("PANEL")
    print(
        f"Loaded: {info.get('n_loaded', 'NA')} | Dropped (NA): {info.get('n_dropped_na', 'NA')} "
        f"| Final: {info.get('n_final', 'NA')} | Treated rows: {info.get('n_treated_rows', 'NA')}"
    )
    dropped = info.get("dropped_cohorts") or []
    if dropped:
        print(f"Dropped small cohorts: {', '.join(str(c) for c in dropped)}")
    cohorts = info.get("cohorts") or []
    sizes = info.get("cohort_sizes") or {}
    if cohorts:
        print("Cohort sizes (rows):")
        for c in cohorts:
            print(f"  - {c}: {sizes.get(c, 'NA')}")


def print_study_summary(result: Any) -> None:
    """Print a concise textual summary of a :class:`PrizeStudyResult`."""
    print_panel_block(result.panel_info)
    for name, run in result.models.items():
        if run.skipped_reason:
            _rule(f"MODEL {name}")
            print(f"skipped: {run.skipped_reason}")
            continue
        if not run.ok:
            _rule(f"MODEL {name}")
            reason = run.outcome.reason if run.outcome is not None else "not run"
            print(f"estimation failed: {reason}")
            continue
        print_dynamic_effects(run.outcome.result, title=f"MODEL {name} ({run.spec.description})")
        for kind, path in (("coefficients", run.coef_path), ("figure", run.figure_path)):
            if path:
                print(f"{kind}: {path}")
        for msg in run.outcome.warnings:
            print(f"warning: {msg}")
        for stage, err in run.errors.items():
            print(f"{stage} failed: {err}")
