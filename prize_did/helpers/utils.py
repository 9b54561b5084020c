"""General utilities for the prize DiD pipeline.

This module provides helpers shared by the exporter and the plotter:
confidence bounds from a critical value, the per-event-time coefficient
table, the centred moving average used for the trend line and the number
formatting used in figure annotations.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Tuple

import numpy as np
import pandas as pd

COEF_COLUMNS = [
    "Event_Time",
    "Estimate",
    "Std_Error",
    "Crit_Val_95",
    "Lower_CI",
    "Upper_CI",
    "Significant",
]


def confidence_bounds(estimate: Any, se: Any, crit_val: Any) -> Tuple[Any, Any]:
    """Return ``(estimate - crit*se, estimate + crit*se)``.

    Works element-wise on arrays and Series as well as on scalars.
    """
    half = crit_val * se
    return estimate - half, estimate + half


def coefficient_table(result) -> pd.DataFrame:
    """Flat per-event-time table with bounds and a significance flag.

    Parameters
    ----------
    result : DynamicEffects
        Aggregated dynamic effects.

    Returns
    -------
    pandas.DataFrame
        Columns ``Event_Time, Estimate, Std_Error, Crit_Val_95, Lower_CI,
        Upper_CI, Significant``.  ``Significant`` is True iff the band
        excludes zero.
    """
    res_df = pd.DataFrame(
        {
            "Event_Time": np.asarray(result.event_time, dtype=int),
            "Estimate": np.asarray(result.att, dtype=float),
            "Std_Error": np.asarray(result.se, dtype=float),
            "Crit_Val_95": np.asarray(result.crit_val, dtype=float),
        }
    )
    lo, hi = confidence_bounds(res_df["Estimate"], res_df["Std_Error"], res_df["Crit_Val_95"])
    res_df["Lower_CI"] = lo
    res_df["Upper_CI"] = hi
    res_df["Significant"] = (res_df["Lower_CI"] > 0) | (res_df["Upper_CI"] < 0)
    return res_df[COEF_COLUMNS]


def centered_moving_average(values: pd.Series, window: int = 3) -> pd.Series:
    """Centred rolling mean; edge points without a full window stay NaN."""
    if window < 1:
        raise ValueError(f"window must be positive; got {window}.")
    s = pd.Series(values, dtype=float).reset_index(drop=True)
    return s.rolling(window=window, center=True, min_periods=window).mean()


def round_half_up(value: float, digits: int = 2) -> str:
    """Format ``value`` with ``digits`` decimals, rounding halves away from zero.

    The decimal text of the float is rounded, so ``12.345`` gives ``"12.35"``.
    """
    try:
        if value is None or not np.isfinite(value):
            return "NA"
        q = Decimal(1).scaleb(-digits)
        return str(Decimal(repr(float(value))).quantize(q, rounding=ROUND_HALF_UP))
    except (InvalidOperation, TypeError, ValueError):
        return "NA"


__all__ = [
    "COEF_COLUMNS",
    "centered_moving_average",
    "coefficient_table",
    "confidence_bounds",
    "round_half_up",
]
