# prize_did/estimators/r_interface.py
from __future__ import annotations
from typing import Any, Optional

import numpy as np
import pandas as pd
from scipy.stats import norm

from .cs_did import AttGtRequest, CsDidBackend, DynamicEffects


def _load_rpy2():
    """Import rpy2 lazily so the package can be imported without R installed."""

    import rpy2.robjects as ro
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter
    from rpy2.robjects.packages import importr

    return ro, pandas2ri, localconverter, importr


# ---------------------------------------------------------------------
# Small utilities
# ---------------------------------------------------------------------

def set_r_seeds(seed: Optional[int]) -> None:
    """Set the base R seed (the `did` multiplier bootstrap draws from it)."""
    if seed is None:
        return
    ro, _, _, _ = _load_rpy2()
    ro.r(f"set.seed({int(seed)})")


def _rx2_or_none(obj: Any, name: str) -> Any:
    """Return list element ``name`` of an R list, or None if absent/NULL."""
    ro, _, _, _ = _load_rpy2()
    try:
        names = list(obj.names)
    except Exception:
        return None
    if name not in names:
        return None
    val = obj.rx2(name)
    if val is ro.NULL:
        return None
    return val


def _as_array(obj: Any, name: str) -> np.ndarray:
    val = _rx2_or_none(obj, name)
    if val is None:
        return np.array([], dtype=float)
    return np.asarray(list(val), dtype=float)


def _as_scalar(obj: Any, name: str) -> float:
    arr = _as_array(obj, name)
    return float(arr[0]) if arr.size else float("nan")


def _r_panel(data: pd.DataFrame, request: AttGtRequest):
    """Numeric sub-frame converted to an R data.frame."""
    ro, pandas2ri, localconverter, _ = _load_rpy2()
    sub = data.loc[:, list(request.columns)].copy()
    for c in sub.columns:
        if not np.issubdtype(sub[c].dtype, np.number):
            sub[c] = pd.to_numeric(sub[c], errors="coerce")
    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.py2rpy(sub.reset_index(drop=True))


# ---------------------------------------------------------------------
# did::att_gt + did::aggte
# ---------------------------------------------------------------------

class RDidBackend(CsDidBackend):
    """Callaway & Sant'Anna via the R package ``did`` (through rpy2).

    Calls::

        att_gt(yname, tname, idname, gname, xformla, data,
               control_group, clustervars, allow_unbalanced_panel,
               est_method, base_period, bstrap, biters, cband, alp)
        aggte(out, type = "dynamic", na.rm = TRUE)
    """

    name = "R did"

    def estimate(self, data: pd.DataFrame, request: AttGtRequest) -> DynamicEffects:
        ro, _, _, importr = _load_rpy2()
        did = importr("did")
        set_r_seeds(request.seed)

        r_df = _r_panel(data, request)
        args = dict(
            yname=request.outcome,
            tname=request.time,
            idname=request.unit,
            gname=request.cohort,
            xformla=ro.Formula(request.xformla()),
            data=r_df,
            control_group=request.control_group,
            allow_unbalanced_panel=bool(request.allow_unbalanced_panel),
            est_method=request.est_method,
            base_period=request.base_period,
            bstrap=bool(request.bstrap),
            biters=int(request.biters),
            cband=bool(request.cband),
            alp=float(request.alpha),
            print_details=False,
        )
        if request.cluster:
            args["clustervars"] = request.cluster

        out = did.att_gt(**args)
        print("[CS-DID] Aggregating to annual event study effects...")
        agg = did.aggte(out, type="dynamic", na_rm=True)

        group_time = pd.DataFrame(
            {
                "group": _as_array(out, "group"),
                "time": _as_array(out, "t"),
                "att": _as_array(out, "att"),
                "se": _as_array(out, "se"),
            }
        )
        # aggte reports no critical value for the overall effect
        overall_crit = float(norm.ppf(1.0 - request.alpha / 2.0))

        return DynamicEffects(
            event_time=_as_array(agg, "egt"),
            att=_as_array(agg, "att.egt"),
            se=_as_array(agg, "se.egt"),
            crit_val=_as_array(agg, "crit.val.egt"),
            overall_att=_as_scalar(agg, "overall.att"),
            overall_se=_as_scalar(agg, "overall.se"),
            overall_crit_val=overall_crit,
            group_time=group_time,
            n_obs=int(len(data)),
        )
