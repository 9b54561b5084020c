# prize_did/helpers/preparation.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .config import StudyConfig
from .defaults import (
    COHORT_COL,
    DERIVED_COLUMNS,
    FIRST_COL,
    GROUP_COL,
    LAST_COL,
    UNIT_COL,
)


class DataFormatError(ValueError):
    """Input table could not be parsed or lacks required columns."""


# ----------------------------
# Basic helpers
# ----------------------------
def _dense_codes(values: pd.Series) -> pd.Series:
    """1-based integer codes over the sorted distinct values; missing stays missing."""
    codes, _ = pd.factorize(values, sort=True)
    out = pd.Series(codes + 1, index=values.index, dtype="float64")
    return out.where(codes >= 0, np.nan)


def _position_dummy(position: pd.Series, level: str) -> pd.Series:
    dummy = (position == level).astype("float64")
    return dummy.where(position.notna(), np.nan)


def required_columns(config: StudyConfig) -> List[str]:
    """Union of the fields needed by every configured model."""
    cols: List[str] = [config.outcome_col, config.year_col]
    cols.extend(DERIVED_COLUMNS)
    cols.extend(config.numeric_cols)
    for spec in config.models:
        cols.extend(spec.covariates)
        if spec.cluster_col:
            cols.append(spec.cluster_col)
    return list(dict.fromkeys(cols))


def read_table(path: str, sep: str = ",") -> pd.DataFrame:
    """Read the delimited input file, mapping parse failures to DataFormatError."""
    try:
        return pd.read_csv(path, sep=sep)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataFormatError(f"[prepare] Could not parse {path}: {e}") from e


def subset_by_journals(
    df: pd.DataFrame,
    journals: Optional[Iterable[str]],
    journal_col: str = "JournalISSN",
) -> pd.DataFrame:
    """Rows whose journal identifier is in the allow-list (all rows when None)."""
    if journals is None:
        return df
    if journal_col not in df.columns:
        raise DataFormatError(f"[prepare] Journal column '{journal_col}' not in data.")
    return df[df[journal_col].isin(list(journals))].copy()


# ----------------------------
# Panel builder
# ----------------------------
class PanelData:
    """
    Author-paper panel ready for the CS-DID estimator:
      - nature-index flag imputed to the "unknown" category,
      - dense numeric author / group identifiers,
      - first-treatment cohort ``gname`` (0 = never treated),
      - first/last author dummies (middle is the reference),
      - one listwise deletion over every field any model uses,
      - award cohorts below ``min_cohort_size`` rows removed.

    Use via `load_and_clean_data(StudyConfig)`.
    """

    def __init__(self, config: StudyConfig) -> None:
        self.config = config.copy()
        self.panel: Optional[pd.DataFrame] = None
        self.info: Dict[str, Any] = {}
        self.required_cols: List[str] = required_columns(self.config)
        self._prepare()

    def _raw_columns(self) -> List[str]:
        cfg = self.config
        cols = [
            cfg.author_col, cfg.group_col, cfg.winner_col, cfg.award_year_col,
            cfg.position_col, cfg.year_col, cfg.outcome_col, cfg.nature_index_col,
            cfg.journal_col,
        ]
        cols.extend(cfg.numeric_cols)
        cols.extend(c for c in self.required_cols if c not in DERIVED_COLUMNS)
        return list(dict.fromkeys(cols))

    # ---------- small-cohort filter
    def _drop_small_cohorts(self, g: pd.DataFrame) -> pd.DataFrame:
        cohort_sizes = g.loc[g[COHORT_COL] > 0, COHORT_COL].value_counts().sort_index()
        small = sorted(cohort_sizes[cohort_sizes < self.config.min_cohort_size].index.tolist())
        self.info["cohort_sizes"] = {int(k): int(v) for k, v in cohort_sizes.items()}
        self.info["dropped_cohorts"] = [int(c) for c in small]
        if small:
            print(
                f"[prepare] Dropping small cohorts (N<{self.config.min_cohort_size}) "
                f"to avoid singular designs: {', '.join(str(int(c)) for c in small)}"
            )
            g = g[~g[COHORT_COL].isin(small)].copy()
        return g

    # ---------- main builder
    def _prepare(self) -> None:
        cfg = self.config
        if cfg.df is not None:
            print("[prepare] Using in-memory data frame")
            d = cfg.df.copy()
        else:
            print(f"[prepare] Loading data: {cfg.data_path}")
            d = read_table(cfg.data_path, sep=cfg.sep)

        miss = set(self._raw_columns()) - set(d.columns)
        if miss:
            raise DataFormatError(f"Missing columns in data: {sorted(miss)}")
        self.info["n_loaded"] = int(len(d))

        # (1) Missing nature-index flag -> "unknown"
        d[cfg.nature_index_col] = d[cfg.nature_index_col].fillna(cfg.nature_index_fill)

        # (2) Numeric identifiers
        d[UNIT_COL] = _dense_codes(d[cfg.author_col])
        d[GROUP_COL] = _dense_codes(d[cfg.group_col])

        # (3) First treatment time; 0 = never treated
        d[cfg.award_year_col] = pd.to_numeric(d[cfg.award_year_col], errors="coerce").fillna(0)
        winner = pd.to_numeric(d[cfg.winner_col], errors="coerce")
        treated = (winner == 1) & (d[cfg.award_year_col] > 0)
        d[COHORT_COL] = np.where(treated, d[cfg.award_year_col], 0.0)

        # (4) Author position dummies
        d[FIRST_COL] = _position_dummy(d[cfg.position_col], "first")
        d[LAST_COL] = _position_dummy(d[cfg.position_col], "last")

        # (5) Covariates and publication year to numeric
        for c in dict.fromkeys([*cfg.numeric_cols, cfg.year_col]):
            d[c] = pd.to_numeric(d[c], errors="coerce")

        # (6) Listwise deletion, once, over every model's fields
        n_before = len(d)
        d = d.dropna(subset=self.required_cols).copy()
        self.info["n_dropped_na"] = int(n_before - len(d))
        print(f"[prepare] Rows removed due to NA: {n_before - len(d)}")

        # (7) Small cohorts
        d = self._drop_small_cohorts(d)

        for c in (UNIT_COL, GROUP_COL, COHORT_COL):
            d[c] = d[c].astype("int64")
        d = d.reset_index(drop=True)

        self.info["n_final"] = int(len(d))
        self.info["n_treated_rows"] = int((d[COHORT_COL] > 0).sum())
        self.info["cohorts"] = sorted(int(c) for c in d.loc[d[COHORT_COL] > 0, COHORT_COL].unique())
        print(f"[prepare] Final row count: {len(d)}")
        self.panel = d


# public entry point
def load_and_clean_data(cfg: StudyConfig) -> pd.DataFrame:
    return PanelData(cfg).panel


__all__ = [
    "DataFormatError",
    "PanelData",
    "load_and_clean_data",
    "read_table",
    "required_columns",
    "subset_by_journals",
]
