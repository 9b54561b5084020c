# config.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple
import pandas as pd

from .defaults import (
    DEFAULT_DATA_PATH,
    NATURE_INDEX_UNKNOWN,
    NSPBM_DESCRIPTION,
    NSPBM_ISSNS,
    NSPBM_TITLE,
    NUMERIC_COVARIATES,
)


@dataclass
class ModelSpec:
    """One CS-DID model variant: controls, clustering, sample and outputs."""
    name: str
    title: str
    description: str
    covariates: Tuple[str, ...] = ()
    cluster_col: Optional[str] = "id_numeric"
    # None keeps every journal
    journals: Optional[Tuple[str, ...]] = None
    coef_filename: Optional[str] = None
    figure_filename: Optional[str] = None

    def __post_init__(self) -> None:
        self.covariates = tuple(self.covariates or ())
        if self.journals is not None:
            self.journals = tuple(self.journals)


def default_models() -> List[ModelSpec]:
    # Model 1: basic paper attributes, clustered by author
    return [
        ModelSpec(
            name="nspbm_m1",
            title=NSPBM_TITLE,
            description=NSPBM_DESCRIPTION,
            covariates=("is_top5",),
            cluster_col="id_numeric",
            journals=NSPBM_ISSNS,
            coef_filename="NSPBM_Model_Coefficients.csv",
            figure_filename="Figure3_NSPBM_Model_CS.png",
        )
    ]


@dataclass
class StudyConfig:
    # =========================
    # Core data
    # =========================
    # When df is given it is used instead of reading data_path.
    data_path: str = DEFAULT_DATA_PATH
    sep: str = ","
    df: Optional[pd.DataFrame] = None

    # =========================
    # Schema (raw columns)
    # =========================
    author_col: str = "author_id"
    group_col: str = "group_id"
    winner_col: str = "if_winner"
    award_year_col: str = "awardYear"
    position_col: str = "author_position"
    year_col: str = "PubYear"
    outcome_col: str = "DeltaDays"
    journal_col: str = "JournalISSN"
    nature_index_col: str = "is_nature_index"
    numeric_cols: Tuple[str, ...] = NUMERIC_COVARIATES

    # =========================
    # Cleaning
    # =========================
    nature_index_fill: int = NATURE_INDEX_UNKNOWN
    min_cohort_size: int = 100

    # =========================
    # Models
    # =========================
    models: List[ModelSpec] = field(default_factory=default_models)

    # =========================
    # CS-DID options
    # =========================
    control_group: str = "notyettreated"
    est_method: str = "reg"
    base_period: str = "universal"
    bstrap: bool = True
    biters: int = 2000
    cband: bool = True
    allow_unbalanced_panel: bool = True
    alpha: float = 0.05
    seed: Optional[int] = None

    # =========================
    # Plot window
    # =========================
    event_window: Tuple[int, int] = (-10, 15)
    reference_period: int = -1
    ma_window: int = 3

    # =========================
    # Artifacts
    # =========================
    output_dir: Optional[str] = None
    snapshot_path: Optional[str] = None

    def copy(self) -> "StudyConfig":
        # Shallow copy (df is shared); model specs are copied one by one
        return replace(
            self,
            numeric_cols=tuple(self.numeric_cols),
            models=[replace(m) for m in self.models],
            event_window=tuple(self.event_window),
        )

    def without_data(self) -> "StudyConfig":
        """Copy with the raw frame dropped, for snapshots."""
        cfg = self.copy()
        cfg.df = None
        return cfg
