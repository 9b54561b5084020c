# prize_did/study.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import joblib
import pandas as pd

from .helpers.config import ModelSpec, StudyConfig
from .helpers.preparation import PanelData, subset_by_journals
from .estimator import CsDidEstimator
from .estimators.cs_did import CsDidBackend, EstimationOutcome
from .reporting.export import save_event_study_results
from .reporting.plotting import PlotTheme, plot_cs_event_study


@dataclass
class ModelRun:
    """What happened to one model variant."""
    spec: ModelSpec
    n_obs: int = 0
    outcome: Optional[EstimationOutcome] = None
    skipped_reason: Optional[str] = None
    coef_path: Optional[str] = None
    figure_path: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome is not None and self.outcome.ok


@dataclass
class PrizeStudyResult:
    """Container for all outputs of a PrizeStudy run.

    Serializable snapshot of the session: configuration (without the raw
    frame), the cleaned panel, loader diagnostics and one :class:`ModelRun`
    per model.
    """
    config: StudyConfig
    panel: pd.DataFrame
    panel_info: Dict[str, Any] = field(default_factory=dict)
    models: Dict[str, ModelRun] = field(default_factory=dict)

    def save(self, path: str) -> str:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        joblib.dump(self, path)
        print(f"[study] Snapshot saved to: {path}")
        return path

    @staticmethod
    def load(path: str) -> "PrizeStudyResult":
        return joblib.load(path)


class PrizeStudy:
    """Orchestrates load -> estimate -> {export, plot} for each model."""

    def __init__(
        self,
        config: StudyConfig,
        backend: Optional[CsDidBackend] = None,
        theme: Optional[PlotTheme] = None,
    ) -> None:
        self.config = config
        self.theme = theme
        self._estimator = CsDidEstimator(config, backend=backend)
        self._panel: Optional[PanelData] = None

    @property
    def panel(self) -> PanelData:
        if self._panel is None:
            raise RuntimeError("Panel not prepared yet. Call .run().")
        return self._panel

    def _out(self, filename: Optional[str]) -> Optional[str]:
        if not filename:
            return None
        if self.config.output_dir and not os.path.isabs(filename):
            return os.path.join(self.config.output_dir, filename)
        return filename

    def run(self) -> PrizeStudyResult:
        """
        Run the full pipeline.

        Data problems in the input file (``DataFormatError``) propagate:
        nothing is estimated on a table that could not be read.  Each
        model then runs independently; an empty journal subset, a failed
        estimation, or a failed export/plot is logged and recorded on its
        :class:`ModelRun` without stopping the others.

        Returns
        -------
        PrizeStudyResult
            Snapshot of the run.  Written to ``config.snapshot_path`` when set.
        """

        # 1) Load & clean once
        panel = PanelData(self.config)
        self._panel = panel
        df = panel.panel

        result = PrizeStudyResult(
            config=self.config.without_data(),
            panel=df,
            panel_info=dict(panel.info),
        )

        # 2) Models, one at a time
        for spec in self.config.models:
            result.models[spec.name] = self._run_model(df, spec)

        # 3) Snapshot
        if self.config.snapshot_path:
            result.save(self._out(self.config.snapshot_path))
        return result

    def _run_model(self, df: pd.DataFrame, spec: ModelSpec) -> ModelRun:
        cfg = self.config
        print(f"\n[study] --- Running CS-DID model '{spec.name}' (cluster: {spec.cluster_col}) ---")
        run = ModelRun(spec=spec)

        sub = subset_by_journals(df, spec.journals, cfg.journal_col)
        run.n_obs = int(len(sub))
        if sub.empty:
            run.skipped_reason = "no data"
            print(f"[study] Skipping {spec.name}: No data found.")
            return run

        run.outcome = self._estimator.run_model(sub, spec)
        if not run.outcome.ok:
            return run

        agg = run.outcome.result
        try:
            run.coef_path = save_event_study_results(agg, self._out(spec.coef_filename)) \
                if spec.coef_filename else None
        except Exception as e:
            run.errors["export"] = str(e)
            print(f"[study] !!! Export failed for {spec.name}: {e}")

        try:
            out = plot_cs_event_study(
                agg,
                spec.title,
                spec.description,
                self._out(spec.figure_filename),
                theme=self.theme,
                window=cfg.event_window,
                reference_period=cfg.reference_period,
                ma_window=cfg.ma_window,
            ) if spec.figure_filename else None
            run.figure_path = out[2]["path"] if out else None
        except Exception as e:
            run.errors["plot"] = str(e)
            print(f"[study] !!! Plot failed for {spec.name}: {e}")

        return run
