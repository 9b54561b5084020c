from __future__ import annotations

import warnings
from typing import List, Optional, Sequence

import pandas as pd

from prize_did.helpers.config import ModelSpec, StudyConfig
from prize_did.helpers.defaults import COHORT_COL, UNIT_COL
from prize_did.estimators.base import BaseEstimator
from prize_did.estimators.cs_did import (
    AttGtRequest,
    CsDidBackend,
    DynamicEffects,
    EstimationOutcome,
)


class CsDidEstimator(BaseEstimator):
    """
    Thin façade over a CS-DID backend.

    This is the one place where estimation failures are turned into an
    :class:`EstimationOutcome` instead of an exception, so a batch of
    models keeps going when one of them cannot be fit (singular design,
    degenerate cluster, missing R installation, ...).
    """

    def __init__(self, config: StudyConfig, backend: Optional[CsDidBackend] = None) -> None:
        super().__init__(config)
        self._backend = backend

    @property
    def backend(self) -> CsDidBackend:
        if self._backend is None:
            from prize_did.estimators.r_interface import RDidBackend
            self._backend = RDidBackend()
        return self._backend

    def build_request(
        self,
        covariates: Sequence[str] = (),
        cluster: Optional[str] = UNIT_COL,
    ) -> AttGtRequest:
        cfg = self.config
        return AttGtRequest(
            outcome=cfg.outcome_col,
            time=cfg.year_col,
            unit=UNIT_COL,
            cohort=COHORT_COL,
            covariates=tuple(covariates),
            cluster=cluster,
            control_group=cfg.control_group,
            est_method=cfg.est_method,
            base_period=cfg.base_period,
            bstrap=cfg.bstrap,
            biters=cfg.biters,
            cband=cfg.cband,
            allow_unbalanced_panel=cfg.allow_unbalanced_panel,
            alpha=cfg.alpha,
            seed=cfg.seed,
        )

    # ---------------------------------------------------------
    # att_gt + dynamic aggregation
    # ---------------------------------------------------------
    def run_cs_did(
        self,
        data: pd.DataFrame,
        covariates: Sequence[str] = (),
        cluster: Optional[str] = UNIT_COL,
    ) -> EstimationOutcome:
        """Estimate group-time ATTs and aggregate them by event time.

        Parameters
        ----------
        data : pandas.DataFrame
            Cleaned panel (see :class:`prize_did.helpers.preparation.PanelData`).
        covariates : sequence of str
            Column names entering the linear control specification.
        cluster : str or None
            Column used to cluster the bootstrap standard errors.

        Returns
        -------
        EstimationOutcome
            ``ok`` with a :class:`DynamicEffects` payload, or a failure with
            the backend's error message as ``reason``.
        """
        self._log("Running Callaway & Sant'Anna estimator...")
        try:
            request = self.build_request(covariates, cluster)
        except ValueError as e:
            self._log(f"!!! Invalid estimator settings: {e}")
            return EstimationOutcome.failure(str(e))

        self._log_request(request)

        if data is None or data.empty:
            self._log("!!! No rows to estimate on.")
            return EstimationOutcome.failure("empty data", request)

        missing = [c for c in request.columns if c not in data.columns]
        if missing:
            self._log(f"!!! Missing columns for estimation: {missing}")
            return EstimationOutcome.failure(f"missing columns: {missing}", request)

        # R-side warnings reach Python through rpy2 as warnings
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                result: DynamicEffects = self.backend.estimate(data, request)
            except Exception as e:
                self._log(f"!!! Error in run_cs_did: {e}")
                outcome = EstimationOutcome.failure(str(e), request)
                outcome.warnings = self._collect_warnings(caught)
                return outcome

        if result.n_obs is None:
            result.n_obs = int(len(data))
        outcome = EstimationOutcome.success(result, request)
        outcome.warnings = self._collect_warnings(caught)
        return outcome

    def _collect_warnings(self, caught) -> List[str]:
        messages = list(dict.fromkeys(str(w.message).strip() for w in caught))
        for msg in messages:
            self._log(f"Warning: {msg}")
        return messages

    def run_model(self, data: pd.DataFrame, spec: ModelSpec) -> EstimationOutcome:
        return self.run_cs_did(data, covariates=spec.covariates, cluster=spec.cluster_col)


__all__ = [
    "CsDidEstimator",
    "DynamicEffects",
    "EstimationOutcome",
]
