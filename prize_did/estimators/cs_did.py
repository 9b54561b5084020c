# prize_did/estimators/cs_did.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

MIN_BOOTSTRAP_ITERS = 2000


@dataclass(frozen=True)
class AttGtRequest:
    """Everything a CS-DID backend needs besides the data itself."""
    outcome: str
    time: str
    unit: str
    cohort: str                      # 0 = never treated
    covariates: Tuple[str, ...] = ()
    cluster: Optional[str] = None
    control_group: str = "notyettreated"
    est_method: str = "reg"
    base_period: str = "universal"
    bstrap: bool = True
    biters: int = MIN_BOOTSTRAP_ITERS
    cband: bool = True
    allow_unbalanced_panel: bool = True
    alpha: float = 0.05
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "covariates", tuple(self.covariates or ()))
        if self.bstrap and int(self.biters) < MIN_BOOTSTRAP_ITERS:
            raise ValueError(
                f"biters must be at least {MIN_BOOTSTRAP_ITERS}; got {self.biters}."
            )
        if not 0.0 < float(self.alpha) < 1.0:
            raise ValueError(f"alpha must lie in (0, 1); got {self.alpha}.")

    @property
    def columns(self) -> Tuple[str, ...]:
        cols = [self.outcome, self.time, self.unit, self.cohort, *self.covariates]
        if self.cluster:
            cols.append(self.cluster)
        return tuple(dict.fromkeys(cols))

    def xformla(self) -> str:
        """Right-hand side formula of the linear controls, e.g. ``~ x1 + x2``."""
        rhs = " + ".join(self.covariates) if self.covariates else "1"
        return f"~ {rhs}"


@dataclass
class DynamicEffects:
    """Event-time aggregation of group-time ATTs plus the overall summary."""
    event_time: np.ndarray
    att: np.ndarray
    se: np.ndarray
    crit_val: np.ndarray
    overall_att: float
    overall_se: float
    overall_crit_val: float
    # cols: group, time, att, se
    group_time: Optional[pd.DataFrame] = None
    n_obs: Optional[int] = None

    def __post_init__(self) -> None:
        self.event_time = np.asarray(self.event_time, dtype=int)
        self.att = np.asarray(self.att, dtype=float)
        self.se = np.asarray(self.se, dtype=float)
        n = self.event_time.size
        crit = np.asarray(self.crit_val, dtype=float)
        # a simultaneous band has one critical value shared by all event times
        if crit.size == 1 and n != 1:
            crit = np.full(n, float(crit.ravel()[0]))
        self.crit_val = crit.reshape(-1)
        if not (self.att.size == self.se.size == self.crit_val.size == n):
            raise ValueError(
                "event_time, att, se and crit_val must have equal length; got "
                f"{n}, {self.att.size}, {self.se.size}, {self.crit_val.size}."
            )

    @property
    def overall_ci(self) -> Tuple[float, float]:
        half = self.overall_crit_val * self.overall_se
        return self.overall_att - half, self.overall_att + half

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "event_time": self.event_time,
                "att": self.att,
                "se": self.se,
                "crit_val": self.crit_val,
            }
        )


@dataclass
class EstimationOutcome:
    """Success with a payload, or failure with a reason.

    ``warnings`` holds the messages raised during estimation, in order.
    """
    result: Optional[DynamicEffects] = None
    reason: Optional[str] = None
    request: Optional[AttGtRequest] = None
    warnings: Sequence[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, result: DynamicEffects, request: Optional[AttGtRequest] = None) -> "EstimationOutcome":
        return cls(result=result, request=request)

    @classmethod
    def failure(cls, reason: str, request: Optional[AttGtRequest] = None) -> "EstimationOutcome":
        return cls(result=None, reason=str(reason), request=request)


class CsDidBackend(ABC):
    """Group-time ATT estimation followed by dynamic aggregation.

    Implementations estimate ATT(g, t) for every cohort/period cell and
    aggregate them by time since treatment, leaving undefined cells out of
    the average.  Errors are raised, not swallowed; the caller decides.
    """

    name: str = "backend"

    @abstractmethod
    def estimate(self, data: pd.DataFrame, request: AttGtRequest) -> DynamicEffects:
        raise NotImplementedError
