"""Public API for the estimators subpackage.

This module reexports the request/result containers and the backend
interface for convenience.  Users may import these names directly from
:mod:`prize_did.estimators`.  The rpy2 bridge in
:mod:`prize_did.estimators.r_interface` is imported on demand only.
"""

from .cs_did import (
    AttGtRequest,
    CsDidBackend,
    DynamicEffects,
    EstimationOutcome,
    MIN_BOOTSTRAP_ITERS,
)

__all__ = [
    "AttGtRequest",
    "CsDidBackend",
    "DynamicEffects",
    "EstimationOutcome",
    "MIN_BOOTSTRAP_ITERS",
]
