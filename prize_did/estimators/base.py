from __future__ import annotations

from dataclasses import dataclass

from ..helpers.config import StudyConfig
from .cs_did import AttGtRequest


@dataclass
class BaseEstimator:
    """
    Holds the study configuration for the CS-DID adapter and writes its
    ``[CS-DID]`` progress lines.
    """

    config: StudyConfig

    def _log(self, message: str) -> None:
        print(f"[CS-DID] {message}")

    def _log_request(self, request: AttGtRequest) -> None:
        """One line for the clustering choice, one for the control formula."""
        self._log(f"Clustering SE by: {request.cluster}")
        self._log(
            f"Controls: {request.xformla()} | {request.control_group} controls, "
            f"{request.est_method}, {request.biters} bootstrap draws"
        )
