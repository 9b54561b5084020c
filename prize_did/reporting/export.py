"""Coefficient table export."""
from __future__ import annotations

import os
from typing import Optional

from ..estimators.cs_did import DynamicEffects
from ..helpers.utils import coefficient_table


def save_event_study_results(result: Optional[DynamicEffects], filename: str) -> Optional[str]:
    """Write the per-event-time coefficients to ``filename`` as CSV.

    Nothing is written when ``result`` is None.  Returns the path written.
    """
    if result is None:
        return None

    res_df = coefficient_table(result)
    parent = os.path.dirname(filename)
    if parent:
        os.makedirs(parent, exist_ok=True)
    res_df.to_csv(filename, index=False)
    print(f"[export] Coefficients saved to: {filename}")
    return filename
