"""
Shared fixtures for the ``prize_did`` test suite.

The CS-DID backend is replaced by small in-process fakes so that the suite
runs without R; matplotlib is forced onto the non-interactive Agg backend.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from prize_did.estimators.cs_did import CsDidBackend, DynamicEffects
from prize_did.helpers.defaults import NSPBM_ISSNS
from prize_did.reporting.plotting import PlotTheme


# =============================================================================
# Fake estimation backends
# =============================================================================

class FakeBackend(CsDidBackend):
    """Returns a fixed result and records every call."""

    name = "fake"

    def __init__(self, result):
        self.result = result
        self.calls = []

    def estimate(self, data, request):
        self.calls.append((data.copy(), request))
        return self.result


class FailingBackend(CsDidBackend):
    """Raises like a singular design would inside the estimator."""

    name = "failing"

    def __init__(self, message="system is computationally singular"):
        self.message = message
        self.calls = 0

    def estimate(self, data, request):
        self.calls += 1
        raise RuntimeError(self.message)


def make_dynamic_effects(overall_att=12.345, event_times=range(-12, 17), crit=2.5):
    e = np.asarray(list(event_times), dtype=int)
    att = 0.5 * e + 1.0
    se = np.full(e.shape, 1.0)
    return DynamicEffects(
        event_time=e,
        att=att,
        se=se,
        crit_val=crit,
        overall_att=overall_att,
        overall_se=2.0,
        overall_crit_val=1.96,
    )


# =============================================================================
# Synthetic author-paper table
# =============================================================================

OUTSIDE_ISSN = "1234-5678"


def make_raw_frame(cohort_rows=None, n_never=120, journals=None):
    """Raw table with one block of rows per award cohort plus never-treated rows.

    Every winner row belongs to its cohort; never-treated rows are
    co-authors (``if_winner == 0``) with an award year recorded for their
    group, which must not make them treated.
    """
    cohort_rows = cohort_rows if cohort_rows is not None else {2010: 150, 2012: 150}
    journals = list(journals or NSPBM_ISSNS)
    positions = ["first", "middle", "last"]
    rows = []

    def _row(i, author, group, winner, award, pub_year):
        return {
            "author_id": author,
            "group_id": group,
            "if_winner": winner,
            "awardYear": award,
            "author_position": positions[i % 3],
            "teamsize": 3 + i % 7,
            "JIF": 10.0 + (i % 11) * 0.5,
            "academic_experience": 5 + i % 20,
            "ref_num": 20 + i % 30,
            "PubYear": pub_year,
            "is_top5": i % 2,
            "is_nature_index": 1 if i % 4 else np.nan,
            "JournalISSN": journals[i % len(journals)],
            "DeltaDays": 100.0 + (i % 50),
        }

    i = 0
    for cohort, n in cohort_rows.items():
        for k in range(n):
            rows.append(_row(i, f"W{cohort}_{k % 15}", f"G{cohort}", 1, cohort, cohort - 8 + k % 16))
            i += 1
    for k in range(n_never):
        rows.append(_row(i, f"C{k % 40}", f"G{2010 + 2 * (k % 2)}", 0, 2010, 2000 + k % 20))
        i += 1
    return pd.DataFrame(rows)


@pytest.fixture
def raw_factory():
    return make_raw_frame


@pytest.fixture
def raw_frame():
    return make_raw_frame()


@pytest.fixture
def dynamic_effects():
    return make_dynamic_effects()


@pytest.fixture
def fake_backend(dynamic_effects):
    return FakeBackend(dynamic_effects)


@pytest.fixture
def failing_backend():
    return FailingBackend()


@pytest.fixture
def small_theme():
    """Low resolution so figure tests stay fast."""
    return PlotTheme(figsize=(6.0, 4.0), dpi=30)
