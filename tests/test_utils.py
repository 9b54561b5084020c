import numpy as np
import pandas as pd
import pytest

from prize_did.helpers.utils import (
    COEF_COLUMNS,
    centered_moving_average,
    coefficient_table,
    confidence_bounds,
    round_half_up,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (12.345, "12.35"),
        (2.675, "2.68"),
        (-1.005, "-1.01"),
        (3.0, "3.00"),
        (0.125, "0.13"),
    ],
)
def test_round_half_up(value, expected):
    assert round_half_up(value, 2) == expected


@pytest.mark.parametrize("value", [None, float("nan"), float("inf")])
def test_round_half_up_not_available(value):
    assert round_half_up(value) == "NA"


def test_confidence_bounds_scalar():
    lo, hi = confidence_bounds(1.0, 0.5, 2.0)
    assert lo == pytest.approx(0.0)
    assert hi == pytest.approx(2.0)


def test_moving_average_edges_are_missing():
    ma = centered_moving_average(pd.Series([1.0, 2.0, 3.0, 4.0, 5.0]), 3)
    assert np.isnan(ma.iloc[0])
    assert np.isnan(ma.iloc[-1])
    np.testing.assert_allclose(ma.iloc[1:-1].to_numpy(), [2.0, 3.0, 4.0])


def test_moving_average_rejects_bad_window():
    with pytest.raises(ValueError):
        centered_moving_average(pd.Series([1.0, 2.0]), 0)


def test_coefficient_table(dynamic_effects):
    tbl = coefficient_table(dynamic_effects)
    assert list(tbl.columns) == COEF_COLUMNS
    assert len(tbl) == dynamic_effects.event_time.size
    np.testing.assert_allclose(
        tbl["Upper_CI"] - tbl["Lower_CI"], 2 * tbl["Crit_Val_95"] * tbl["Std_Error"]
    )
    expected = (tbl["Lower_CI"] > 0) | (tbl["Upper_CI"] < 0)
    assert (tbl["Significant"] == expected).all()
