"""
The R ``did`` call made by :class:`RDidBackend`, checked against an
in-process stand-in for rpy2 so no R installation is needed.
"""

from contextlib import contextmanager

import numpy as np
import pytest

from prize_did.estimator import CsDidEstimator
from prize_did.estimators import r_interface
from prize_did.estimators.r_interface import RDidBackend
from prize_did.helpers.config import StudyConfig
from prize_did.helpers.preparation import PanelData


# =============================================================================
# Stand-ins for the rpy2 objects the backend touches
# =============================================================================

class _RList:
    """Named R list: ``.names`` plus ``.rx2(name)``."""

    def __init__(self, **items):
        self._items = {k.replace("_", "."): v for k, v in items.items()}

    @property
    def names(self):
        return list(self._items)

    def rx2(self, name):
        return self._items[name]


class _Converter:
    def __add__(self, other):
        return self


class _Conversion:
    def py2rpy(self, df):
        return df


class _Formula:
    def __init__(self, text):
        self.text = text


class _Robjects:
    NULL = object()
    default_converter = _Converter()
    conversion = _Conversion()
    Formula = _Formula

    def __init__(self):
        self.evaluated = []

    def r(self, code):
        self.evaluated.append(code)


class _Pandas2ri:
    converter = _Converter()


@contextmanager
def _localconverter(converter):
    yield


class _DidPackage:
    def __init__(self, agg):
        self.agg = agg
        self.att_gt_kwargs = None
        self.aggte_args = None
        self.att_gt_out = _RList(
            group=[2010.0, 2010.0, 2012.0],
            t=[2009.0, 2011.0, 2013.0],
            att=[0.5, 3.0, 4.0],
            se=[1.0, 1.5, 2.0],
        )

    def att_gt(self, **kwargs):
        self.att_gt_kwargs = kwargs
        return self.att_gt_out

    def aggte(self, out, **kwargs):
        self.aggte_args = (out, kwargs)
        return self.agg


@pytest.fixture
def fake_r(monkeypatch):
    agg = _RList(
        egt=[-2.0, -1.0, 0.0, 1.0],
        att_egt=[0.4, -0.2, 5.0, 7.5],
        se_egt=[1.1, 0.9, 2.0, 2.5],
        crit_val_egt=[2.81],
        overall_att=[6.25],
        overall_se=[1.75],
    )
    did = _DidPackage(agg)
    ro = _Robjects()
    packages = []

    def _importr(name):
        packages.append(name)
        return did

    monkeypatch.setattr(
        r_interface, "_load_rpy2", lambda: (ro, _Pandas2ri(), _localconverter, _importr)
    )
    return {"did": did, "ro": ro, "packages": packages}


@pytest.fixture
def panel(raw_frame):
    return PanelData(StudyConfig(df=raw_frame)).panel


def _request(**overrides):
    cfg = StudyConfig(**overrides)
    return CsDidEstimator(cfg).build_request(("is_top5",), "id_numeric")


# =============================================================================
# att_gt / aggte arguments
# =============================================================================

class TestRCall:

    def test_att_gt_arguments(self, fake_r, panel):
        RDidBackend().estimate(panel, _request())
        kw = fake_r["did"].att_gt_kwargs

        assert fake_r["packages"] == ["did"]
        assert kw["yname"] == "DeltaDays"
        assert kw["tname"] == "PubYear"
        assert kw["idname"] == "id_numeric"
        assert kw["gname"] == "gname"
        assert kw["xformla"].text == "~ is_top5"
        assert kw["control_group"] == "notyettreated"
        assert kw["est_method"] == "reg"
        assert kw["base_period"] == "universal"
        assert kw["bstrap"] is True
        assert kw["biters"] == 2000
        assert kw["cband"] is True
        assert kw["allow_unbalanced_panel"] is True
        assert kw["clustervars"] == "id_numeric"
        assert kw["alp"] == pytest.approx(0.05)

    def test_only_request_columns_are_sent(self, fake_r, panel):
        RDidBackend().estimate(panel, _request())
        sent = fake_r["did"].att_gt_kwargs["data"]
        assert list(sent.columns) == ["DeltaDays", "PubYear", "id_numeric", "gname", "is_top5"]
        assert len(sent) == len(panel)
        assert all(np.issubdtype(dt, np.number) for dt in sent.dtypes)

    def test_dynamic_aggregation_drops_undefined_cells(self, fake_r, panel):
        RDidBackend().estimate(panel, _request())
        out, kw = fake_r["did"].aggte_args
        assert out is fake_r["did"].att_gt_out
        assert kw == {"type": "dynamic", "na_rm": True}

    def test_no_cluster_argument_without_cluster(self, fake_r, panel):
        req = CsDidEstimator(StudyConfig()).build_request((), None)
        RDidBackend().estimate(panel, req)
        kw = fake_r["did"].att_gt_kwargs
        assert "clustervars" not in kw
        assert kw["xformla"].text == "~ 1"

    def test_seed_is_set_in_r(self, fake_r, panel):
        RDidBackend().estimate(panel, _request(seed=42))
        assert fake_r["ro"].evaluated == ["set.seed(42)"]

    def test_no_seed_leaves_r_untouched(self, fake_r, panel):
        RDidBackend().estimate(panel, _request())
        assert fake_r["ro"].evaluated == []


# =============================================================================
# Reading the aggregation back
# =============================================================================

class TestReadBack:

    def test_dynamic_effects(self, fake_r, panel):
        res = RDidBackend().estimate(panel, _request())

        assert res.event_time.tolist() == [-2, -1, 0, 1]
        np.testing.assert_allclose(res.att, [0.4, -0.2, 5.0, 7.5])
        np.testing.assert_allclose(res.se, [1.1, 0.9, 2.0, 2.5])
        # one simultaneous critical value for every event time
        np.testing.assert_allclose(res.crit_val, [2.81] * 4)
        assert res.overall_att == pytest.approx(6.25)
        assert res.overall_se == pytest.approx(1.75)
        assert res.overall_crit_val == pytest.approx(1.959964, abs=1e-5)
        assert res.n_obs == len(panel)

    def test_group_time_table(self, fake_r, panel):
        res = RDidBackend().estimate(panel, _request())
        gt = res.group_time
        assert list(gt.columns) == ["group", "time", "att", "se"]
        assert gt["group"].tolist() == [2010.0, 2010.0, 2012.0]
        np.testing.assert_allclose(gt["att"], [0.5, 3.0, 4.0])

    def test_missing_overall_is_nan(self, fake_r, panel):
        fake_r["did"].agg._items.pop("overall.se")
        fake_r["did"].agg._items["overall.att"] = fake_r["ro"].NULL
        res = RDidBackend().estimate(panel, _request())
        assert np.isnan(res.overall_att)
        assert np.isnan(res.overall_se)

    def test_through_the_estimator(self, fake_r, panel):
        out = CsDidEstimator(StudyConfig()).run_cs_did(panel, covariates=("is_top5",))
        assert out.ok
        assert out.result.overall_att == pytest.approx(6.25)
        assert out.request.cluster == "id_numeric"
