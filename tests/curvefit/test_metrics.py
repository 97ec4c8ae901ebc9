"""Tests for R², IC50, AUC and Emax."""

from dataclasses import replace

import numpy as np
import pytest

from pyviability.curvefit import (
    DEFAULT_CONFIG,
    FittedCurve,
    auc_log_trapezoid,
    hill,
    ic50_from_params,
    metrics,
    r2_for_params,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def scenario_points():
    return [(0.001, 100), (0.01, 95), (0.1, 50), (1, 10), (10, 5)]


@pytest.fixture
def exact_points():
    conc = np.array([0.001, 0.01, 0.1, 1, 10, 100], dtype=float)
    true = (1.0, 0.1, 1.0)
    return list(zip(conc, hill(conc, true) * 100.0)), FittedCurve("monophasic", true)


# ---------------------------------------------------------------------------
# Gating
# ---------------------------------------------------------------------------

class TestGating:

    def test_no_curve(self, scenario_points):
        m = metrics(None, scenario_points)
        assert (m.r_squared, m.ic50, m.auc, m.emax) == (None, None, None, None)

    def test_too_few_points(self):
        curve = FittedCurve("monophasic", (1.0, 0.1, 1.0))
        m = metrics(curve, [(0.1, 90), (1.0, 50)])
        assert (m.r_squared, m.ic50, m.auc, m.emax) == (None, None, None, None)

    def test_threshold_from_config(self):
        curve = FittedCurve("monophasic", (1.0, 0.1, 1.0))
        cfg = replace(DEFAULT_CONFIG, min_points_for_fit=2)
        m = metrics(curve, [(0.1, 90), (1.0, 50)], cfg)
        assert m.r_squared is not None


# ---------------------------------------------------------------------------
# R²
# ---------------------------------------------------------------------------

class TestRSquared:

    def test_perfect_fit(self, exact_points):
        points, curve = exact_points
        assert metrics(curve, points).r_squared == pytest.approx(1.0)

    def test_zero_variance_gives_exact_zero(self):
        points = [(c, 50.0) for c in (0.001, 0.01, 0.1, 1, 10)]
        curve = FittedCurve("monophasic", (1.0, 0.1, 1.0))
        r2 = metrics(curve, points).r_squared
        assert r2 == 0.0
        assert not np.isnan(r2)

    def test_uses_percent_scale_unweighted(self):
        conc = np.array([0.1, 1.0, 10.0])
        viab = np.array([90.0, 60.0, 20.0])
        p = np.array([1.0, 0.0, 1.0])
        pred = hill(conc, p) * 100
        sse, r2 = r2_for_params(p, "monophasic", conc, viab)
        assert sse == pytest.approx(np.sum((viab - pred) ** 2))
        assert r2 == pytest.approx(1 - sse / np.sum((viab - viab.mean()) ** 2))

    def test_empty(self):
        sse, r2 = r2_for_params(np.array([1.0, 0.0, 1.0]), "monophasic", np.array([]), np.array([]))
        assert sse == float("inf")
        assert r2 == float("-inf")


# ---------------------------------------------------------------------------
# IC50
# ---------------------------------------------------------------------------

class TestIC50:

    def test_closed_form(self):
        assert ic50_from_params(np.array([1.0, 0.0, 2.0])) == pytest.approx(2.0)
        assert ic50_from_params(np.array([2.0, 0.2, 1.0])) == pytest.approx((0.5 / 0.3) ** 0.5)

    def test_curve_is_half_at_ic50(self):
        p = np.array([1.7, 0.15, 0.3])
        ic50 = ic50_from_params(p)
        assert hill(np.array([ic50]), p)[0] == pytest.approx(0.5)

    @pytest.mark.parametrize("params", [[1.0, 0.5, 1.0], [1.0, 0.7, 1.0], [0.0, 0.1, 1.0]])
    def test_undefined(self, params):
        assert ic50_from_params(np.array(params)) is None

    def test_non_finite_is_none(self):
        assert ic50_from_params(np.array([1e-300, 0.1, 1.0])) is None

    def test_biphasic_uses_helper_ec50(self, scenario_points):
        seen = {}

        def helper(points, config, algorithm):
            seen["n"] = len(points)
            seen["algorithm"] = algorithm
            return np.array([1.0, 0.1, 0.42])

        curve = FittedCurve("biphasic", (1.0, 0.5, 0.01, 1.0, 0.1, 1.0))
        m = metrics(curve, scenario_points, algorithm="ols", ic50_helper=helper)
        assert m.ic50 == pytest.approx(0.42)
        assert seen == {"n": 5, "algorithm": "ols"}

    def test_biphasic_helper_none(self, scenario_points):
        curve = FittedCurve("biphasic", (1.0, 0.5, 0.01, 1.0, 0.1, 1.0))
        m = metrics(curve, scenario_points, ic50_helper=lambda *args: None)
        assert m.ic50 is None
        assert m.r_squared is not None

    def test_biphasic_default_helper(self, scenario_points):
        curve = FittedCurve("biphasic", (1.0, 0.5, 0.01, 1.0, 0.1, 1.0))
        m = metrics(curve, scenario_points)
        assert m.ic50 is not None
        assert 0.01 < m.ic50 < 1.0


# ---------------------------------------------------------------------------
# AUC
# ---------------------------------------------------------------------------

class TestAUC:

    def test_flat_full_viability(self):
        assert auc_log_trapezoid(np.array([1.0, 10.0]), np.array([100.0, 100.0])) == pytest.approx(1.0)

    def test_capped_at_100(self):
        assert auc_log_trapezoid(np.array([1.0, 10.0]), np.array([150.0, 150.0])) == pytest.approx(1.0)

    def test_not_normalised_by_range(self):
        narrow = auc_log_trapezoid(np.array([1.0, 10.0]), np.array([50.0, 50.0]))
        wide = auc_log_trapezoid(np.array([1.0, 1000.0]), np.array([50.0, 50.0]))
        assert wide == pytest.approx(3 * narrow)

    def test_single_point(self):
        assert auc_log_trapezoid(np.array([1.0]), np.array([50.0])) == 0.0

    def test_order_invariant(self, scenario_points):
        curve = FittedCurve("monophasic", (1.0, 0.05, 0.1))
        shuffled = [scenario_points[i] for i in (3, 0, 4, 2, 1)]
        assert metrics(curve, shuffled).auc == metrics(curve, scenario_points).auc

    def test_duplicate_doses_contribute_zero_width(self):
        auc = auc_log_trapezoid(np.array([1.0, 10.0, 10.0]), np.array([100.0, 50.0, 10.0]))
        assert auc == pytest.approx(0.75)


# ---------------------------------------------------------------------------
# Emax
# ---------------------------------------------------------------------------

class TestEmax:

    def test_curve_at_max_dose(self, scenario_points):
        curve = FittedCurve("monophasic", (1.0, 0.05, 0.1))
        m = metrics(curve, scenario_points)
        assert m.emax == pytest.approx(hill(np.array([10.0]), curve.params)[0] * 100)

    def test_unknown_mode_is_none(self, scenario_points):
        curve = FittedCurve("monophasic", (1.0, 0.05, 0.1))
        cfg = replace(DEFAULT_CONFIG, emax_mode="observedAtMax")
        m = metrics(curve, scenario_points, cfg)
        assert m.emax is None
        assert m.auc is not None
