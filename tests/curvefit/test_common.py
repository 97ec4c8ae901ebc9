"""Tests for data and result types."""

import dataclasses

import numpy as np
import pytest

from pyviability.curvefit import (
    DEFAULT_CONFIG,
    DataPoint,
    FittedCurve,
    Metrics,
    sort_points,
    sorted_arrays,
)


class TestPoints:

    def test_sort_is_stable(self):
        pts = [DataPoint(1.0, 10), DataPoint(0.1, 90), DataPoint(1.0, 20), (0.5, 50)]
        out = sort_points(pts)
        assert [p.concentration for p in out] == [0.1, 0.5, 1.0, 1.0]
        assert [p.viability for p in out] == [90, 50, 10, 20]

    def test_input_not_mutated(self):
        pts = [(10.0, 5.0), (0.1, 95.0)]
        sort_points(pts)
        assert pts == [(10.0, 5.0), (0.1, 95.0)]

    def test_arrays(self):
        conc, viab = sorted_arrays([(10, 5), (0.1, 95)])
        np.testing.assert_array_equal(conc, [0.1, 10.0])
        np.testing.assert_array_equal(viab, [95.0, 5.0])

    @pytest.mark.parametrize("bad", [[(0.0, 50)], [(-1.0, 50)], [(np.inf, 50)], [(1.0, np.nan)]])
    def test_invalid_values_raise(self, bad):
        with pytest.raises(ValueError):
            sorted_arrays(bad)


class TestFittedCurve:

    def test_immutable(self):
        c = FittedCurve("monophasic", (1.0, 0.1, 1.0))
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.params = (2.0, 0.1, 1.0)

    def test_params_coerced_to_float_tuple(self):
        c = FittedCurve.from_array(np.array([1, 0, 2]), "monophasic")
        assert c.params == (1.0, 0.0, 2.0)
        assert all(isinstance(x, float) for x in c.params)

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError):
            FittedCurve("biphasic", (1.0, 0.1, 1.0))

    def test_named_params(self):
        c = FittedCurve("monophasic", (1.5, 0.2, 0.3))
        assert c.named_params() == {"hill_slope": 1.5, "e_inf": 0.2, "ec50": 0.3}

    def test_predict(self):
        c = FittedCurve("monophasic", (1.0, 0.0, 1.0))
        np.testing.assert_allclose(c.predict(np.array([1.0])), [0.5])

    def test_sample(self):
        c = FittedCurve("monophasic", (1.0, 0.0, 1.0))
        conc, pct = c.sample(resolution=10)
        assert conc.shape == pct.shape == (11,)
        assert conc[0] == pytest.approx(1e-3)
        assert conc[-1] == pytest.approx(1e2)
        assert np.all(np.diff(pct) < 0)

    def test_sample_default_resolution_from_config(self):
        c = FittedCurve("monophasic", (1.0, 0.0, 1.0))
        conc, _ = c.sample()
        assert conc.shape == (DEFAULT_CONFIG.curve_resolution + 1,)
        cfg = dataclasses.replace(DEFAULT_CONFIG, curve_resolution=25)
        conc, pct = c.sample(config=cfg)
        assert conc.shape == pct.shape == (26,)

    def test_sample_explicit_resolution_wins(self):
        c = FittedCurve("monophasic", (1.0, 0.0, 1.0))
        cfg = dataclasses.replace(DEFAULT_CONFIG, curve_resolution=25)
        conc, _ = c.sample(resolution=4, config=cfg)
        assert conc.shape == (5,)

    def test_sample_bad_range(self):
        c = FittedCurve("monophasic", (1.0, 0.0, 1.0))
        with pytest.raises(ValueError):
            c.sample(conc_min=10, conc_max=1)


class TestMetricsType:

    def test_empty(self):
        m = Metrics.empty()
        assert (m.r_squared, m.ic50, m.auc, m.emax) == (None, None, None, None)

    def test_summary_marks_missing(self):
        s = Metrics(r_squared=0.95, ic50=None, auc=1.234, emax=None).summary()
        assert "0.9500" in s
        assert "N/A" in s
