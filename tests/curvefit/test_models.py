"""Tests for viability model functions."""

import numpy as np
import pytest

from pyviability.curvefit import hill, biphasic, evaluate


class TestHill:
    """Monophasic Hill model."""

    def test_at_ec50_gives_midpoint(self):
        """At dose=EC50 the fraction is halfway between 1 and e_inf."""
        result = hill(np.array([1.0]), [1.5, 0.2, 1.0])
        assert result[0] == pytest.approx(0.6)

    def test_at_ec50_general(self):
        result = hill(np.array([5.0]), [2.0, 0.1, 5.0])
        assert result[0] == pytest.approx(0.55)

    @pytest.mark.parametrize("params", [[0.5, 0.0, 0.01], [3.0, 0.9, 100.0], [1.0, 1.0, 1.0]])
    def test_midpoint_holds_for_any_valid_params(self, params):
        hs, e_inf, ec50 = params
        assert hill(np.array([ec50]), params)[0] == pytest.approx((1 + e_inf) / 2)

    def test_dose_zero_gives_one(self):
        """dose=0 evaluates to the upper asymptote without warnings."""
        result = hill(np.array([0.0]), [1.0, 0.2, 1.0])
        assert result[0] == pytest.approx(1.0)

    def test_small_dose_approaches_one(self):
        result = hill(np.array([1e-10]), [1.0, 0.2, 1.0])
        assert result[0] == pytest.approx(1.0, abs=1e-6)

    def test_large_dose_approaches_e_inf(self):
        result = hill(np.array([1e10]), [1.0, 0.2, 1.0])
        assert result[0] == pytest.approx(0.2, abs=1e-6)

    def test_huge_dose_does_not_overflow(self):
        result = hill(np.array([1e300]), [5.0, 0.3, 1e-8])
        assert result[0] == pytest.approx(0.3)

    def test_decreasing_positive_slope(self):
        dose = np.array([0.01, 0.1, 1, 10, 100])
        resp = hill(dose, [1.0, 0.1, 1.0])
        assert np.all(np.diff(resp) < 0)

    def test_steeper_slope(self):
        """Higher slope → lower fraction above EC50."""
        dose = np.array([2.0])
        r_shallow = hill(dose, [0.5, 0.0, 1.0])
        r_steep = hill(dose, [5.0, 0.0, 1.0])
        assert r_steep[0] < r_shallow[0]

    def test_vector_output(self):
        result = hill(np.array([0.1, 1.0, 10.0]), [1.0, 0.0, 1.0])
        assert result.shape == (3,)


class TestBiphasic:
    """Product of two Hill phases."""

    def test_is_product_of_phases(self):
        dose = np.array([0.001, 0.1, 10.0])
        p = [1.0, 0.6, 0.01, 2.0, 0.1, 10.0]
        np.testing.assert_allclose(
            biphasic(dose, p), hill(dose, p[:3]) * hill(dose, p[3:])
        )

    def test_flat_second_phase_reduces_to_hill(self):
        """A phase with e_inf=1 is identically 1."""
        dose = np.logspace(-3, 3, 13)
        p = [1.5, 0.2, 1.0, 2.0, 1.0, 10.0]
        np.testing.assert_allclose(biphasic(dose, p), hill(dose, p[:3]))

    def test_undershoots_each_phase(self):
        dose = np.array([1e4])
        p = [1.0, 0.5, 0.01, 1.0, 0.5, 1.0]
        r = biphasic(dose, p)[0]
        assert r < hill(dose, p[:3])[0]
        assert r < hill(dose, p[3:])[0]
        assert r == pytest.approx(0.25, abs=1e-3)


class TestEvaluate:
    """Dispatch by fit type."""

    def test_scalar_returns_float(self):
        out = evaluate("monophasic", 1.0, [1.0, 0.0, 1.0])
        assert isinstance(out, float)
        assert out == pytest.approx(0.5)

    def test_array_returns_array(self):
        out = evaluate("biphasic", np.array([0.1, 1.0]), [1, 0.5, 0.1, 1, 0.5, 10])
        assert out.shape == (2,)

    def test_unknown_fit_type_raises(self):
        with pytest.raises(ValueError, match="fit_type"):
            evaluate("triphasic", 1.0, [1.0, 0.0, 1.0])

    def test_wrong_param_count_raises(self):
        with pytest.raises(ValueError, match="parameters"):
            evaluate("biphasic", 1.0, [1.0, 0.0, 1.0])
