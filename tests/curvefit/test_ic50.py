"""Tests for the auxiliary monophasic fit behind biphasic IC50."""

import numpy as np
import pytest

from pyviability.curvefit import (
    DataPoint,
    fit_monophasic_for_ic50,
    hill,
    in_bounds,
    r2_for_params,
    sorted_arrays,
)


@pytest.fixture
def scenario_points():
    return [(0.001, 100), (0.01, 95), (0.1, 50), (1, 10), (10, 5)]


class TestFitMonophasicForIC50:

    def test_scenario_ec50(self, scenario_points):
        p = fit_monophasic_for_ic50(scenario_points)
        assert p.shape == (3,)
        assert 0.01 < p[2] < 1.0
        assert in_bounds(p, "monophasic")

    def test_recovers_exact_curve(self):
        conc = 10.0 ** np.arange(-3, 4, dtype=float)
        points = list(zip(conc, hill(conc, [1.5, 0.0, 1.0]) * 100.0))
        p = fit_monophasic_for_ic50(points)
        assert p[2] == pytest.approx(1.0, rel=0.05)
        c, v = sorted_arrays(points)
        _, r2 = r2_for_params(p, "monophasic", c, v)
        assert r2 > 0.999

    def test_loss_name_ignored(self, scenario_points):
        a = fit_monophasic_for_ic50(scenario_points, algorithm="huber")
        b = fit_monophasic_for_ic50(scenario_points, algorithm="ols")
        np.testing.assert_array_equal(a, b)

    def test_accepts_datapoints(self, scenario_points):
        pts = [DataPoint(c, v) for c, v in reversed(scenario_points)]
        np.testing.assert_array_equal(
            fit_monophasic_for_ic50(pts), fit_monophasic_for_ic50(scenario_points)
        )

    @pytest.mark.parametrize("points", [[], [(1.0, 50.0)]])
    def test_too_few_points(self, points):
        assert fit_monophasic_for_ic50(points) is None
