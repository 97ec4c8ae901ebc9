"""Starting values for curve fitting.

:func:`gritty_guess` is the data-driven seed used by the default fitting
strategy.  It is deliberately crude: the optimiser is expected to move
away from it.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyviability.curvefit._config import DEFAULT_CONFIG, FitConfig
from pyviability.curvefit._models import BIPHASIC, _MODEL_MAP, _check_fit_type
from pyviability.curvefit._objective import bounds_arrays


def _interpolate_log_ec50(log_x: NDArray, y: NDArray, midpoint: float = 0.5) -> float:
    """log10 concentration at which *y* first crosses *midpoint*.

    Linear interpolation on the log scale between the first bracketing
    pair; mean log concentration if no pair brackets the midpoint.
    """
    for i in range(len(y) - 1):
        y1, y2 = y[i], y[i + 1]
        if (y1 - midpoint) * (y2 - midpoint) <= 0:
            t = (midpoint - y1) / ((y2 - y1) or 1e-9)
            return float(log_x[i] + t * (log_x[i + 1] - log_x[i]))
    return float(np.mean(log_x))


def gritty_guess(
    fit_type: str,
    concentration: NDArray[np.floating],
    viability: NDArray[np.floating],
) -> NDArray[np.floating]:
    """Crude starting parameters from the empirical curve shape.

    Algorithm
    ---------
    1.  ``e_inf = min(0.9, max(0, 0.9 * min(fraction)))`` with fractions
        clamped to [0, 1].
    2.  ``log10(EC50)`` where the data first cross 50 % viability.
    3.  Biphasic: EC50s at the 25th and 75th percentile log concentrations
        and a second plateau ``min(0.95, max(e_inf + 0.05, 0))``.

    Parameters
    ----------
    fit_type : str
        ``'monophasic'`` or ``'biphasic'``.
    concentration, viability : array
        Points sorted ascending by concentration; viability in percent.

    Returns
    -------
    NDArray
        Length 3 (monophasic) or 6 (biphasic).
    """
    _check_fit_type(fit_type)
    log_x = np.log10(np.asarray(concentration, dtype=np.float64))
    y = np.clip(np.asarray(viability, dtype=np.float64) / 100.0, 0.0, 1.0)
    if log_x.size == 0:
        raise ValueError("need at least one point to build an initial guess")

    e_inf = min(0.9, max(0.0, float(np.min(y)) * 0.9))

    if fit_type == BIPHASIC:
        sorted_x = np.sort(log_x)
        q1 = sorted_x[int(np.floor(sorted_x.size * 0.25))]
        q3 = sorted_x[int(np.floor(sorted_x.size * 0.75))]
        ec1 = max(1e-9, 10.0 ** q1)
        ec2 = max(1e-9, 10.0 ** q3)
        e2 = min(0.95, max(e_inf + 0.05, 0.0))
        return np.array([1.2, e_inf, ec1, 1.5, e2, ec2], dtype=np.float64)

    ec50 = max(1e-9, 10.0 ** _interpolate_log_ec50(log_x, y))
    return np.array([1.5, e_inf, ec50], dtype=np.float64)


def jittered_simplex(
    center: NDArray[np.floating],
    jitter: float = 0.1,
    e_inf_jitter: float = 0.05,
) -> NDArray[np.floating]:
    """Nelder–Mead simplex around *center* by multiplicative jitter.

    Vertex ``j + 1`` scales coordinate ``j`` by ``1 + jitter``.  Plateau
    (``e_inf``) coordinates use the smaller of *e_inf_jitter* and *jitter*
    so they stay inside [0, 1].  Coordinates are floored at 1e-9.

    Returns
    -------
    NDArray, shape ``(k + 1, k)``
    """
    center = np.asarray(center, dtype=np.float64)
    k = center.size
    simplex = np.tile(center, (k + 1, 1))
    for j in range(k):
        local = min(e_inf_jitter, jitter) if j % 3 == 1 else jitter
        simplex[j + 1, j] = max(1e-9, center[j] * (1.0 + local))
    return simplex


def random_initial_params(
    fit_type: str,
    config: FitConfig = DEFAULT_CONFIG,
    rng: np.random.Generator | None = None,
) -> NDArray[np.floating]:
    """Random parameter vectors drawn uniformly inside the bounds.

    Draws ``config.initial_param_sets`` vectors (EC50 uniform in log10
    space).  If that is fewer than ``k + 1``, the first draw is jittered
    one coordinate at a time until there are enough vertices for a simplex.

    Returns
    -------
    NDArray, shape ``(max(initial_param_sets, k + 1), k)``
    """
    _check_fit_type(fit_type)
    if rng is None:
        rng = np.random.default_rng()

    lower, upper, log_dims = bounds_arrays(fit_type, config)
    k = len(_MODEL_MAP[fit_type][1])
    draws = rng.uniform(lower, upper, size=(config.initial_param_sets, k))
    for i in log_dims:
        draws[:, i] = 10.0 ** draws[:, i]

    rows = list(draws)
    for m in range(max(0, k + 1 - len(rows))):
        p = draws[0].copy()
        j = m % k
        p[j] *= 1.0 + (config.jitter_e_inf if j % 3 == 1 else config.jitter_other)
        if j in log_dims:
            p[j] = max(p[j], 1e-6)
        rows.append(p)
    return np.array(rows, dtype=np.float64)
