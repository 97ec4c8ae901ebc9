"""Weighted, bounds-gated fitting objective and bound projection.

The objective is a hard-constrained problem expressed for unconstrained
optimisers: any parameter outside its bound returns :data:`PENALTY`
without evaluating residuals.  EC50 bounds are checked on ``log10(ec50)``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyviability.curvefit._config import DEFAULT_CONFIG, FitConfig
from pyviability.curvefit._loss import loss_by_name
from pyviability.curvefit._models import BIPHASIC, MONOPHASIC, _MODEL_MAP, _check_params

PENALTY = 1e12


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

def bounds_arrays(
    fit_type: str,
    config: FitConfig = DEFAULT_CONFIG,
) -> tuple[NDArray[np.floating], NDArray[np.floating], tuple[int, ...]]:
    """Per-parameter ``(lower, upper, log_dims)``.

    Entries for EC50 dimensions (listed in *log_dims*) are log10 values.
    """
    per_phase_lo = [config.hill_slope_bounds[0], config.e_inf_bounds[0], config.log10_ec50_bounds[0]]
    per_phase_hi = [config.hill_slope_bounds[1], config.e_inf_bounds[1], config.log10_ec50_bounds[1]]
    n_phases = 2 if fit_type == BIPHASIC else 1
    lower = np.array(per_phase_lo * n_phases, dtype=np.float64)
    upper = np.array(per_phase_hi * n_phases, dtype=np.float64)
    log_dims = tuple(3 * k + 2 for k in range(n_phases))
    return lower, upper, log_dims


def _linear_bounds(
    fit_type: str,
    config: FitConfig,
) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
    # log10(ec50) in [lo, hi]  <=>  ec50 in [10**lo, 10**hi]; comparing on
    # the linear side keeps projected values exactly on the boundary.
    lower, upper, log_dims = bounds_arrays(fit_type, config)
    for i in log_dims:
        lower[i] = 10.0 ** lower[i]
        upper[i] = 10.0 ** upper[i]
    return lower, upper


def in_bounds(
    params: NDArray[np.floating],
    fit_type: str,
    config: FitConfig = DEFAULT_CONFIG,
) -> bool:
    """True if every parameter lies inside its (inclusive) bound."""
    p = _check_params(fit_type, params)
    lower, upper = _linear_bounds(fit_type, config)
    return bool(np.all((p >= lower) & (p <= upper)))


def project_to_bounds(
    params: NDArray[np.floating],
    fit_type: str,
    config: FitConfig = DEFAULT_CONFIG,
) -> NDArray[np.floating]:
    """Clip parameters into bounds (EC50 against its log10 bounds).

    NaN entries, and non-positive EC50 values, map to the lower bound.
    Idempotent.
    """
    p = _check_params(fit_type, params)
    lower, upper = _linear_bounds(fit_type, config)
    return np.clip(np.where(np.isnan(p), lower, p), lower, upper)


# ---------------------------------------------------------------------------
# Objective
# ---------------------------------------------------------------------------

def point_weights(
    n: int,
    fit_type: str,
    config: FitConfig = DEFAULT_CONFIG,
) -> NDArray[np.floating]:
    """Positional weights for *n* concentration-sorted points.

    The first two and last two points get ``endpoints_weight``.  For
    monophasic fits with midpoint weighting enabled, point ``n // 2`` gets
    ``midpoint_weight``, replacing any endpoint weight.
    """
    w = np.ones(n, dtype=np.float64)
    if n == 0:
        return w
    w[[0, min(1, n - 1), max(n - 2, 0), n - 1]] = config.endpoints_weight
    if fit_type == MONOPHASIC and config.midpoint_weighting:
        w[n // 2] = config.midpoint_weight
    return w


def objective_function(
    params: NDArray[np.floating],
    concentration: NDArray[np.floating],
    viability: NDArray[np.floating],
    fit_type: str,
    config: FitConfig = DEFAULT_CONFIG,
    algorithm: str = "huber",
) -> float:
    """Weighted loss of the model against sorted data.

    Parameters
    ----------
    params : array
        Model parameter vector.
    concentration, viability : array
        Points sorted ascending by concentration; viability in percent.
    fit_type : str
        ``'monophasic'`` or ``'biphasic'``.
    config : FitConfig
        Bounds, weights and Huber delta.
    algorithm : str
        Loss name, see :func:`loss_by_name`.

    Returns
    -------
    float
        :data:`PENALTY` if any parameter is out of bounds, else
        ``sum(w_i * loss(obs_i / 100 - pred_i))``.
    """
    if not in_bounds(params, fit_type, config):
        return PENALTY

    func, _ = _MODEL_MAP[fit_type]
    pred = func(concentration, params)
    resid = np.asarray(viability, dtype=np.float64) / 100.0 - pred
    w = point_weights(len(resid), fit_type, config)
    return float(np.sum(w * loss_by_name(algorithm, resid, config.huber_delta)))
