"""Auxiliary monophasic fit used to report IC50 for biphasic curves.

A biphasic curve has no single closed-form IC50, so the EC50 of a small
multi-start monophasic fit is reported instead.  The helper always scores
with plain squared error, whatever loss the main fit used.
"""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from pyviability.curvefit._common import PointLike, sorted_arrays
from pyviability.curvefit._config import DEFAULT_CONFIG, FitConfig
from pyviability.curvefit._guess import jittered_simplex
from pyviability.curvefit._metrics import r2_for_params
from pyviability.curvefit._models import MONOPHASIC
from pyviability.curvefit._objective import objective_function
from pyviability.optimize import nelder_mead

logger = logging.getLogger(__name__)


def _seeds(concentration: NDArray, viability: NDArray) -> list[NDArray]:
    log_x = np.log10(concentration)
    y = np.clip(viability / 100.0, 0.0, 1.0)
    geo_ec50 = 10.0 ** float(np.mean(log_x))
    return [
        np.array([1.5, min(0.9, max(0.0, float(np.min(y)) * 0.9)), max(1e-6, geo_ec50)]),
        np.array([1.0, 0.1, 10.0 ** -1.0]),
        np.array([2.5, 0.2, 10.0 ** 0.0]),
    ]


def fit_monophasic_for_ic50(
    points: Iterable[PointLike],
    config: FitConfig = DEFAULT_CONFIG,
    algorithm: str | None = None,
) -> NDArray[np.floating] | None:
    """Multi-start Nelder–Mead monophasic fit.

    Three seeds (one data-derived, two fixed) are each expanded into a
    jittered simplex and minimised against the squared-error monophasic
    objective.  The result with the lowest percent-scale SSE wins.

    Parameters
    ----------
    points : iterable
        :class:`DataPoint` objects or ``(concentration, viability)`` pairs.
    config : FitConfig
        Bounds, weights, jitter and Nelder–Mead settings.
    algorithm : str or None
        Ignored; present so the helper matches the ``ic50_helper``
        signature of :func:`metrics`.

    Returns
    -------
    NDArray or None
        ``[hill_slope, e_inf, ec50]``, or ``None`` for fewer than 2 points.
    """
    concentration, viability = sorted_arrays(points)
    if concentration.size < 2:
        return None

    def obj(p: NDArray) -> float:
        return objective_function(p, concentration, viability, MONOPHASIC, config, "ols")

    best: NDArray | None = None
    best_sse = np.inf
    for i, seed in enumerate(_seeds(concentration, viability)):
        simplex = jittered_simplex(seed, config.jitter_other, config.jitter_e_inf)
        params = nelder_mead(
            obj, simplex,
            max_iter=config.max_iterations,
            tol=config.convergence_tolerance,
        )
        sse, _ = r2_for_params(params, MONOPHASIC, concentration, viability)
        if best is None or sse < best_sse:
            best, best_sse = params, sse
            logger.debug("ic50 helper: seed %d improved SSE to %.6g", i, sse)
    return best
