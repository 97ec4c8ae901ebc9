"""Curve fitting entry points.

The default ``'case1'`` strategy:

1.  Build a crude data-driven guess and score it.
2.  Refine it with projected gradient descent.
3.  If the refinement does not beat the guess by a relative margin of
    ``improvement_tol``, fall back to a mesh search over the whole
    parameter box followed by pattern search.

Gradient descent on this objective often stalls on flat stretches or the
bound penalty; the mesh fallback trades speed for coverage.  The
optimiser is heuristic and makes no claim of a global optimum.

Randomness enters only through mesh subsampling (biphasic grids exceed
the default candidate cap) and the ``'simplex'`` method's random seeds.
Pass a seeded ``numpy.random.Generator`` for reproducible fits.
"""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from pyviability.curvefit._common import FittedCurve, Metrics, PointLike, ViabilityResult, sorted_arrays
from pyviability.curvefit._config import DEFAULT_CONFIG, FitConfig
from pyviability.curvefit._guess import gritty_guess, random_initial_params
from pyviability.curvefit._metrics import metrics
from pyviability.curvefit._models import BIPHASIC, MONOPHASIC, _check_fit_type
from pyviability.curvefit._objective import bounds_arrays, objective_function, project_to_bounds
from pyviability.optimize import mesh_search, nelder_mead, pattern_search, projected_grad_descent

logger = logging.getLogger(__name__)

VALID_METHODS = ("case1", "simplex")


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _fit_case1(
    fit_type: str,
    concentration: NDArray,
    viability: NDArray,
    config: FitConfig,
    algorithm: str,
    rng: np.random.Generator | None,
) -> NDArray[np.floating]:
    def obj(p: NDArray) -> float:
        return objective_function(p, concentration, viability, fit_type, config, algorithm)

    def project(p: NDArray) -> NDArray:
        return project_to_bounds(p, fit_type, config)

    guess = gritty_guess(fit_type, concentration, viability)
    guess_val = obj(guess)

    refined = projected_grad_descent(
        obj, guess,
        project=project,
        alpha=config.gd_alpha,
        eps=config.gd_eps,
        max_iter=config.max_gd_iter,
        backtracking_max=config.gd_backtracking_max,
        improvement_tol=config.improvement_tol,
    )
    refined_val = obj(refined)

    current = refined if refined_val < guess_val else guess
    current_val = min(refined_val, guess_val)

    if current_val < guess_val * (1.0 - config.improvement_tol):
        logger.debug(
            "case1 %s: gradient refinement accepted (%.6g -> %.6g)",
            fit_type, guess_val, current_val,
        )
        return current

    lower, upper, log_dims = bounds_arrays(fit_type, config)
    densities = (
        config.mesh_densities_biphasic if fit_type == BIPHASIC else config.mesh_densities_mono
    )
    mesh = mesh_search(
        obj, guess, lower, upper, densities,
        log_dims=log_dims,
        step_scale=config.mesh_step_scale,
        max_candidates=config.mesh_max_candidates,
        project=project,
        rng=rng,
    )
    logger.debug(
        "case1 %s: gradient refinement stalled at %.6g, mesh best %.6g over %d candidates",
        fit_type, guess_val, mesh.fun, mesh.n_candidates,
    )
    return pattern_search(
        obj, mesh.x, mesh.steps,
        span=config.mesh_span,
        precision=config.mesh_precision,
        project=project,
    )


def _fit_simplex(
    fit_type: str,
    concentration: NDArray,
    viability: NDArray,
    config: FitConfig,
    algorithm: str,
    rng: np.random.Generator | None,
) -> NDArray[np.floating]:
    def obj(p: NDArray) -> float:
        return objective_function(p, concentration, viability, fit_type, config, algorithm)

    seeds = random_initial_params(fit_type, config, rng)
    k = seeds.shape[1]
    # Keep the k + 1 best random draws as the starting simplex
    order = np.argsort([obj(s) for s in seeds], kind="stable")
    simplex = seeds[order[: k + 1]]
    return nelder_mead(
        obj, simplex,
        max_iter=config.max_iterations,
        tol=config.convergence_tolerance,
    )


_STRATEGIES = {
    "case1": _fit_case1,
    "simplex": _fit_simplex,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fit(
    points: Iterable[PointLike],
    *,
    fit_type: str = MONOPHASIC,
    algorithm: str = "huber",
    config: FitConfig = DEFAULT_CONFIG,
    method: str = "case1",
    rng: np.random.Generator | None = None,
) -> NDArray[np.floating]:
    """Fit a monophasic or biphasic viability curve.

    There is no minimum-point gate here; see :func:`analyze`.

    Parameters
    ----------
    points : iterable
        :class:`DataPoint` objects or ``(concentration, viability)`` pairs,
        viability in percent.  Sorted internally.
    fit_type : str
        ``'monophasic'`` or ``'biphasic'``.
    algorithm : str
        ``'huber'`` for robust loss; anything else uses squared error.
    config : FitConfig
        Bounds, weighting and optimiser settings.
    method : str
        ``'case1'`` (guess, gradient refinement, mesh + pattern search
        fallback) or ``'simplex'`` (Nelder–Mead from random seeds).
    rng : numpy.random.Generator or None
        Random source; ``None`` uses a fresh default generator.

    Returns
    -------
    NDArray
        ``[hill_slope, e_inf, ec50]`` or the 6-vector for biphasic fits.

    Examples
    --------
    >>> points = [(0.001, 100), (0.01, 95), (0.1, 50), (1, 10), (10, 5)]
    >>> params = fit(points, fit_type="monophasic", algorithm="ols")
    >>> params.shape
    (3,)
    """
    _check_fit_type(fit_type)
    if method not in _STRATEGIES:
        raise ValueError(f"method must be one of {VALID_METHODS}, got {method!r}")

    concentration, viability = sorted_arrays(points)
    if concentration.size == 0:
        raise ValueError("need at least one data point to fit")

    return _STRATEGIES[method](fit_type, concentration, viability, config, algorithm, rng)


def analyze(
    points: Iterable[PointLike],
    *,
    fit_type: str = MONOPHASIC,
    algorithm: str = "huber",
    config: FitConfig = DEFAULT_CONFIG,
    method: str = "case1",
    rng: np.random.Generator | None = None,
) -> ViabilityResult:
    """Fit a curve and compute its metrics in one step.

    With fewer than ``config.min_points_for_fit`` points no fit is
    attempted: the result has ``curve=None`` and all-``None`` metrics.
    Every call refits from scratch.

    Returns
    -------
    ViabilityResult
    """
    _check_fit_type(fit_type)
    points = list(points)
    concentration, viability = sorted_arrays(points)
    n = int(concentration.size)

    if n < config.min_points_for_fit:
        logger.debug(
            "analyze: %d points, need %d; skipping fit", n, config.min_points_for_fit
        )
        return ViabilityResult(
            curve=None, metrics=Metrics.empty(),
            fit_type=fit_type, algorithm=algorithm, n_points=n,
        )

    pairs = list(zip(concentration, viability))
    params = fit(pairs, fit_type=fit_type, algorithm=algorithm, config=config,
                 method=method, rng=rng)
    curve = FittedCurve.from_array(params, fit_type)
    return ViabilityResult(
        curve=curve,
        metrics=metrics(curve, pairs, config, algorithm),
        fit_type=fit_type,
        algorithm=algorithm,
        n_points=n,
    )
