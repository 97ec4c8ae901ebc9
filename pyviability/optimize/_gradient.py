"""Bounded local refinement by projected finite-difference gradient descent."""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Hard ceiling on descent iterations regardless of configuration
MAX_GD_ITER_CAP = 400


def _identity(p: NDArray) -> NDArray:
    return p


def finite_diff_grad(
    fun: Callable[[NDArray], float],
    p: NDArray[np.floating],
    eps: float = 1e-6,
) -> tuple[float, NDArray[np.floating]]:
    """Forward-difference gradient with a relative step.

    Each coordinate is perturbed to ``p_i * (1 + eps)``, or to ``eps`` when
    ``p_i == 0``.

    Returns
    -------
    (f0, grad)
        Objective value at *p* and the gradient estimate.
    """
    p = np.asarray(p, dtype=np.float64)
    f0 = float(fun(p))
    grad = np.zeros_like(p)
    for i in range(p.size):
        pp = p.copy()
        pp[i] = pp[i] * (1.0 + eps) + (eps if p[i] == 0 else 0.0)
        grad[i] = (fun(pp) - f0) / (pp[i] - p[i])
    return f0, grad


def projected_grad_descent(
    fun: Callable[[NDArray], float],
    x0: NDArray[np.floating],
    *,
    project: Callable[[NDArray], NDArray] | None = None,
    alpha: float = 1.0,
    eps: float = 1e-6,
    max_iter: int = 200,
    backtracking_max: int = 10,
    improvement_tol: float = 1e-6,
) -> NDArray[np.floating]:
    """Steepest descent with projection onto the feasible set.

    Algorithm
    ---------
    1.  Project *x0*.
    2.  Take the full step ``-alpha * grad`` and project the trial point.
    3.  While the trial is worse than the current point, halve ``alpha``
        and re-step from the current point (at most *backtracking_max*
        times).  The reduced ``alpha`` carries over to later iterations.
    4.  Accept the trial only if it improves by more than
        *improvement_tol*; otherwise stop.

    The returned point is never worse than the projected start.
    """
    if project is None:
        project = _identity

    p = project(np.asarray(x0, dtype=np.float64))
    f_prev = float(fun(p))
    n_iter = min(MAX_GD_ITER_CAP, int(max_iter))

    for k in range(n_iter):
        f0, g = finite_diff_grad(fun, p, eps)
        trial = project(p - alpha * g)
        f_trial = float(fun(trial))

        bt = 0
        while f_trial > f0 and bt < backtracking_max:
            alpha *= 0.5
            trial = project(p - alpha * g)
            f_trial = float(fun(trial))
            bt += 1

        if f_trial < f_prev - improvement_tol:
            p = trial
            f_prev = f_trial
        else:
            logger.debug(
                "projected_grad_descent stalled at iteration %d (f=%.6g, alpha=%.3g)",
                k, f_prev, alpha,
            )
            break

    return p
