"""Derivative-free Nelder–Mead simplex minimisation.

A plain implementation of the classic reflect / expand / contract / shrink
scheme with the textbook coefficients.  It works on any scalar objective
and a caller-supplied starting simplex, which lets callers control the
scale of the initial search (see :func:`pyviability.curvefit.jittered_simplex`).
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Reflection, expansion, contraction, shrink
ALPHA = 1.0
GAMMA = 2.0
RHO = 0.5
SIGMA = 0.5


def nelder_mead(
    fun: Callable[[NDArray], float],
    initial_simplex: NDArray[np.floating],
    *,
    max_iter: int = 100000,
    tol: float = 1e-6,
) -> NDArray[np.floating]:
    """Minimise *fun* starting from *initial_simplex*.

    Parameters
    ----------
    fun : callable
        Scalar objective ``f(x) -> float``.
    initial_simplex : array, shape ``(k + 1, k)``
        Starting vertices.
    max_iter : int
        Iteration cap.
    tol : float
        Stop once ``f(worst) - f(best) < tol``.

    Returns
    -------
    NDArray
        Best vertex found.
    """
    simplex = np.array(initial_simplex, dtype=np.float64)
    if simplex.ndim != 2 or simplex.shape[0] != simplex.shape[1] + 1:
        raise ValueError(
            f"initial_simplex must have shape (k + 1, k), got {simplex.shape}"
        )

    values = np.array([fun(v) for v in simplex], dtype=np.float64)

    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        order = np.argsort(values, kind="stable")
        simplex = simplex[order]
        values = values[order]

        best_val = values[0]
        second_worst_val = values[-2]
        worst, worst_val = simplex[-1], values[-1]

        centroid = simplex[:-1].mean(axis=0)

        reflect = centroid + ALPHA * (centroid - worst)
        f_reflect = fun(reflect)

        if f_reflect < best_val:
            expand = centroid + GAMMA * (reflect - centroid)
            f_expand = fun(expand)
            if f_expand < f_reflect:
                simplex[-1], values[-1] = expand, f_expand
            else:
                simplex[-1], values[-1] = reflect, f_reflect
        elif f_reflect < second_worst_val:
            simplex[-1], values[-1] = reflect, f_reflect
        else:
            # Outside contraction if the reflection beat the worst vertex
            if f_reflect < worst_val:
                contract = centroid + RHO * (reflect - centroid)
            else:
                contract = centroid + RHO * (worst - centroid)
            f_contract = fun(contract)
            if f_contract < worst_val:
                simplex[-1], values[-1] = contract, f_contract
            else:
                simplex[1:] = simplex[0] + SIGMA * (simplex[1:] - simplex[0])
                values[1:] = [fun(v) for v in simplex[1:]]

        if np.max(values) - np.min(values) < tol:
            break

    best = int(np.argmin(values))
    logger.debug(
        "nelder_mead stopped after %d iterations (spread=%.3g, best=%.6g)",
        n_iter, float(np.max(values) - np.min(values)), float(values[best]),
    )
    return simplex[best].copy()
