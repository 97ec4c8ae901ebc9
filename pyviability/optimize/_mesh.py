"""Coarse mesh search followed by coordinate pattern search.

Used as the coverage fallback when local refinement stalls.  The mesh
spans the full box of bounds, so it does not depend on the quality of the
starting guess; pattern search then polishes the best mesh point.

Candidate subsampling is the only source of randomness here.  Pass a
seeded ``numpy.random.Generator`` for reproducible results.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeshResult:
    """Best point of a mesh search plus the pattern-search step sizes."""

    x: NDArray[np.floating]
    fun: float
    steps: NDArray[np.floating]  # per-dimension base step for pattern search
    n_candidates: int  # candidates actually evaluated (guess excluded)


def _identity(p: NDArray) -> NDArray:
    return p


def mesh_candidates(
    lower: Sequence[float],
    upper: Sequence[float],
    densities: Sequence[int],
    *,
    log_dims: Sequence[int] = (),
) -> NDArray[np.floating]:
    """Full cartesian grid over the box ``[lower, upper]``.

    Dimension ``i`` gets ``densities[i] + 1`` evenly spaced levels.  For
    dimensions listed in *log_dims* the bounds are log10 values; the
    levels are exponentiated after gridding.

    Returns
    -------
    NDArray, shape ``(prod(densities + 1), k)``
    """
    lower = np.asarray(lower, dtype=np.float64)
    upper = np.asarray(upper, dtype=np.float64)
    densities = [int(d) for d in densities]
    if not (len(lower) == len(upper) == len(densities)):
        raise ValueError("lower, upper and densities must have the same length")
    if any(d < 1 for d in densities):
        raise ValueError(f"densities must be >= 1, got {densities}")

    levels = [
        lo + (np.arange(d + 1) / d) * (hi - lo)
        for lo, hi, d in zip(lower, upper, densities)
    ]
    grid = np.array(list(itertools.product(*levels)), dtype=np.float64)
    for i in log_dims:
        grid[:, i] = 10.0 ** grid[:, i]
    return grid


def mesh_search(
    fun: Callable[[NDArray], float],
    guess: NDArray[np.floating],
    lower: Sequence[float],
    upper: Sequence[float],
    densities: Sequence[int],
    *,
    log_dims: Sequence[int] = (),
    step_scale: float = 0.5,
    max_candidates: int = 5000,
    project: Callable[[NDArray], NDArray] | None = None,
    rng: np.random.Generator | None = None,
) -> MeshResult:
    """Evaluate *fun* on a projected grid and return the best point.

    *guess* is evaluated first and only replaced by a strictly better
    candidate.  Grids larger than *max_candidates* are uniformly
    subsampled without replacement.

    Parameters
    ----------
    fun : callable
        Scalar objective.
    guess : array
        Incumbent point.
    lower, upper : sequence of float
        Box bounds (log10 values for *log_dims*).
    densities : sequence of int
        Grid intervals per dimension.
    log_dims : sequence of int
        Dimensions gridded in log10 space.
    step_scale : float
        Pattern-search step for dimension ``i`` is ``step_scale / densities[i]``.
    max_candidates : int
        Subsampling cap.
    project : callable or None
        Projection applied to each candidate.
    rng : numpy.random.Generator or None
        Source for subsampling.  ``None`` uses a fresh default generator.

    Returns
    -------
    MeshResult
    """
    if project is None:
        project = _identity

    grid = mesh_candidates(lower, upper, densities, log_dims=log_dims)
    n_grid = grid.shape[0]
    if n_grid > max_candidates:
        if rng is None:
            rng = np.random.default_rng()
        idx = rng.choice(n_grid, size=int(max_candidates), replace=False)
        grid = grid[idx]
        logger.debug("mesh_search: subsampled %d of %d candidates", len(idx), n_grid)

    best_x = np.asarray(guess, dtype=np.float64)
    best_f = float(fun(best_x))
    for cand in grid:
        cand = project(cand)
        val = float(fun(cand))
        if val < best_f:
            best_x, best_f = cand, val

    steps = step_scale / np.asarray(densities, dtype=np.float64)
    return MeshResult(x=best_x, fun=best_f, steps=steps, n_candidates=grid.shape[0])


def pattern_search(
    fun: Callable[[NDArray], float],
    x0: NDArray[np.floating],
    steps: Sequence[float],
    *,
    span: float = 1.0,
    precision: float = 1e-4,
    project: Callable[[NDArray], NDArray] | None = None,
) -> NDArray[np.floating]:
    """Coordinate pattern search with span halving.

    Each sweep tries ``x[i] +/- span * steps[i]`` for every dimension and
    accepts any strictly improving (projected) move immediately.  A sweep
    with no improvement halves *span*; the search ends once
    ``span <= precision``.
    """
    if project is None:
        project = _identity

    x = np.array(x0, dtype=np.float64)
    fx = float(fun(x))
    steps = np.asarray(steps, dtype=np.float64)
    if steps.shape != x.shape:
        raise ValueError(f"steps must have shape {x.shape}, got {steps.shape}")

    n_sweeps = 0
    while span > precision:
        n_sweeps += 1
        improved = False
        for i in range(x.size):
            for direction in (1.0, -1.0):
                trial = x.copy()
                trial[i] += direction * span * steps[i]
                trial = project(trial)
                val = float(fun(trial))
                if val < fx:
                    x, fx = trial, val
                    improved = True
        if not improved:
            span *= 0.5

    logger.debug("pattern_search finished after %d sweeps (f=%.6g)", n_sweeps, fx)
    return x
