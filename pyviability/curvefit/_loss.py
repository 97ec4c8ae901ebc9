"""Per-residual loss functions.

Residuals are on the fractional (0-1) viability scale, so Huber's
``delta`` is too.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

HUBER = "huber"


def squared_loss(residual: ArrayLike) -> NDArray[np.floating]:
    """``r**2``."""
    r = np.asarray(residual, dtype=np.float64)
    return r * r


def huber_loss(residual: ArrayLike, delta: float = 1.0) -> NDArray[np.floating]:
    """Huber loss: ``0.5 r**2`` inside ``|r| <= delta``, linear outside."""
    r = np.asarray(residual, dtype=np.float64)
    a = np.abs(r)
    return np.where(a <= delta, 0.5 * r * r, delta * (a - 0.5 * delta))


def loss_by_name(
    name: str,
    residual: ArrayLike,
    delta: float = 1.0,
) -> NDArray[np.floating]:
    """Apply the loss selected by *name*.

    ``'huber'`` selects :func:`huber_loss`.  Every other name, including
    ``'hill'``, ``'ols'`` and unrecognised ones, selects :func:`squared_loss`.
    """
    if name == HUBER:
        return huber_loss(residual, delta)
    return squared_loss(residual)
