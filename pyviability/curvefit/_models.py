"""Dose-response model functions.

Both models return the *fraction* of viability (1.0 = untreated) at the
given concentrations.

Monophasic (Hill) model, parameters ``[hill_slope, e_inf, ec50]``:

.. math::
    f(x) = E_\\infty + \\frac{1 - E_\\infty}{1 + 10^{h (\\log_{10} x - \\log_{10} EC_{50})}}

The upper asymptote is fixed at 1.0; ``e_inf`` is the fraction remaining
at saturating dose.  A positive ``hill_slope`` gives a decreasing curve.

Biphasic model, parameters ``[h1, e_inf1, ec50_1, h2, e_inf2, ec50_2]``:
the product of two Hill phases.  It is not renormalised, so the product
can fall below either phase alone.

Concentration 0 is handled via IEEE 754 arithmetic: ``log10(0) = -inf``
and the curve evaluates to its upper asymptote.
"""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

MONOPHASIC = "monophasic"
BIPHASIC = "biphasic"


def _safe_log10(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """log10 with non-positive values mapped to -inf, without warnings."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(x > 0, np.log10(x), -np.inf)


def hill(
    concentration: ArrayLike,
    params: Sequence[float],
) -> NDArray[np.floating]:
    """Monophasic Hill model.

    Parameters
    ----------
    concentration : array
        Concentrations (µM).  May contain zeros.
    params : sequence of 3 floats
        ``[hill_slope, e_inf, ec50]``.

    Returns
    -------
    NDArray
        Predicted viability fraction.
    """
    hs, e_inf, ec50 = params
    log_x = _safe_log10(np.asarray(concentration, dtype=np.float64))
    log_ec50 = _safe_log10(np.float64(ec50))
    with np.errstate(over="ignore", invalid="ignore"):
        return e_inf + (1.0 - e_inf) / (1.0 + np.power(10.0, hs * (log_x - log_ec50)))


def biphasic(
    concentration: ArrayLike,
    params: Sequence[float],
) -> NDArray[np.floating]:
    """Biphasic model: product of two Hill phases.

    Parameters
    ----------
    concentration : array
        Concentrations (µM).
    params : sequence of 6 floats
        ``[h1, e_inf1, ec50_1, h2, e_inf2, ec50_2]``.
    """
    return hill(concentration, params[:3]) * hill(concentration, params[3:6])


# ---------------------------------------------------------------------------
# Model registry: fit type -> (function, parameter_names)
# ---------------------------------------------------------------------------

_MODEL_MAP: dict[str, tuple[Callable, list[str]]] = {
    MONOPHASIC: (hill, ["hill_slope", "e_inf", "ec50"]),
    BIPHASIC: (
        biphasic,
        ["hill_slope1", "e_inf1", "ec50_1", "hill_slope2", "e_inf2", "ec50_2"],
    ),
}

VALID_FIT_TYPES = tuple(_MODEL_MAP.keys())


def _check_fit_type(fit_type: str) -> None:
    if fit_type not in _MODEL_MAP:
        raise ValueError(f"fit_type must be one of {VALID_FIT_TYPES}, got {fit_type!r}")


def _check_params(fit_type: str, params: Sequence[float]) -> NDArray[np.floating]:
    _check_fit_type(fit_type)
    p = np.asarray(params, dtype=np.float64)
    n_params = len(_MODEL_MAP[fit_type][1])
    if p.shape != (n_params,):
        raise ValueError(
            f"{fit_type} model needs {n_params} parameters, got shape {p.shape}"
        )
    return p


def evaluate(
    fit_type: str,
    concentration: ArrayLike,
    params: Sequence[float],
) -> float | NDArray[np.floating]:
    """Evaluate the model selected by *fit_type*.

    Returns a float for scalar *concentration*, otherwise an array.
    """
    p = _check_params(fit_type, params)
    func, _ = _MODEL_MAP[fit_type]
    out = func(concentration, p)
    if np.ndim(concentration) == 0:
        return float(out)
    return out
