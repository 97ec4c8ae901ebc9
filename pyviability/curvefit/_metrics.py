"""Goodness-of-fit and pharmacological summaries of a fitted curve.

R², AUC and Emax are on the percent-viability scale of the input data.
Undefined quantities are reported as ``None`` rather than raising.
"""

from __future__ import annotations

from typing import Callable, Iterable

import numpy as np
from numpy.typing import NDArray
from scipy.integrate import trapezoid

from pyviability.curvefit._common import FittedCurve, Metrics, PointLike, sorted_arrays
from pyviability.curvefit._config import DEFAULT_CONFIG, EMAX_FROM_CURVE_AT_MAX, FitConfig
from pyviability.curvefit._models import BIPHASIC, MONOPHASIC, _MODEL_MAP, _check_params

IC50Helper = Callable[[Iterable[PointLike], FitConfig, str], "NDArray | None"]


def r2_for_params(
    params: NDArray[np.floating],
    fit_type: str,
    concentration: NDArray[np.floating],
    viability: NDArray[np.floating],
) -> tuple[float, float]:
    """Unweighted SSE and R² on the percent scale.

    Returns
    -------
    (sse, r_squared)
        ``(inf, -inf)`` for empty data; R² is 0 when the data have no
        variance.
    """
    viability = np.asarray(viability, dtype=np.float64)
    if viability.size == 0:
        return float("inf"), float("-inf")

    func, _ = _MODEL_MAP[fit_type]
    pred = func(concentration, _check_params(fit_type, params)) * 100.0
    ssr = float(np.sum((viability - pred) ** 2))
    sst = float(np.sum((viability - np.mean(viability)) ** 2))
    r2 = 1.0 - ssr / sst if sst > 0 else 0.0
    return ssr, r2


def ic50_from_params(params: NDArray[np.floating]) -> float | None:
    """Closed-form IC50 of a monophasic curve.

    ``ec50 * (0.5 / (0.5 - e_inf)) ** (1 / hill_slope)``, defined only when
    the curve actually drops below 50 % (``e_inf < 0.5``).
    """
    hs, e_inf, ec50 = _check_params(MONOPHASIC, params)
    if not 0.5 - e_inf > 0 or hs == 0:
        return None
    with np.errstate(over="ignore", invalid="ignore"):
        ic50 = float(ec50 * np.power(0.5 / (0.5 - e_inf), 1.0 / hs))
    return ic50 if np.isfinite(ic50) else None


def auc_log_trapezoid(
    concentration: NDArray[np.floating],
    viability: NDArray[np.floating],
) -> float:
    """Trapezoidal area under % viability (capped at 100) over log10 dose, / 100.

    Points must be sorted by concentration.  The area is not normalised by
    the tested range.
    """
    y = np.minimum(np.asarray(viability, dtype=np.float64), 100.0)
    x = np.log10(np.asarray(concentration, dtype=np.float64))
    if x.size < 2:
        return 0.0
    return float(trapezoid(y, x)) / 100.0


def emax_at_max(
    curve: FittedCurve,
    concentration: NDArray[np.floating],
    config: FitConfig = DEFAULT_CONFIG,
) -> float | None:
    """Fitted % viability at the highest tested concentration.

    Only the ``'fromCurveAtMax'`` mode is defined; other modes give ``None``.
    """
    if config.emax_mode != EMAX_FROM_CURVE_AT_MAX:
        return None
    max_conc = float(np.max(concentration))
    return float(curve.predict(max_conc)) * 100.0


def metrics(
    curve: FittedCurve | None,
    points: Iterable[PointLike],
    config: FitConfig = DEFAULT_CONFIG,
    algorithm: str = "huber",
    ic50_helper: IC50Helper | None = None,
) -> Metrics:
    """Compute R², IC50, AUC and Emax for a fitted curve.

    Parameters
    ----------
    curve : FittedCurve or None
        The current fit.
    points : iterable
        :class:`DataPoint` objects or ``(concentration, viability)`` pairs.
        Sorted internally.
    config : FitConfig
        ``min_points_for_fit`` and ``emax_mode`` are read from here.
    algorithm : str
        Loss used by the main fit, forwarded to *ic50_helper*.
    ic50_helper : callable or None
        ``helper(points, config, algorithm) -> params | None`` returning
        monophasic parameters whose EC50 is reported as the IC50 of a
        biphasic curve.  Defaults to
        :func:`~pyviability.curvefit.fit_monophasic_for_ic50`.

    Returns
    -------
    Metrics
        All ``None`` when *curve* is ``None`` or there are fewer than
        ``min_points_for_fit`` points.
    """
    concentration, viability = sorted_arrays(points)
    if curve is None or concentration.size < config.min_points_for_fit:
        return Metrics.empty()

    _, r2 = r2_for_params(curve.to_array(), curve.fit_type, concentration, viability)

    ic50: float | None = None
    if curve.fit_type == BIPHASIC:
        if ic50_helper is None:
            from pyviability.curvefit._ic50 import fit_monophasic_for_ic50

            ic50_helper = fit_monophasic_for_ic50
        mono = ic50_helper(list(zip(concentration, viability)), config, algorithm)
        if mono is not None:
            ic50 = float(mono[2])
    else:
        ic50 = ic50_from_params(curve.to_array())

    return Metrics(
        r_squared=r2,
        ic50=ic50,
        auc=auc_log_trapezoid(concentration, viability),
        emax=emax_at_max(curve, concentration, config),
    )
