"""Shared data and result types for viability curve fitting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyviability.curvefit._config import DEFAULT_CONFIG, FitConfig


@dataclass(frozen=True)
class DataPoint:
    """One observation: concentration (µM) and % viability."""

    concentration: float
    viability: float  # nominally 0-100


PointLike = Union[DataPoint, Sequence[float]]


def _as_arrays(points: Iterable[PointLike]) -> tuple[NDArray, NDArray]:
    """Split points into concentration and viability arrays (arrival order).

    Raises
    ------
    ValueError
        If a concentration is not positive and finite, or a viability is
        not finite.
    """
    conc: list[float] = []
    viab: list[float] = []
    for p in points:
        if isinstance(p, DataPoint):
            c, v = p.concentration, p.viability
        else:
            c, v = p
        conc.append(float(c))
        viab.append(float(v))

    concentration = np.array(conc, dtype=np.float64)
    viability = np.array(viab, dtype=np.float64)
    if not np.all(np.isfinite(concentration)) or np.any(concentration <= 0):
        raise ValueError("concentrations must be positive and finite")
    if not np.all(np.isfinite(viability)):
        raise ValueError("viabilities must be finite")
    return concentration, viability


def sorted_arrays(points: Iterable[PointLike]) -> tuple[NDArray, NDArray]:
    """Concentration and viability arrays sorted ascending by concentration.

    The sort is stable: points at the same concentration keep arrival order.
    """
    concentration, viability = _as_arrays(points)
    order = np.argsort(concentration, kind="stable")
    return concentration[order], viability[order]


def sort_points(points: Iterable[PointLike]) -> list[DataPoint]:
    """Sorted copy of *points* as :class:`DataPoint` objects."""
    concentration, viability = sorted_arrays(points)
    return [DataPoint(float(c), float(v)) for c, v in zip(concentration, viability)]


@dataclass(frozen=True)
class FittedCurve:
    """A fitted monophasic or biphasic curve.

    Parameters are stored in model order, see :data:`_MODEL_MAP`.
    """

    fit_type: str
    params: tuple[float, ...]

    def __post_init__(self) -> None:
        from pyviability.curvefit._models import _check_params

        p = _check_params(self.fit_type, self.params)
        object.__setattr__(self, "params", tuple(float(x) for x in p))

    def predict(self, concentration: ArrayLike) -> NDArray[np.floating]:
        """Predicted viability fraction at *concentration*."""
        from pyviability.curvefit._models import _MODEL_MAP

        func, _ = _MODEL_MAP[self.fit_type]
        return func(concentration, self.params)

    def to_array(self) -> NDArray[np.floating]:
        """Return parameter vector in model order."""
        return np.array(self.params, dtype=np.float64)

    @staticmethod
    def from_array(params: ArrayLike, fit_type: str) -> FittedCurve:
        """Construct from parameter vector and fit type."""
        return FittedCurve(fit_type=fit_type, params=tuple(np.asarray(params, dtype=float)))

    def named_params(self) -> dict[str, float]:
        """Parameters keyed by name."""
        from pyviability.curvefit._models import _MODEL_MAP

        _, names = _MODEL_MAP[self.fit_type]
        return dict(zip(names, self.params))

    def sample(
        self,
        conc_min: float = 1e-3,
        conc_max: float = 1e2,
        resolution: int | None = None,
        config: FitConfig = DEFAULT_CONFIG,
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Log-spaced curve samples for plotting.

        *resolution* defaults to ``config.curve_resolution``.

        Returns
        -------
        (concentration, viability_percent)
            ``resolution + 1`` points from *conc_min* to *conc_max*.
        """
        if not 0 < conc_min < conc_max:
            raise ValueError(
                f"need 0 < conc_min < conc_max, got {conc_min} and {conc_max}"
            )
        if resolution is None:
            resolution = config.curve_resolution
        if resolution < 1:
            raise ValueError(f"resolution must be >= 1, got {resolution}")
        conc = np.logspace(np.log10(conc_min), np.log10(conc_max), resolution + 1)
        return conc, self.predict(conc) * 100.0


@dataclass(frozen=True)
class Metrics:
    """Goodness-of-fit and pharmacological summaries of a fitted curve.

    Any field may be ``None`` when it is undefined for the data or fit.
    """

    r_squared: float | None
    ic50: float | None  # µM
    auc: float | None  # area over log10(concentration), viability / 100
    emax: float | None  # % viability at the highest tested dose

    @staticmethod
    def empty() -> Metrics:
        """All-``None`` metrics (no fit)."""
        return Metrics(r_squared=None, ic50=None, auc=None, emax=None)

    def summary(self) -> str:
        """Human-readable summary."""

        def fmt(val: float | None, pattern: str) -> str:
            return "N/A" if val is None else format(val, pattern)

        return "\n".join([
            f"  R-squared = {fmt(self.r_squared, '.4f')}",
            f"  IC50      = {fmt(self.ic50, '.2e')}",
            f"  AUC       = {fmt(self.auc, '.3f')}",
            f"  Emax      = {fmt(self.emax, '.3f')}",
        ])


@dataclass(frozen=True)
class ViabilityResult:
    """Result of fitting a viability dataset and computing its metrics."""

    curve: FittedCurve | None  # None when below min_points_for_fit
    metrics: Metrics
    fit_type: str
    algorithm: str
    n_points: int

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Viability fit: {self.fit_type} ({self.algorithm})",
            f"  n = {self.n_points}",
            "",
        ]
        if self.curve is None:
            lines.append("  No fit (not enough points)")
        else:
            lines.append("Parameter estimates:")
            for name, val in self.curve.named_params().items():
                lines.append(f"  {name:>12s} = {val:>12.6g}")
        lines.append("")
        lines.append("Metrics:")
        lines.append(self.metrics.summary())
        return "\n".join(lines)
