"""Fitting configuration.

All tunables live in one flat, frozen :class:`FitConfig`.  Defaults are
applied at construction and the whole object is validated once, so the
fitting code never needs fallback chains.  Use :func:`dataclasses.replace`
to derive variants, or :meth:`FitConfig.from_dict` to resolve the grouped
camelCase layout used by front-end configuration files.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

EMAX_FROM_CURVE_AT_MAX = "fromCurveAtMax"


@dataclass(frozen=True)
class FitConfig:
    """Options for fitting and metric computation.

    Bounds on EC50 are expressed as ``log10(ec50)``; the other bounds are
    linear.  ``huber_delta`` is on the fractional (0-1) viability scale.
    """

    # fitting
    min_points_for_fit: int = 5
    emax_mode: str = EMAX_FROM_CURVE_AT_MAX

    # bounds
    hill_slope_bounds: tuple[float, float] = (0.0, 5.0)
    e_inf_bounds: tuple[float, float] = (0.0, 1.0)
    log10_ec50_bounds: tuple[float, float] = (-8.0, 8.0)

    # optimizer
    max_iterations: int = 100000
    convergence_tolerance: float = 1e-6
    max_gd_iter: int = 200
    gd_alpha: float = 1.0
    gd_eps: float = 1e-6
    gd_backtracking_max: int = 10
    improvement_tol: float = 1e-6

    # robust
    huber_delta: float = 0.05
    endpoints_weight: float = 10.0
    midpoint_weight: float = 10.0
    midpoint_weighting: bool = True

    # mesh
    mesh_densities_mono: tuple[int, ...] = (2, 10, 5)
    mesh_densities_biphasic: tuple[int, ...] = (2, 10, 5, 2, 10, 5)
    mesh_step_scale: float = 0.5
    mesh_span: float = 1.0
    mesh_precision: float = 1e-4
    mesh_max_candidates: int = 5000

    # initial parameters
    initial_param_sets: int = 8
    jitter_e_inf: float = 0.02
    jitter_other: float = 0.1

    # rendering
    curve_resolution: int = 200

    def __post_init__(self) -> None:
        for name in ("hill_slope_bounds", "e_inf_bounds", "log10_ec50_bounds"):
            lo, hi = getattr(self, name)
            if not lo <= hi:
                raise ValueError(f"{name} must satisfy min <= max, got ({lo}, {hi})")
            object.__setattr__(self, name, (float(lo), float(hi)))

        for name in ("mesh_densities_mono", "mesh_densities_biphasic"):
            dens = tuple(int(d) for d in getattr(self, name))
            if any(d < 1 for d in dens):
                raise ValueError(f"{name} entries must be >= 1, got {dens}")
            object.__setattr__(self, name, dens)
        if len(self.mesh_densities_mono) != 3:
            raise ValueError("mesh_densities_mono must have 3 entries")
        if len(self.mesh_densities_biphasic) != 6:
            raise ValueError("mesh_densities_biphasic must have 6 entries")

        for name in (
            "min_points_for_fit", "max_iterations", "max_gd_iter",
            "mesh_max_candidates", "initial_param_sets", "curve_resolution",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.gd_backtracking_max < 0:
            raise ValueError("gd_backtracking_max must be >= 0")

        for name in (
            "convergence_tolerance", "gd_alpha", "gd_eps", "huber_delta",
            "mesh_step_scale", "mesh_span", "mesh_precision",
        ):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")
        for name in ("improvement_tol", "endpoints_weight", "midpoint_weight",
                     "jitter_e_inf", "jitter_other"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

        if not isinstance(self.emax_mode, str):
            raise ValueError(f"emax_mode must be a string, got {self.emax_mode!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FitConfig:
        """Build a config from the grouped camelCase layout.

        Example
        -------
        >>> FitConfig.from_dict({
        ...     "fitting": {"minPointsForFit": 3},
        ...     "bounds": {"ec50": {"min": -6, "max": 6}},
        ...     "robust": {"weights": {"enableMidpointForMonophasic": False}},
        ... }).min_points_for_fit
        3
        """
        kwargs: dict[str, Any] = {}
        for path, value in _flatten(data):
            if path in _BOUND_PATHS:
                field, side = _BOUND_PATHS[path]
                lo, hi = kwargs.get(field, getattr(DEFAULT_CONFIG, field))
                kwargs[field] = (value, hi) if side == 0 else (lo, value)
            elif path in _KEY_MAP:
                kwargs[_KEY_MAP[path]] = value
            else:
                raise ValueError(f"Unknown configuration key: {'.'.join(path)}")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Flat field mapping (snake_case)."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ---------------------------------------------------------------------------
# Grouped-layout resolution
# ---------------------------------------------------------------------------

_KEY_MAP: dict[tuple[str, ...], str] = {
    ("fitting", "minPointsForFit"): "min_points_for_fit",
    ("fitting", "emaxMode"): "emax_mode",
    ("optimizer", "maxIterations"): "max_iterations",
    ("optimizer", "convergenceTolerance"): "convergence_tolerance",
    ("optimizer", "maxGDIter"): "max_gd_iter",
    ("optimizer", "gdAlpha"): "gd_alpha",
    ("optimizer", "gdEps"): "gd_eps",
    ("optimizer", "gdBacktrackingMax"): "gd_backtracking_max",
    ("optimizer", "improvementTol"): "improvement_tol",
    ("robust", "huberDelta"): "huber_delta",
    ("robust", "weights", "endpoints"): "endpoints_weight",
    ("robust", "weights", "midpoint"): "midpoint_weight",
    ("robust", "weights", "enableMidpointForMonophasic"): "midpoint_weighting",
    ("mesh", "densitiesMono"): "mesh_densities_mono",
    ("mesh", "densitiesBiphasic"): "mesh_densities_biphasic",
    ("mesh", "stepScale"): "mesh_step_scale",
    ("mesh", "span"): "mesh_span",
    ("mesh", "precision"): "mesh_precision",
    ("mesh", "maxCandidates"): "mesh_max_candidates",
    ("initialParams", "initialParamSets"): "initial_param_sets",
    ("initialParams", "jitter", "eInf"): "jitter_e_inf",
    ("initialParams", "jitter", "other"): "jitter_other",
    ("rendering", "curveResolution"): "curve_resolution",
}

_BOUND_PATHS: dict[tuple[str, ...], tuple[str, int]] = {
    ("bounds", "hillSlope", "min"): ("hill_slope_bounds", 0),
    ("bounds", "hillSlope", "max"): ("hill_slope_bounds", 1),
    ("bounds", "eInf", "min"): ("e_inf_bounds", 0),
    ("bounds", "eInf", "max"): ("e_inf_bounds", 1),
    ("bounds", "ec50", "min"): ("log10_ec50_bounds", 0),
    ("bounds", "ec50", "max"): ("log10_ec50_bounds", 1),
}


def _flatten(
    data: Mapping[str, Any],
    prefix: tuple[str, ...] = (),
) -> list[tuple[tuple[str, ...], Any]]:
    """Walk nested mappings, yielding ``(key_path, leaf_value)`` pairs."""
    out: list[tuple[tuple[str, ...], Any]] = []
    for key, value in data.items():
        path = prefix + (str(key),)
        if isinstance(value, Mapping):
            out.extend(_flatten(value, path))
        else:
            out.append((path, value))
    return out


DEFAULT_CONFIG = FitConfig()
