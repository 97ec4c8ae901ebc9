"""
Viability dose-response curve fitting.

Fits monophasic (Hill) and biphasic (product of two Hill phases) models to
(concentration, % viability) observations using a weighted squared or
Huber objective with hard parameter bounds, then reports R², IC50, AUC
and Emax.

Typical use::

    from pyviability.curvefit import analyze

    result = analyze([(0.001, 100), (0.01, 95), (0.1, 50), (1, 10), (10, 5)],
                     fit_type="monophasic", algorithm="huber")
    print(result.summary())
"""

from pyviability.curvefit._common import (
    DataPoint,
    FittedCurve,
    Metrics,
    ViabilityResult,
    sort_points,
    sorted_arrays,
)
from pyviability.curvefit._config import DEFAULT_CONFIG, EMAX_FROM_CURVE_AT_MAX, FitConfig
from pyviability.curvefit._models import (
    BIPHASIC,
    MONOPHASIC,
    VALID_FIT_TYPES,
    biphasic,
    evaluate,
    hill,
)
from pyviability.curvefit._loss import huber_loss, loss_by_name, squared_loss
from pyviability.curvefit._objective import (
    PENALTY,
    bounds_arrays,
    in_bounds,
    objective_function,
    point_weights,
    project_to_bounds,
)
from pyviability.curvefit._guess import gritty_guess, jittered_simplex, random_initial_params
from pyviability.curvefit._metrics import (
    auc_log_trapezoid,
    emax_at_max,
    ic50_from_params,
    metrics,
    r2_for_params,
)
from pyviability.curvefit._ic50 import fit_monophasic_for_ic50
from pyviability.curvefit._fit import analyze, fit

__all__ = [
    "DataPoint",
    "FittedCurve",
    "Metrics",
    "ViabilityResult",
    "FitConfig",
    "DEFAULT_CONFIG",
    "EMAX_FROM_CURVE_AT_MAX",
    "MONOPHASIC",
    "BIPHASIC",
    "VALID_FIT_TYPES",
    "PENALTY",
    "sort_points",
    "sorted_arrays",
    "hill",
    "biphasic",
    "evaluate",
    "squared_loss",
    "huber_loss",
    "loss_by_name",
    "objective_function",
    "point_weights",
    "bounds_arrays",
    "in_bounds",
    "project_to_bounds",
    "gritty_guess",
    "jittered_simplex",
    "random_initial_params",
    "r2_for_params",
    "ic50_from_params",
    "auc_log_trapezoid",
    "emax_at_max",
    "metrics",
    "fit_monophasic_for_ic50",
    "fit",
    "analyze",
]
