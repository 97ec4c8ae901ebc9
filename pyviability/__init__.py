"""
PyViability: dose-response curve fitting for cell viability assays.

Fits monophasic (Hill) and biphasic (two-stage Hill) models to a handful of
(concentration, % viability) observations with a bounded, robust multi-stage
optimizer, and reports R², IC50, AUC and Emax.

Usage:
    from pyviability import curvefit, optimize
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from pyviability import optimize
from pyviability import curvefit

__all__ = [
    "__version__",
    "curvefit",
    "optimize",
]
