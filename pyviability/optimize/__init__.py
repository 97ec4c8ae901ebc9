"""
Bounded, derivative-free and finite-difference optimisers.

Generic building blocks used by :mod:`pyviability.curvefit`: a Nelder–Mead
simplex minimiser, projected gradient descent, and a mesh + pattern search
fallback.  Each takes a scalar objective and, where bounds matter, a
projection callable.
"""

from pyviability.optimize._nelder_mead import nelder_mead
from pyviability.optimize._gradient import finite_diff_grad, projected_grad_descent
from pyviability.optimize._mesh import (
    MeshResult,
    mesh_candidates,
    mesh_search,
    pattern_search,
)

__all__ = [
    "MeshResult",
    "nelder_mead",
    "finite_diff_grad",
    "projected_grad_descent",
    "mesh_candidates",
    "mesh_search",
    "pattern_search",
]
