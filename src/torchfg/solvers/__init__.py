from .options import SolverOptions
from .cgls import CGLS
from .gauss_newton import GaussNewtonOptimizer

__all__ = [
    "SolverOptions",
    "CGLS",
    "GaussNewtonOptimizer"
]
