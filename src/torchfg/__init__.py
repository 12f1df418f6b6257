# Top-level __init__.py for torchfg package

# Utilities (importing misc first sets the default dtype for every other module)
from .utils.misc import DEVICE, DEFAULT_DTYPE

# Block-sparse linear algebra
from .sparse import BlockSparseVector, BlockSparseMatrix

# Variables
from .variables.base import Variable
from .variables.vector import VectorVariable, Vector1, Vector2, Vector3

# Factor graph
from .core.values import Values
from .core.factor import Factor, VectorFactor, PriorFactor, BetweenFactor
from .core.factor_graph import NonlinearFactorGraph

# Solvers
from .solvers.options import SolverOptions
from .solvers.cgls import CGLS
from .solvers.gauss_newton import GaussNewtonOptimizer

__all__ = [
    "BlockSparseVector", "BlockSparseMatrix",
    "Variable", "VectorVariable", "Vector1", "Vector2", "Vector3",
    "Values", "Factor", "VectorFactor", "PriorFactor", "BetweenFactor", "NonlinearFactorGraph",
    "SolverOptions", "CGLS", "GaussNewtonOptimizer",
    "DEVICE", "DEFAULT_DTYPE"
]

__version__ = "0.1.0"
