from .values import Values
from .factor import Factor, VectorFactor, PriorFactor, BetweenFactor
from .factor_graph import NonlinearFactorGraph

__all__ = [
    "Values",
    "Factor",
    "VectorFactor",
    "PriorFactor",
    "BetweenFactor",
    "NonlinearFactorGraph"
]
