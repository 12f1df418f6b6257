from .base import Variable
from .vector import VectorVariable, Vector1, Vector2, Vector3

__all__ = [
    "Variable",
    "VectorVariable",
    "Vector1",
    "Vector2",
    "Vector3"
]
