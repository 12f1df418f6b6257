import torch
from typing import Sequence, Union

from .base import Variable
from ..utils.misc import as_tensor


class VectorVariable(Variable):
    """
    A point in a Euclidean vector space of fixed dimension.

    `retract` is addition and `local_coordinates` is subtraction, so the tangent space is
    the vector space itself. Concrete dimensions are provided by `Vector1`, `Vector2` and
    `Vector3`; subclass and set `tangent_dim` for other sizes. Same-type vectors support
    `+`, `-`, negation and scaling, and expose `norm`, `squared_norm` and `sum`.

    Args:
        data (torch.Tensor | Sequence[float]): The coordinates. Length must be `tangent_dim`.

    Attributes:
        data (torch.Tensor): The coordinates. Shape (tangent_dim,).
    """
    def __init__(self, data: Union[torch.Tensor, Sequence[float]]):
        data = as_tensor(data)
        if data.shape[0] != self.tangent_dim:
            raise ValueError(
                f"{self.__class__.__name__} expects {self.tangent_dim} coordinates, got {data.shape[0]}."
            )
        self.data = data

    @classmethod
    def zero(cls) -> 'VectorVariable':
        return cls(torch.zeros(cls.tangent_dim))

    def retract(self, delta: torch.Tensor) -> 'VectorVariable':
        return self.__class__(self.data + delta)

    def local_coordinates(self, other: 'VectorVariable') -> torch.Tensor:
        self._check_same_type(other)
        return other.data - self.data

    def _check_same_type(self, other: 'VectorVariable'):
        if type(other) is not type(self):
            raise TypeError(f"Cannot combine {type(self).__name__} with {type(other).__name__}.")

    def __add__(self, other: 'VectorVariable') -> 'VectorVariable':
        self._check_same_type(other)
        return self.__class__(self.data + other.data)

    def __sub__(self, other: 'VectorVariable') -> 'VectorVariable':
        self._check_same_type(other)
        return self.__class__(self.data - other.data)

    def __neg__(self) -> 'VectorVariable':
        return self.__class__(-self.data)

    def __mul__(self, scalar: float) -> 'VectorVariable':
        return self.__class__(self.data * scalar)

    __rmul__ = __mul__

    def squared_norm(self) -> torch.Tensor:
        """torch.Tensor: The squared Euclidean norm, as a 0-dim tensor (differentiable)."""
        return torch.sum(self.data ** 2)

    def norm(self) -> torch.Tensor:
        return torch.linalg.norm(self.data)

    def sum(self) -> torch.Tensor:
        return torch.sum(self.data)

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and torch.equal(self.data, other.data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.data.tolist()})"


class Vector1(VectorVariable):
    """An element of R^1."""
    tangent_dim = 1


class Vector2(VectorVariable):
    """An element of R^2."""
    tangent_dim = 2


class Vector3(VectorVariable):
    """An element of R^3."""
    tangent_dim = 3
