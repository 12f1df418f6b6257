import abc
import torch
from typing import List

from ..utils.misc import DEVICE, DEFAULT_DTYPE


class Variable(abc.ABC):
    """
    Base class for values that can be stored in `Values` and optimized.

    A variable type declares a fixed tangent dimension. Updates are expressed as tangent
    vectors of that length and applied with `retract`; `local_coordinates` is the inverse.

    Attributes:
        tangent_dim (int): Dimension of the tangent space. Set by each concrete subclass.
    """
    tangent_dim: int = 0

    @classmethod
    def standard_basis(cls) -> List[torch.Tensor]:
        """
        Returns the standard basis of the tangent space.

        Returns:
            List[torch.Tensor]: `tangent_dim` one-hot tensors of shape (tangent_dim,).
        """
        eye = torch.eye(cls.tangent_dim, device=DEVICE, dtype=DEFAULT_DTYPE)
        return [eye[i] for i in range(cls.tangent_dim)]

    @abc.abstractmethod
    def retract(self, delta: torch.Tensor) -> 'Variable':
        """
        Moves this value along a tangent vector.

        Args:
            delta (torch.Tensor): The tangent update. Shape (tangent_dim,).

        Returns:
            Variable: A new value of the same type.
        """
        pass

    @abc.abstractmethod
    def local_coordinates(self, other: 'Variable') -> torch.Tensor:
        """
        Computes the tangent vector that takes this value to `other`.

        Args:
            other (Variable): A value of the same type.

        Returns:
            torch.Tensor: Shape (tangent_dim,).
        """
        pass
