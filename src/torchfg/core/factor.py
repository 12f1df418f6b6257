import abc
import torch
from typing import List, Optional, Sequence, Tuple

from .values import Values
from ..sparse import BlockSparseMatrix, BlockSparseVector
from ..utils.misc import DEVICE, DEFAULT_DTYPE, as_tensor
from ..variables.base import Variable


class Factor(abc.ABC):
    """
    Abstract base class for constraints between variables in a factor graph.

    A factor references its variables by key only; values are supplied per call.

    Args:
        keys (Sequence[int]): Keys of the variables this factor constrains. Must not be empty.
        name (str, optional): An optional name for the factor.

    Attributes:
        keys (List[int]): The constrained keys, in the order the factor uses them.
        name (str): Name of the factor.
    """
    def __init__(self, keys: Sequence[int], name: Optional[str] = None):
        if len(keys) == 0:
            raise ValueError(f"{self.__class__.__name__} must constrain at least one key.")
        self.keys: List[int] = list(keys)
        self.name = name if name else self.__class__.__name__

    @abc.abstractmethod
    def error(self, values: Values) -> float:
        """
        Computes the scalar cost contributed by this factor.

        Args:
            values (Values): Current values of (at least) the variables in `keys`.

        Returns:
            float: The factor's cost.
        """
        pass

    @abc.abstractmethod
    def linearization(self, values: Values) -> Tuple[BlockSparseMatrix, BlockSparseVector]:
        """
        Computes the first-order approximation of this factor at `values`.

        Args:
            values (Values): The linearization point.

        Returns:
            Tuple[BlockSparseMatrix, BlockSparseVector]:
                - linear_map: The Jacobian of the residual. Rows start at 0, one per
                  residual entry; columns are joint tangent coordinates and are nonzero
                  only inside the tangent ranges of `keys`.
                - bias: The negated residual at `values`, in rows `[0, residual_dim)`.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.name}(keys={self.keys})"


class VectorFactor(Factor):
    """
    A factor defined by a vector-valued residual function.

    Subclasses implement `error_vector`. The cost is the squared norm of the residual and
    the linearization is obtained with `torch.autograd`, differentiating the residual with
    respect to a tangent perturbation of every variable in `keys`.
    """
    @abc.abstractmethod
    def error_vector(self, values: Values) -> torch.Tensor:
        """
        Computes the residual vector.

        Args:
            values (Values): Current values of the variables.

        Returns:
            torch.Tensor: The residual. Shape (ResidualDim,).
        """
        pass

    def error(self, values: Values) -> float:
        residual = self.error_vector(values).reshape(-1)
        return torch.sum(residual ** 2).item()

    def linearization(self, values: Values) -> Tuple[BlockSparseMatrix, BlockSparseVector]:
        # jacobian() evaluates the closure once; the primal residual is kept from that call.
        evaluated: List[torch.Tensor] = []

        def residual_wrt_deltas(*deltas: torch.Tensor) -> torch.Tensor:
            perturbed = values.copy()
            for key, delta in zip(self.keys, deltas):
                perturbed[key] = values[key].retract(delta)
            residual = self.error_vector(perturbed).reshape(-1)
            evaluated.append(residual.detach())
            return residual

        zero_deltas = tuple(
            torch.zeros(values[key].tangent_dim, device=DEVICE, dtype=DEFAULT_DTYPE)
            for key in self.keys
        )
        jacobian_blocks = torch.autograd.functional.jacobian(residual_wrt_deltas, zero_deltas)
        residual = evaluated[0]

        # Each row is the sum of per-variable pullbacks, so every row has the same blocks.
        rows: List[BlockSparseVector] = []
        for i in range(residual.shape[0]):
            row = BlockSparseVector.zero()
            for key, block in zip(self.keys, jacobian_blocks):
                row += values.pullback(key, block[i])
            rows.append(row)

        return BlockSparseMatrix.from_rows(rows), BlockSparseVector(-residual)


class PriorFactor(VectorFactor):
    """
    Pulls one variable towards a fixed value.

    residual = weight * prior.local_coordinates(x)

    Args:
        key (int): Key of the constrained variable.
        prior (Variable): The target value. The stored variable must have the same type.
        weight (float, optional): Scale applied to the residual. Defaults to 1.0.
    """
    def __init__(self, key: int, prior: Variable, weight: float = 1.0, name: Optional[str] = None):
        super().__init__([key], name=name if name else f"Prior_{key}")
        self.prior = prior
        self.weight = weight

    def error_vector(self, values: Values) -> torch.Tensor:
        x = values.get(self.keys[0], type(self.prior))
        return self.prior.local_coordinates(x) * self.weight


class BetweenFactor(VectorFactor):
    """
    Constrains the tangent-space difference between two variables of the same type.

    residual = weight * (x1.local_coordinates(x2) - difference)

    Args:
        key1 (int): Key of the first variable.
        key2 (int): Key of the second variable.
        difference (torch.Tensor | Sequence[float]): Measured difference from x1 to x2.
        weight (float, optional): Scale applied to the residual. Defaults to 1.0.
    """
    def __init__(self, key1: int, key2: int, difference, weight: float = 1.0, name: Optional[str] = None):
        super().__init__([key1, key2], name=name if name else f"Between_{key1}_{key2}")
        self.difference = as_tensor(difference)
        self.weight = weight

    def error_vector(self, values: Values) -> torch.Tensor:
        x1 = values[self.keys[0]]
        x2 = values.get(self.keys[1], type(x1))
        return (x1.local_coordinates(x2) - self.difference) * self.weight
