from typing import Iterator, List, Optional, Sequence, Tuple

from .factor import Factor
from .values import Values
from ..sparse import BlockSparseMatrix, BlockSparseVector


class NonlinearFactorGraph:
    """
    An ordered collection of factors.

    The graph owns no variables. It references keys into a `Values` store supplied to
    each call, and factor order is the only ordering it guarantees.

    Args:
        factors (Optional[Sequence[Factor]], optional): Initial factors. Defaults to none.

    Attributes:
        factors (List[Factor]): The factors, in insertion order.
    """
    def __init__(self, factors: Optional[Sequence[Factor]] = None):
        self.factors: List[Factor] = list(factors) if factors else []

    def add(self, factor: Factor):
        self.factors.append(factor)

    def __iadd__(self, factor: Factor) -> 'NonlinearFactorGraph':
        self.add(factor)
        return self

    def __len__(self) -> int:
        return len(self.factors)

    def __iter__(self) -> Iterator[Factor]:
        return iter(self.factors)

    @property
    def keys(self) -> List[int]:
        """List[int]: Every key referenced by a factor, in order of first appearance."""
        seen = {}
        for factor in self.factors:
            for key in factor.keys:
                seen.setdefault(key, None)
        return list(seen)

    def linearization(self, values: Values) -> Tuple[BlockSparseMatrix, BlockSparseVector]:
        """
        Stacks every factor's linearization into one block-sparse linear system.

        Factors are visited in order. Each one occupies the next `residual_dim` rows: its
        Jacobian is offset by the running row count and its bias is placed in the same
        rows. Columns are the joint tangent coordinates of `values`.

        Args:
            values (Values): The linearization point.

        Returns:
            Tuple[BlockSparseMatrix, BlockSparseVector]: The stacked Jacobian and the
                stacked bias, with matching row numbering.
        """
        linear_map = BlockSparseMatrix.zero()
        bias = BlockSparseVector.zero()
        row_offset = 0
        for factor in self.factors:
            factor_linear_map, factor_bias = factor.linearization(values)
            residual_dim = factor_bias.dimension
            linear_map += factor_linear_map.offsetting_rows(row_offset)
            bias += BlockSparseVector(factor_bias.to_dense(residual_dim), block=range(row_offset, row_offset + residual_dim))
            row_offset += residual_dim
        return linear_map, bias

    def error(self, values: Values) -> float:
        """float: The total cost, i.e. the sum of every factor's error at `values`."""
        return sum(factor.error(values) for factor in self.factors)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(factors={self.factors})"
