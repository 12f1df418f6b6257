import torch
from typing import List, Optional, Sequence, Union

from ..utils.misc import DEVICE, DEFAULT_DTYPE, as_tensor


class BlockSparseVector:
    """
    A vector stored as a log of (range, values) contributions.

    Each block is a half-open `range` of positions in an implicit dense vector and owns
    the next `len(block)` entries of the flat `scalars` buffer, in append order. Blocks
    are never merged: adding two vectors concatenates their buffers and block lists, and
    overlapping blocks are only reconciled when the vector is materialized with
    `to_dense` (or consumed by a `BlockSparseMatrix` product).

    Args:
        scalars (torch.Tensor | Sequence[float]): The values of the single block.
        block (Optional[range], optional): The positions covered by `scalars`.
            Defaults to `range(0, len(scalars))`.

    Attributes:
        scalars (torch.Tensor): Flat buffer of all stored values. Shape (nnz,).
        blocks (List[range]): Ranges matched, in order, with slices of `scalars`.
    """
    def __init__(self, scalars: Union[torch.Tensor, Sequence[float]], block: Optional[range] = None):
        scalars = as_tensor(scalars)
        if block is None:
            block = range(scalars.shape[0])
        if block.step != 1:
            raise ValueError(f"Blocks must be contiguous ranges, got {block}.")
        if len(block) != scalars.shape[0]:
            raise ValueError(
                f"Block {block} covers {len(block)} positions but {scalars.shape[0]} scalars were given."
            )
        self.scalars = scalars
        self.blocks: List[range] = [block]

    @classmethod
    def _from_parts(cls, scalars: torch.Tensor, blocks: List[range]) -> 'BlockSparseVector':
        result = cls.__new__(cls)
        result.scalars = scalars
        result.blocks = blocks
        return result

    @classmethod
    def zero(cls) -> 'BlockSparseVector':
        """The empty vector: no scalars and no blocks. It is the additive identity."""
        return cls._from_parts(torch.empty(0, dtype=DEFAULT_DTYPE, device=DEVICE), [])

    @property
    def dimension(self) -> int:
        """int: The largest upper bound across all blocks (0 for the empty vector)."""
        return max((block.stop for block in self.blocks), default=0)

    # --- Accumulation ---

    def __add__(self, other: 'BlockSparseVector') -> 'BlockSparseVector':
        if not isinstance(other, BlockSparseVector):
            return NotImplemented
        return BlockSparseVector._from_parts(
            torch.cat([self.scalars, other.scalars]), self.blocks + other.blocks
        )

    def __sub__(self, other: 'BlockSparseVector') -> 'BlockSparseVector':
        if not isinstance(other, BlockSparseVector):
            return NotImplemented
        return BlockSparseVector._from_parts(
            torch.cat([self.scalars, -other.scalars]), self.blocks + other.blocks
        )

    def __neg__(self) -> 'BlockSparseVector':
        return self.scaled(-1.0)

    # --- Uniform scalar arithmetic ---
    # Every stored scalar belongs to exactly one block, so acting on the flat buffer is
    # the same as acting on each block.

    def adding(self, x: float) -> 'BlockSparseVector':
        """Returns a copy with `x` added to every stored scalar."""
        return BlockSparseVector._from_parts(self.scalars + x, list(self.blocks))

    def subtracting(self, x: float) -> 'BlockSparseVector':
        """Returns a copy with `x` subtracted from every stored scalar."""
        return BlockSparseVector._from_parts(self.scalars - x, list(self.blocks))

    def scaled(self, factor: float) -> 'BlockSparseVector':
        """Returns a copy with every stored scalar multiplied by `factor`."""
        return BlockSparseVector._from_parts(self.scalars * factor, list(self.blocks))

    def __mul__(self, factor: float) -> 'BlockSparseVector':
        if isinstance(factor, BlockSparseVector):
            return NotImplemented
        return self.scaled(factor)

    __rmul__ = __mul__

    # --- Materialization ---

    def to_dense(self, dimension: Optional[int] = None) -> torch.Tensor:
        """
        Scatter-adds every block into a freshly zeroed dense vector.

        Args:
            dimension (Optional[int], optional): Length of the output. Defaults to
                `self.dimension`. Must be at least `self.dimension`.

        Returns:
            torch.Tensor: The dense vector. Shape (dimension,).
        """
        if dimension is None:
            dimension = self.dimension
        if dimension < self.dimension:
            raise ValueError(f"Cannot materialize a vector of dimension {self.dimension} into {dimension} entries.")
        dense = torch.zeros(dimension, dtype=self.scalars.dtype, device=self.scalars.device)
        offset = 0
        for block in self.blocks:
            dense[block.start:block.stop] += self.scalars[offset:offset + len(block)]
            offset += len(block)
        return dense

    def squared_norm(self) -> float:
        """float: Squared Euclidean norm of the dense materialization."""
        return torch.sum(self.to_dense() ** 2).item()

    def __len__(self) -> int:
        return self.scalars.shape[0]

    def __repr__(self) -> str:
        blocks = ", ".join(f"[{b.start}, {b.stop})" for b in self.blocks)
        return (f"{self.__class__.__name__}("
                f"scalars={self.scalars}, "
                f"blocks=[{blocks}])")
