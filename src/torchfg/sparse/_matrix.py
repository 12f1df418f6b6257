import torch
from dataclasses import dataclass
from typing import List, Sequence, Union

from ._vector import BlockSparseVector
from ..utils.misc import DEVICE, DEFAULT_DTYPE


@dataclass(frozen=True)
class MatrixBlock:
    """
    Position of one dense block inside a larger implicit matrix.

    Attributes:
        row_range (range): Rows covered by the block.
        column_range (range): Columns covered by the block.
    """
    row_range: range
    column_range: range

    @property
    def size(self) -> int:
        """int: Number of scalars stored for this block."""
        return len(self.row_range) * len(self.column_range)

    def offsetting_rows(self, offset: int) -> 'MatrixBlock':
        return MatrixBlock(
            range(self.row_range.start + offset, self.row_range.stop + offset),
            self.column_range,
        )


class BlockSparseMatrix:
    """
    A matrix stored as a list of dense rectangular blocks.

    Each `MatrixBlock` owns the next `block.size` entries of the flat `scalars` buffer,
    laid out row-major (column index varies fastest). Blocks may overlap; both products
    accumulate into their output, so overlapping blocks sum. This is what lets several
    factors contribute to the same variable's columns without merging at assembly time.

    Use `zero`, `from_rows` or `from_dense` to construct instances.

    Attributes:
        scalars (torch.Tensor): Flat buffer of all block values. Shape (nnz,).
        blocks (List[MatrixBlock]): Block positions, matched in order with `scalars`.
    """
    def __init__(self, scalars: torch.Tensor, blocks: List[MatrixBlock]):
        expected = sum(block.size for block in blocks)
        if scalars.ndim != 1 or scalars.shape[0] != expected:
            raise ValueError(
                f"Blocks require {expected} scalars, got a tensor of shape {tuple(scalars.shape)}."
            )
        self.scalars = scalars
        self.blocks = blocks

    @classmethod
    def zero(cls) -> 'BlockSparseMatrix':
        """The matrix with no blocks. It is the additive identity."""
        return cls(torch.empty(0, dtype=DEFAULT_DTYPE, device=DEVICE), [])

    @classmethod
    def from_rows(cls, rows: Sequence[BlockSparseVector]) -> 'BlockSparseMatrix':
        """
        Vertically collates block-sparse rows into a matrix.

        Every row must carry the same ordered list of blocks. One matrix block is emitted
        per column range, spanning rows `range(0, len(rows))`.

        Args:
            rows (Sequence[BlockSparseVector]): The matrix rows, top to bottom.

        Returns:
            BlockSparseMatrix: The collated matrix (`zero()` for an empty sequence).

        Raises:
            NotImplementedError: If any row's block structure differs from the first row's.
        """
        if len(rows) == 0:
            return cls.zero()

        column_ranges = rows[0].blocks
        for row in rows:
            if row.blocks != column_ranges:
                raise NotImplementedError("Collating rows with different block structures is not supported.")

        scalars: List[torch.Tensor] = []
        blocks: List[MatrixBlock] = []
        row_range = range(len(rows))
        offset = 0
        for column_range in column_ranges:
            width = len(column_range)
            block_rows = torch.stack([row.scalars[offset:offset + width] for row in rows])
            scalars.append(block_rows.reshape(-1))
            blocks.append(MatrixBlock(row_range, column_range))
            offset += width
        return cls(torch.cat(scalars), blocks)

    @classmethod
    def from_dense(cls, block: torch.Tensor, row_start: int = 0, column_start: int = 0) -> 'BlockSparseMatrix':
        """
        Wraps a single dense 2D tensor as a one-block matrix.

        Args:
            block (torch.Tensor): The block values. Shape (R, C).
            row_start (int, optional): First row covered by the block. Defaults to 0.
            column_start (int, optional): First column covered by the block. Defaults to 0.
        """
        if block.ndim != 2:
            raise ValueError(f"A dense block must be a 2D tensor, got shape {tuple(block.shape)}.")
        num_rows, num_columns = block.shape
        position = MatrixBlock(range(row_start, row_start + num_rows), range(column_start, column_start + num_columns))
        return cls(block.to(dtype=DEFAULT_DTYPE).reshape(-1), [position])

    @property
    def rows(self) -> int:
        """int: The largest row upper bound across blocks."""
        return max((block.row_range.stop for block in self.blocks), default=0)

    @property
    def columns(self) -> int:
        """int: The largest column upper bound across blocks."""
        return max((block.column_range.stop for block in self.blocks), default=0)

    def offsetting_rows(self, offset: int) -> 'BlockSparseMatrix':
        """Returns a matrix with every row range shifted by `offset`; column ranges are unchanged."""
        return BlockSparseMatrix(self.scalars, [block.offsetting_rows(offset) for block in self.blocks])

    def __add__(self, other: 'BlockSparseMatrix') -> 'BlockSparseMatrix':
        if not isinstance(other, BlockSparseMatrix):
            return NotImplemented
        return BlockSparseMatrix(torch.cat([self.scalars, other.scalars]), self.blocks + other.blocks)

    def _dense_blocks(self):
        offset = 0
        for block in self.blocks:
            values = self.scalars[offset:offset + block.size]
            yield block, values.view(len(block.row_range), len(block.column_range))
            offset += block.size

    def __matmul__(self, x: Union[torch.Tensor, BlockSparseVector]) -> torch.Tensor:
        """
        Forward product `A @ x`.

        Args:
            x (torch.Tensor | BlockSparseVector): Dense vector of length >= `self.columns`,
                or a block-sparse vector, which is materialized first.

        Returns:
            torch.Tensor: The dense product. Shape (self.rows,).
        """
        x = self._dense_operand(x, self.columns)
        result = torch.zeros(self.rows, dtype=self.scalars.dtype, device=self.scalars.device)
        for block, values in self._dense_blocks():
            rows, cols = block.row_range, block.column_range
            result[rows.start:rows.stop] += values @ x[cols.start:cols.stop]
        return result

    def dual(self, y: Union[torch.Tensor, BlockSparseVector]) -> torch.Tensor:
        """
        Adjoint product `A^T @ y`.

        Args:
            y (torch.Tensor | BlockSparseVector): Dense vector of length >= `self.rows`,
                or a block-sparse vector, which is materialized first.

        Returns:
            torch.Tensor: The dense product. Shape (self.columns,).
        """
        y = self._dense_operand(y, self.rows)
        result = torch.zeros(self.columns, dtype=self.scalars.dtype, device=self.scalars.device)
        for block, values in self._dense_blocks():
            rows, cols = block.row_range, block.column_range
            result[cols.start:cols.stop] += values.T @ y[rows.start:rows.stop]
        return result

    @staticmethod
    def _dense_operand(x: Union[torch.Tensor, BlockSparseVector], required: int) -> torch.Tensor:
        if isinstance(x, BlockSparseVector):
            return x.to_dense(max(required, x.dimension))
        if x.ndim != 1 or x.shape[0] < required:
            raise ValueError(f"Expected a 1D tensor with at least {required} entries, got shape {tuple(x.shape)}.")
        return x

    def to_dense(self) -> torch.Tensor:
        """
        Converts the matrix to a dense tensor, summing overlapping blocks.

        Returns:
            torch.Tensor: Shape (self.rows, self.columns).
        """
        dense = torch.zeros((self.rows, self.columns), dtype=self.scalars.dtype, device=self.scalars.device)
        for block, values in self._dense_blocks():
            rows, cols = block.row_range, block.column_range
            dense[rows.start:rows.stop, cols.start:cols.stop] += values
        return dense

    def to_torch_sparse_coo(self) -> torch.Tensor:
        """
        Converts the matrix to a coalesced PyTorch sparse COO tensor.

        Returns:
            torch.Tensor: A sparse COO tensor of shape (self.rows, self.columns).
        """
        row_indices: List[torch.Tensor] = []
        col_indices: List[torch.Tensor] = []
        for block in self.blocks:
            rows = torch.arange(block.row_range.start, block.row_range.stop, device=self.scalars.device)
            cols = torch.arange(block.column_range.start, block.column_range.stop, device=self.scalars.device)
            grid_rows, grid_cols = torch.meshgrid(rows, cols, indexing="ij")
            row_indices.append(grid_rows.reshape(-1))
            col_indices.append(grid_cols.reshape(-1))
        if row_indices:
            indices = torch.stack([torch.cat(row_indices), torch.cat(col_indices)])
        else:
            indices = torch.empty((2, 0), dtype=torch.long, device=self.scalars.device)
        return torch.sparse_coo_tensor(
            indices=indices,
            values=self.scalars,
            size=(self.rows, self.columns),
            device=self.scalars.device,
            dtype=self.scalars.dtype
        ).coalesce()

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}("
                f"blocks={len(self.blocks)}, "
                f"shape=({self.rows}, {self.columns}), "
                f"nnz={self.scalars.shape[0]})")
