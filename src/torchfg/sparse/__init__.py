# Block-sparse vector and matrix representations for torchfg

from ._vector import BlockSparseVector
from ._matrix import BlockSparseMatrix, MatrixBlock

__all__ = [
    "BlockSparseVector",
    "BlockSparseMatrix",
    "MatrixBlock",
]
