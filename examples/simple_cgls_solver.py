import torch
from torchfg.sparse import BlockSparseMatrix, BlockSparseVector
from torchfg.solvers import CGLS
from torchfg.utils.misc import DEVICE, DEFAULT_DTYPE

# 1. Assemble a block-sparse matrix from two overlapping dense blocks
top = torch.tensor([[2.0, 1.0], [0.0, 1.0]], dtype=DEFAULT_DTYPE, device=DEVICE)
bottom = torch.tensor([[1.0, 0.0, 3.0]], dtype=DEFAULT_DTYPE, device=DEVICE)
linear_map = BlockSparseMatrix.from_dense(top) + BlockSparseMatrix.from_dense(bottom, row_start=2)

# 2. The right-hand side, contributed in two blocks
bias = BlockSparseVector([3.0, 1.0], block=range(0, 2)) + BlockSparseVector([4.0], block=range(2, 3))

# 3. Solve from a zero initial guess (refined in place)
x = torch.zeros(linear_map.columns, dtype=DEFAULT_DTYPE, device=DEVICE)
solver = CGLS(precision=1e-12, verbose=True)
solver.optimize(linear_map, bias, x)
print("Solution: ", x)

# 4. Verify against a dense least-squares solve
expected = torch.linalg.lstsq(linear_map.to_dense(), bias.to_dense().unsqueeze(-1)).solution.squeeze(-1)
assert torch.allclose(x, expected, atol=1e-6)
print("CGLS example finished successfully.")
