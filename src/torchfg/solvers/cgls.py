import torch
from typing import Union

from ..sparse import BlockSparseMatrix, BlockSparseVector


class CGLS:
    """
    Conjugate Gradient Least Squares solver for block-sparse systems.

    Minimizes ||A x - b||^2 using only the forward product `A @ p` and the adjoint
    product `A.dual(r)`, so the normal-equations matrix A^T A is never formed.
    Reference: Bjorck, Numerical Methods for Least Squares Problems (1996), Algorithm 7.4.1.

    Each call to `optimize` starts a fresh iteration count, so one instance can be reused
    across solves. Running out of iterations is not an error; callers that need a hard
    success signal should inspect `converged` or the residual themselves.

    Args:
        precision (float, optional): Stop once the squared norm of the last step falls
            below this value. Defaults to 1e-10.
        max_iterations (int, optional): Iteration budget per solve. Defaults to 400.
        verbose (bool, optional): If True, print per-iteration progress. Defaults to False.

    Attributes:
        step (int): Iterations performed by the most recent `optimize` call.
        converged (bool): Whether the most recent call stopped before exhausting its budget.
    """
    def __init__(self, precision: float = 1e-10, max_iterations: int = 400, verbose: bool = False):
        self.precision = precision
        self.max_iterations = max_iterations
        self.verbose = verbose
        self.step = 0
        self.converged = False

    def optimize(self,
                 linear_map: BlockSparseMatrix,
                 bias: Union[torch.Tensor, BlockSparseVector],
                 initial: torch.Tensor) -> torch.Tensor:
        """
        Refines `initial` in place towards the least-squares solution of `A x = b`.

        Args:
            linear_map (BlockSparseMatrix): A, of shape (R, C).
            bias (torch.Tensor | BlockSparseVector): b, of length R.
            initial (torch.Tensor): Initial guess x, of length C. Updated in place.

        Returns:
            torch.Tensor: `initial`, holding the refined solution.
        """
        self.step = 0
        self.converged = False
        x = initial
        if isinstance(bias, BlockSparseVector):
            bias = bias.to_dense(max(linear_map.rows, bias.dimension))
        num_rows, num_columns = bias.shape[0], x.shape[0]

        # Rows or columns that no block touches are zero in A; pad products to full length.
        def forward(v: torch.Tensor) -> torch.Tensor:
            return _padded(linear_map @ v, num_rows)

        def adjoint(v: torch.Tensor) -> torch.Tensor:
            return _padded(linear_map.dual(v), num_columns)

        r = bias - forward(x)   # residual in measurement space
        s = adjoint(r)          # residual of the normal equations
        p = s.clone()
        gamma = torch.dot(s, s).item()

        if self.verbose:
            print("Starting CGLS")
            header = f"{'Iter':>4} | {'Gamma':>12} | {'Alpha':>12} | {'Step Norm^2':>12}"
            print(header)
            print("-" * len(header))

        if gamma == 0.0:
            if self.verbose: print("Converged: normal-equations residual is zero at the initial guess.")
            self.converged = True
            return x

        while self.step < self.max_iterations:
            q = forward(p)
            q_norm_sq = torch.dot(q, q).item()
            if q_norm_sq == 0.0:
                if self.verbose: print(f"Converged: search direction is in the null space at iteration {self.step}.")
                self.converged = True
                break

            alpha = gamma / q_norm_sq
            x.add_(alpha * p)
            r = r - alpha * q
            s = adjoint(r)

            gamma_next = torch.dot(s, s).item()
            beta = gamma_next / gamma
            gamma = gamma_next
            p = s + beta * p
            self.step += 1

            step_norm_sq = torch.dot(alpha * p, alpha * p).item()
            if self.verbose:
                print(f"{self.step:4} | {gamma:12.6e} | {alpha:12.6e} | {step_norm_sq:12.6e}")

            if step_norm_sq < self.precision:
                if self.verbose: print("Converged: step norm below precision.")
                self.converged = True
                break
            if gamma == 0.0:
                if self.verbose: print("Converged: normal-equations residual vanished.")
                self.converged = True
                break
        else:
            if self.verbose: print("Reached max iterations.")

        return x


def _padded(v: torch.Tensor, length: int) -> torch.Tensor:
    if v.shape[0] > length:
        raise ValueError(f"Product of length {v.shape[0]} does not fit a system of size {length}.")
    if v.shape[0] == length:
        return v
    return torch.nn.functional.pad(v, (0, length - v.shape[0]))
