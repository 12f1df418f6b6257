import torch
import math
from typing import Optional

from .cgls import CGLS
from .options import SolverOptions
from ..core.factor_graph import NonlinearFactorGraph
from ..core.values import Values
from ..utils.misc import DEVICE, DEFAULT_DTYPE

class GaussNewtonOptimizer:
    """
    Minimizes the error of a factor graph with Gauss-Newton iterations.

    Every iteration linearizes the graph into a block-sparse system `A dx ~ b`, solves it
    with CGLS starting from a zero step, and retracts the values along `dx`.

    Args:
        graph (NonlinearFactorGraph): The factors to minimize.
        options (Optional[SolverOptions], optional): Solver configuration. Defaults to SolverOptions().
    """
    def __init__(self, graph: NonlinearFactorGraph, options: Optional[SolverOptions] = None):
        self.graph = graph
        self.options = options if options else SolverOptions()

    def optimize(self, values: Values) -> Values:
        """
        Executes the Gauss-Newton optimization algorithm.

        Args:
            values (Values): The initial estimate. It is not modified.

        Returns:
            Values: The optimized values.
        """
        current_values = values
        current_error = self.graph.error(current_values)

        if self.options.verbose:
            print("Starting Gauss-Newton Optimization")
            header = f"{'Iter':>4} | {'Error':>12} | {'Error Delta':>12} | {'Step Norm':>12} | {'Grad Norm':>12} | {'CGLS Iters':>10}"
            print(header)
            print("-" * len(header))

        if not math.isfinite(current_error):
            if self.options.verbose: print(f"Error: Initial error is {current_error}. Stopping.")
            return current_values

        if values.dimension == 0:
            if self.options.verbose: print("No variables to optimize.")
            return current_values

        linear_solver = CGLS(precision=self.options.linear_solver_precision,
                             max_iterations=self.options.linear_solver_max_iterations)

        for i in range(self.options.max_iterations):
            linear_map, bias = self.graph.linearization(current_values)

            # bias is -r, so A^T b is -J^T r.
            grad_norm = torch.linalg.norm(linear_map.dual(bias)).item()
            if grad_norm < self.options.tolerance_grad_norm:
                if self.options.verbose: print("Converged: Gradient norm below tolerance.")
                break

            delta_tangent = torch.zeros(current_values.dimension, device=DEVICE, dtype=DEFAULT_DTYPE)
            linear_solver.optimize(linear_map, bias, delta_tangent)
            step_norm = torch.linalg.norm(delta_tangent).item()

            new_values = current_values.retract(delta_tangent)
            new_error = self.graph.error(new_values)

            if not math.isfinite(new_error):
                if self.options.verbose: print(f"Error: Error is {new_error} at iteration {i}. Stopping.")
                break

            error_delta_abs = current_error - new_error
            error_delta_rel = error_delta_abs / abs(current_error) if abs(current_error) > 1e-12 else error_delta_abs

            if self.options.verbose:
                print(f"{i:4} | {new_error:12.6e} | {error_delta_abs:12.6e} | {step_norm:12.6e} | {grad_norm:12.6e} | {linear_solver.step:10}")

            current_values, current_error = new_values, new_error

            error_converged = (abs(error_delta_abs) < self.options.tolerance_cost_delta_abs or
                               abs(error_delta_rel) < self.options.tolerance_cost_delta_rel)
            if error_converged and step_norm < self.options.tolerance_step_norm:
                if self.options.verbose: print("Converged: Error change and step norm below tolerance.")
                break
        else:
            if self.options.verbose: print("Reached max iterations.")

        return current_values
