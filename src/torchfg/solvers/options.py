class SolverOptions:
    """
    Configuration options for the Gauss-Newton optimizer and its linear solver.

    Args:
        max_iterations (int): Maximum number of Gauss-Newton iterations.
        tolerance_cost_delta_abs (float): Absolute tolerance for the change in graph error.
        tolerance_cost_delta_rel (float): Relative tolerance for the change in graph error.
        tolerance_step_norm (float): Tolerance for the norm of the tangent update.
        tolerance_grad_norm (float): Tolerance for the norm of the gradient (J^T * r).
        linear_solver_precision (float): CGLS stopping threshold on the squared step norm.
        linear_solver_max_iterations (int): CGLS iteration budget per linear solve.
        verbose (bool): If True, print optimization progress.
    """
    def __init__(self, max_iterations: int = 20,
                 tolerance_cost_delta_abs: float = 1e-7,
                 tolerance_cost_delta_rel: float = 1e-7,
                 tolerance_step_norm: float = 1e-7,
                 tolerance_grad_norm: float = 1e-7,
                 linear_solver_precision: float = 1e-10,
                 linear_solver_max_iterations: int = 400,
                 verbose: bool = False):
        self.max_iterations = max_iterations
        self.tolerance_cost_delta_abs = tolerance_cost_delta_abs
        self.tolerance_cost_delta_rel = tolerance_cost_delta_rel
        self.tolerance_step_norm = tolerance_step_norm
        self.tolerance_grad_norm = tolerance_grad_norm
        self.linear_solver_precision = linear_solver_precision
        self.linear_solver_max_iterations = linear_solver_max_iterations
        self.verbose = verbose
