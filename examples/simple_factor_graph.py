import torch
from torchfg.core import Values, VectorFactor, PriorFactor, BetweenFactor, NonlinearFactorGraph
from torchfg.solvers import GaussNewtonOptimizer, SolverOptions
from torchfg.variables import Vector2
from torchfg.utils.misc import DEVICE, DEFAULT_DTYPE

# 1. A custom nonlinear factor: the distance between two points
class RangeFactor(VectorFactor):
    def __init__(self, key1: int, key2: int, measured: float):
        super().__init__([key1, key2], name=f"Range_{key1}_{key2}")
        self.measured = measured

    def error_vector(self, values: Values) -> torch.Tensor:
        x1 = values.get(self.keys[0], Vector2).data
        x2 = values.get(self.keys[1], Vector2).data
        return torch.linalg.norm(x1 - x2).reshape(1) - self.measured

# 2. Three robot positions linked by odometry, plus one landmark seen by range
graph = NonlinearFactorGraph()
graph += PriorFactor(0, Vector2([0.0, 0.0]), weight=10.0)
graph += BetweenFactor(0, 1, [1.0, 0.0])
graph += BetweenFactor(1, 2, [1.0, 0.0])
graph += RangeFactor(0, 10, 5.0)
graph += RangeFactor(1, 10, 17.0 ** 0.5)
graph += RangeFactor(2, 10, 13.0 ** 0.5)

# 3. A perturbed initial estimate
values = Values()
values.insert(0, Vector2([0.2, -0.1]))
values.insert(1, Vector2([0.9, 0.3]))
values.insert(2, Vector2([2.3, -0.2]))
values.insert(10, Vector2([2.5, 3.5]))

# 4. Optimize
options = SolverOptions(max_iterations=30, verbose=True)
optimized = GaussNewtonOptimizer(graph, options).optimize(values)

for key in values:
    print(f"{key}: {optimized[key]}")

landmark = optimized[10, Vector2].data
assert torch.allclose(landmark, torch.tensor([3.0, 4.0], dtype=DEFAULT_DTYPE, device=DEVICE), atol=1e-3)
print("Factor graph example finished successfully.")
