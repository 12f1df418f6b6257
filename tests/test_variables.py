import torch
import unittest

from torchfg.variables.base import Variable
from torchfg.variables.vector import VectorVariable, Vector1, Vector2, Vector3
from torchfg.utils.misc import DEVICE, DEFAULT_DTYPE


class TestVectorVariables(unittest.TestCase):

    def test_tangent_dims(self):
        self.assertEqual(Vector1.tangent_dim, 1)
        self.assertEqual(Vector2.tangent_dim, 2)
        self.assertEqual(Vector3.tangent_dim, 3)
        self.assertTrue(issubclass(Vector3, Variable))

    def test_standard_basis(self):
        basis = Vector3.standard_basis()
        self.assertEqual(len(basis), 3)
        stacked = torch.stack(basis)
        self.assertTrue(torch.equal(stacked, torch.eye(3, dtype=DEFAULT_DTYPE, device=DEVICE)))

    def test_construction(self):
        v = Vector2([1.0, 2.0])
        self.assertEqual(v.data.dtype, DEFAULT_DTYPE)
        self.assertEqual(v.data.shape, (2,))
        self.assertEqual(Vector3.zero(), Vector3([0.0, 0.0, 0.0]))
        with self.assertRaisesRegex(ValueError, "expects 2 coordinates"):
            Vector2([1.0, 2.0, 3.0])

    def test_retract_and_local_coordinates(self):
        a = Vector2([1.0, 2.0])
        b = Vector2([4.0, 6.0])
        delta = a.local_coordinates(b)
        self.assertTrue(torch.allclose(delta, torch.tensor([3.0, 4.0], dtype=DEFAULT_DTYPE, device=DEVICE)))
        self.assertEqual(a.retract(delta), b)
        self.assertIsInstance(a.retract(delta), Vector2)

    def test_local_coordinates_type_mismatch(self):
        with self.assertRaises(TypeError):
            Vector2([1.0, 2.0]).local_coordinates(Vector1([1.0]))

    def test_arithmetic(self):
        a = Vector3([1.0, 2.0, 2.0])
        b = Vector3([0.5, -1.0, 4.0])
        self.assertEqual(a + b, Vector3([1.5, 1.0, 6.0]))
        self.assertEqual(a - b, Vector3([0.5, 3.0, -2.0]))
        self.assertEqual(-a, Vector3([-1.0, -2.0, -2.0]))
        self.assertEqual(2.0 * a, Vector3([2.0, 4.0, 4.0]))
        self.assertEqual(a * 0.5, Vector3([0.5, 1.0, 1.0]))
        self.assertIsInstance(a + b, Vector3)
        with self.assertRaises(TypeError):
            a + Vector2([1.0, 2.0])

    def test_norms_and_sum(self):
        a = Vector3([1.0, 2.0, 2.0])
        self.assertAlmostEqual(a.squared_norm().item(), 9.0)
        self.assertAlmostEqual(a.norm().item(), 3.0)
        self.assertAlmostEqual(a.sum().item(), 5.0)

    def test_retract_is_differentiable(self):
        delta = torch.zeros(2, dtype=DEFAULT_DTYPE, device=DEVICE, requires_grad=True)
        moved = Vector2([1.0, 2.0]).retract(delta)
        torch.sum(moved.data ** 2).backward()
        self.assertTrue(torch.allclose(delta.grad, torch.tensor([2.0, 4.0], dtype=DEFAULT_DTYPE, device=DEVICE)))

    def test_custom_dimension(self):
        class Vector5(VectorVariable):
            tangent_dim = 5

        v = Vector5.zero()
        self.assertEqual(v.data.shape, (5,))
        self.assertEqual(len(Vector5.standard_basis()), 5)


if __name__ == '__main__':
    unittest.main()
