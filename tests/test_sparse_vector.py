import torch
import unittest

from torchfg.sparse import BlockSparseVector
from torchfg.utils.misc import DEVICE, DEFAULT_DTYPE


class TestBlockSparseVector(unittest.TestCase):

    def setUp(self):
        """Set up common vectors for tests."""
        self.a = BlockSparseVector([1.0, 2.0], block=range(1, 3))
        self.b = BlockSparseVector([10.0, 20.0, 30.0], block=range(2, 5))

    def test_implicit_block(self):
        """A vector built from scalars alone covers [0, n)."""
        v = BlockSparseVector([1.0, 2.0, 3.0])
        self.assertEqual(v.blocks, [range(0, 3)])
        self.assertEqual(v.dimension, 3)
        self.assertEqual(v.scalars.dtype, DEFAULT_DTYPE)
        self.assertEqual(len(v), 3)

    def test_explicit_block(self):
        self.assertEqual(self.b.blocks, [range(2, 5)])
        self.assertEqual(self.b.dimension, 5)

    def test_block_length_mismatch(self):
        with self.assertRaisesRegex(ValueError, "covers 3 positions"):
            BlockSparseVector([1.0, 2.0], block=range(0, 3))

    def test_zero(self):
        zero = BlockSparseVector.zero()
        self.assertEqual(zero.blocks, [])
        self.assertEqual(zero.scalars.numel(), 0)
        self.assertEqual(zero.dimension, 0)

        total = zero + self.a
        self.assertEqual(total.blocks, self.a.blocks)
        self.assertTrue(torch.equal(total.scalars, self.a.scalars))

    def test_addition_concatenates(self):
        """Blocks are logged, not merged, even when they overlap."""
        total = self.a + self.b
        self.assertEqual(total.blocks, [range(1, 3), range(2, 5)])
        expected_scalars = torch.tensor([1.0, 2.0, 10.0, 20.0, 30.0], dtype=DEFAULT_DTYPE, device=DEVICE)
        self.assertTrue(torch.equal(total.scalars, expected_scalars))
        # Operands are left untouched
        self.assertEqual(self.a.blocks, [range(1, 3)])

    def test_in_place_addition_rebinds(self):
        acc = BlockSparseVector.zero()
        alias = acc
        acc += self.a
        acc += self.b
        self.assertEqual(len(acc.blocks), 2)
        self.assertEqual(alias.blocks, [])

    def test_subtraction_is_true_subtraction(self):
        diff = self.a - self.b
        expected = torch.tensor([0.0, 1.0, 2.0 - 10.0, -20.0, -30.0], dtype=DEFAULT_DTYPE, device=DEVICE)
        self.assertTrue(torch.allclose(diff.to_dense(), expected))

    def test_add_then_subtract_restores(self):
        """(a + b) - b materializes to a."""
        restored = (self.a + self.b) - self.b
        dense = restored.to_dense()
        self.assertTrue(torch.allclose(dense, self.a.to_dense(dense.shape[0])))

    def test_to_dense_accumulates_overlaps(self):
        dense = (self.a + self.b).to_dense()
        expected = torch.tensor([0.0, 1.0, 12.0, 20.0, 30.0], dtype=DEFAULT_DTYPE, device=DEVICE)
        self.assertTrue(torch.allclose(dense, expected))

    def test_to_dense_with_larger_dimension(self):
        dense = self.a.to_dense(6)
        self.assertEqual(dense.shape, (6,))
        self.assertEqual(dense[5].item(), 0.0)
        with self.assertRaises(ValueError):
            self.b.to_dense(3)

    def test_uniform_scalar_operations(self):
        self.assertTrue(torch.allclose(self.a.adding(1.0).scalars, torch.tensor([2.0, 3.0], device=DEVICE)))
        self.assertTrue(torch.allclose(self.a.subtracting(1.0).scalars, torch.tensor([0.0, 1.0], device=DEVICE)))
        self.assertTrue(torch.allclose(self.a.scaled(3.0).scalars, torch.tensor([3.0, 6.0], device=DEVICE)))
        self.assertTrue(torch.allclose((2.0 * self.a).scalars, torch.tensor([2.0, 4.0], device=DEVICE)))
        self.assertTrue(torch.allclose((-self.a).scalars, torch.tensor([-1.0, -2.0], device=DEVICE)))
        # Blocks are preserved and the original is unchanged
        self.assertEqual(self.a.scaled(3.0).blocks, [range(1, 3)])
        self.assertTrue(torch.allclose(self.a.scalars, torch.tensor([1.0, 2.0], device=DEVICE)))

    def test_squared_norm(self):
        self.assertAlmostEqual((self.a + self.a).squared_norm(), 4.0 + 16.0)


if __name__ == '__main__':
    unittest.main()
