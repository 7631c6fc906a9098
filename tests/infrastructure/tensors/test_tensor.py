import unittest

import numpy as np

from src.myras.domain._errors import ShapeError
from src.myras.infrastructure.tensor import Matrix, Tensor


class TestTensor(unittest.TestCase):
    def test_ids_are_unique_and_increasing(self):
        a, b = Tensor.zeros((1,)), Tensor.zeros((1,))
        self.assertNotEqual(a.id, b.id)
        self.assertGreater(b.id, a.id)

    def test_requires_matrix(self):
        with self.assertRaises(TypeError):
            Tensor(np.zeros(3))

    def test_factories(self):
        t = Tensor.from_values((2, 2), [1, 2, 3, 4], trainable=False)
        self.assertEqual(t.shape, (2, 2))
        self.assertFalse(t.trainable)
        np.testing.assert_array_equal(Tensor.full((3,), 2.0).to_numpy(), [2, 2, 2])
        self.assertTrue(Tensor.zeros((1,)).trainable)
        self.assertEqual(Tensor.from_array([[1.0], [2.0]]).shape, (2, 1))

    def test_item(self):
        self.assertEqual(Tensor.scalar(1.5).item(), 1.5)
        with self.assertRaises(ValueError):
            Tensor.zeros((2,)).item()

    def test_copy_from_keeps_id(self):
        t = Tensor.zeros((2,))
        tid = t.id
        t.copy_from(Tensor.from_array([1.0, 2.0]))
        self.assertEqual(t.id, tid)
        np.testing.assert_array_equal(t.to_numpy(), [1, 2])
        t.copy_from(Matrix.from_array([5.0, 6.0]))
        np.testing.assert_array_equal(t.to_numpy(), [5, 6])

    def test_copy_from_shape_mismatch_raises(self):
        with self.assertRaises(ShapeError):
            Tensor.zeros((2,)).copy_from(Tensor.zeros((2, 1)))

    def test_repr_mentions_id_and_shape(self):
        t = Tensor.zeros((2, 3))
        r = repr(t)
        self.assertIn(str(t.id), r)
        self.assertIn("(2, 3)", r)


if __name__ == "__main__":
    unittest.main()
