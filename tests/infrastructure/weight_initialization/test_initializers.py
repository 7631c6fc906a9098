import math
import unittest

import numpy as np

from src.myras.infrastructure.tensor import Tensor
from src.myras.infrastructure.utils.weight_initializer import WeightInitializer


class TestRegistry(unittest.TestCase):
    def test_builtins_are_registered(self):
        for name in ("uniform", "xavier_uniform", "constant", "zeros"):
            self.assertIn(name, WeightInitializer.available())

    def test_unknown_name_raises(self):
        with self.assertRaises(ValueError):
            WeightInitializer("does_not_exist")

    def test_duplicate_registration_raises(self):
        with self.assertRaises(ValueError):
            WeightInitializer.register_initializer("uniform")(lambda t: t)


class TestInitializers(unittest.TestCase):
    def setUp(self) -> None:
        np.random.seed(0)

    def test_uniform_bounds_and_in_place(self):
        t = Tensor.zeros((50, 20))
        tid = t.id
        out = WeightInitializer("uniform")(t, -0.1, 0.1)
        self.assertIs(out, t)
        self.assertEqual(t.id, tid)
        values = t.to_numpy()
        self.assertTrue(np.all(values >= -0.1) and np.all(values <= 0.1))
        self.assertGreater(values.std(), 0.0)

    def test_uniform_rejects_inverted_bounds(self):
        with self.assertRaises(ValueError):
            WeightInitializer("uniform")(Tensor.zeros((2,)), 1.0, -1.0)

    def test_xavier_uniform_bound(self):
        t = Tensor.zeros((100, 50))
        WeightInitializer("xavier_uniform")(t, 50, 100)
        bound = math.sqrt(6.0 / 150.0)
        values = t.to_numpy()
        self.assertLessEqual(float(np.abs(values).max()), bound + 1e-6)
        # Uniform on [-b, b] has std b / sqrt(3).
        self.assertAlmostEqual(float(values.std()), bound / math.sqrt(3), delta=0.01)

    def test_xavier_uniform_output_layer(self):
        t = Tensor.zeros((1, 200))
        WeightInitializer("xavier_uniform")(t, 200, 0)
        self.assertLessEqual(float(np.abs(t.to_numpy()).max()), math.sqrt(6 / 200))

    def test_xavier_uniform_invalid_fans(self):
        init = WeightInitializer("xavier_uniform")
        with self.assertRaises(ValueError):
            init(Tensor.zeros((2,)), 0, 0)
        with self.assertRaises(ValueError):
            init(Tensor.zeros((2,)), -1, 3)

    def test_constant_and_zeros(self):
        t = Tensor.full((3,), 5.0)
        WeightInitializer("constant")(t)
        np.testing.assert_allclose(t.to_numpy(), [0.01, 0.01, 0.01])
        WeightInitializer("zeros")(t)
        np.testing.assert_array_equal(t.to_numpy(), [0, 0, 0])


if __name__ == "__main__":
    unittest.main()
