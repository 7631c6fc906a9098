import unittest

import numpy as np

from src.myras.domain._errors import ShapeError
from src.myras.infrastructure.ops import math_m
from src.myras.infrastructure.tensor import Matrix


def _m(values):
    return Matrix.from_array(values)


class TestElementWiseMath(unittest.TestCase):
    def test_arithmetic_broadcasts(self):
        a = _m([[1.0, 2.0], [3.0, 4.0]])
        b = _m([2.0, 4.0])
        np.testing.assert_array_equal(
            math_m.addition(a, b).to_numpy(), [[3, 6], [5, 8]]
        )
        np.testing.assert_array_equal(
            math_m.subtraction(a, b).to_numpy(), [[-1, -2], [1, 0]]
        )
        np.testing.assert_array_equal(
            math_m.multiplication(a, b).to_numpy(), [[2, 8], [6, 16]]
        )
        np.testing.assert_allclose(
            math_m.division(a, b).to_numpy(), [[0.5, 0.5], [1.5, 1.0]]
        )

    def test_sqrt_and_square(self):
        np.testing.assert_allclose(math_m.sqrt(_m([4.0, 9.0])).values, [2, 3])
        np.testing.assert_allclose(math_m.square(_m([-3.0, 2.0])).values, [9, 4])

    def test_relu_and_derivative(self):
        x = _m([-2.0, 0.0, 3.0])
        np.testing.assert_array_equal(math_m.relu(x).values, [0, 0, 3])
        d = math_m.relu_derivative(x).values
        self.assertEqual(d[0], 0.0)
        self.assertTrue(np.isnan(d[1]))
        self.assertEqual(d[2], 1.0)


class TestTranspose(unittest.TestCase):
    def test_matrix_transpose(self):
        arr = np.arange(1, 13, dtype=np.float32).reshape(3, 4)
        t = math_m.transpose(_m(arr))
        self.assertEqual(t.shape, (4, 3))
        np.testing.assert_array_equal(t.to_numpy(), arr.T)

    def test_double_transpose_is_identity(self):
        m = _m(np.arange(12).reshape(3, 4))
        self.assertEqual(math_m.transpose(math_m.transpose(m)), m)

    def test_explicit_permutation(self):
        arr = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        t = math_m.transpose(_m(arr), (1, 0, 2))
        np.testing.assert_array_equal(t.to_numpy(), np.transpose(arr, (1, 0, 2)))

    def test_inverse_permutation(self):
        self.assertEqual(math_m.inverse_permutation((1, 2, 0)), (2, 0, 1))
        self.assertEqual(math_m.inverse_permutation((1, 0)), (1, 0))

    def test_rank_one_raises(self):
        with self.assertRaises(ShapeError):
            math_m.transpose(_m([1.0, 2.0, 3.0]))

    def test_invalid_permutation_raises(self):
        with self.assertRaises(ShapeError):
            math_m.transpose(_m(np.zeros((2, 3))), (0, 0))


class TestDotProduct(unittest.TestCase):
    def test_matrix_product(self):
        a = _m([[1, 2, 3], [4, 5, 6]])
        b = _m([[7, 8], [9, 10], [11, 12]])
        out = math_m.dot_product(a, b)
        self.assertEqual(out.shape, (2, 2))
        np.testing.assert_array_equal(out.to_numpy(), [[58, 64], [139, 154]])

    def test_vector_dot_is_scalar(self):
        out = math_m.dot_product(_m([1, 2, 3]), _m([4, 5, 6]))
        self.assertEqual(out.shape, (1,))
        self.assertEqual(out.values[0], 32.0)

    def test_invalid_operands_raise(self):
        with self.assertRaises(ShapeError):
            math_m.dot_product(_m([1, 2]), _m([[1, 2], [3, 4]]))
        with self.assertRaises(ShapeError):
            math_m.dot_product(_m([1, 2]), _m([1, 2, 3]))
        with self.assertRaises(ShapeError):
            math_m.dot_product(_m(np.zeros((2, 3))), _m(np.zeros((2, 3))))
        with self.assertRaises(ShapeError):
            math_m.dot_product(_m(np.zeros((2, 2, 2))), _m(np.zeros((2, 2, 2))))


if __name__ == "__main__":
    unittest.main()
