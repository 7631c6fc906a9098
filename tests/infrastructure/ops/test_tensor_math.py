import unittest

import numpy as np

from src.myras.domain._enums import TensorOperationType
from src.myras.domain._errors import ShapeError
from src.myras.infrastructure._gradient_tape import GradientTape
from src.myras.infrastructure.ops import math_t
from src.myras.infrastructure.tensor import Tensor


def _t(values):
    return Tensor.from_array(np.asarray(values, dtype=np.float32))


class TestForward(unittest.TestCase):
    def test_binary_ops(self):
        a, b = _t([[1.0, 2.0], [3.0, 4.0]]), _t([2.0, 4.0])
        np.testing.assert_array_equal(
            math_t.addition(a, b).to_numpy(), [[3, 6], [5, 8]]
        )
        np.testing.assert_array_equal(
            math_t.subtraction(a, b).to_numpy(), [[-1, -2], [1, 0]]
        )
        np.testing.assert_array_equal(
            math_t.multiplication(a, b).to_numpy(), [[2, 8], [6, 16]]
        )
        np.testing.assert_allclose(
            math_t.division(a, b).to_numpy(), [[0.5, 0.5], [1.5, 1.0]]
        )

    def test_numbers_are_promoted_to_scalars(self):
        x = _t([1.0, 2.0])
        np.testing.assert_array_equal(math_t.multiplication(2.0, x).to_numpy(), [2, 4])
        np.testing.assert_array_equal(math_t.addition(x, 1).to_numpy(), [2, 3])

    def test_outputs_are_new_non_trainable_tensors(self):
        x = _t([1.0, -1.0])
        y = math_t.relu(x)
        self.assertNotEqual(y.id, x.id)
        self.assertFalse(y.trainable)
        np.testing.assert_array_equal(y.to_numpy(), [1, 0])

    def test_linear_is_identity(self):
        x = _t([[1.0, -2.0]])
        np.testing.assert_array_equal(math_t.linear(x).to_numpy(), x.to_numpy())

    def test_transpose_and_dot(self):
        a = _t([[1, 2, 3], [4, 5, 6]])
        b = _t([[7, 9, 11], [8, 10, 12]])
        out = math_t.dot_product(a, math_t.transpose(b))
        np.testing.assert_array_equal(out.to_numpy(), [[58, 64], [139, 154]])

    def test_mse_value(self):
        loss = math_t.mse(_t([1.0, 2.0, 3.0]), _t([1.0, 1.0, 1.0]))
        self.assertEqual(loss.shape, (1,))
        self.assertAlmostEqual(loss.item(), 5.0 / 3.0, places=6)

    def test_mse_size_mismatch_raises(self):
        with self.assertRaises(ShapeError):
            math_t.mse(_t([1.0, 2.0]), _t([1.0, 2.0, 3.0]))

    def test_op_factories_tag_operation_type(self):
        op = math_t.dot_product_op(_t([1.0]), _t([2.0]))
        self.assertIs(op.type, TensorOperationType.DOT_PRODUCT)
        self.assertEqual(op.outputs, ())


class TestBackward(unittest.TestCase):
    def _grads(self, build, *inputs):
        with GradientTape() as tape:
            for x in inputs:
                tape.record(x)
            y = build(tape)
            return [g.to_numpy() for g in tape.get_gradients(y, *inputs)]

    def test_addition_reduces_broadcast_gradient(self):
        a, b = _t(np.ones((2, 3))), _t([1.0, 2.0, 3.0])
        da, db = self._grads(lambda tape: math_t.addition(a, b, tape), a, b)
        np.testing.assert_array_equal(da, np.ones((2, 3)))
        np.testing.assert_array_equal(db, [2, 2, 2])

    def test_subtraction_negates_right_gradient(self):
        a, b = _t(np.ones((2, 3))), _t([1.0, 2.0, 3.0])
        da, db = self._grads(lambda tape: math_t.subtraction(a, b, tape), a, b)
        np.testing.assert_array_equal(da, np.ones((2, 3)))
        np.testing.assert_array_equal(db, [-2, -2, -2])

    def test_multiplication_same_shape(self):
        a, b = _t([[1.0, 2.0], [3.0, 4.0]]), _t([[5.0, 6.0], [7.0, 8.0]])
        da, db = self._grads(lambda tape: math_t.multiplication(a, b, tape), a, b)
        np.testing.assert_array_equal(da, b.to_numpy())
        np.testing.assert_array_equal(db, a.to_numpy())

    def test_multiplication_broadcast_operand(self):
        a = _t([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        b = _t([10.0, 20.0, 30.0])
        da, db = self._grads(lambda tape: math_t.multiplication(a, b, tape), a, b)
        np.testing.assert_array_equal(da, [[10, 20, 30], [10, 20, 30]])
        # Reduced operand times reduced seed: colsum(a) * 2.
        np.testing.assert_array_equal(db, [10, 14, 18])

    def test_division(self):
        a, b = _t([2.0, 4.0]), _t([4.0, 8.0])
        da, db = self._grads(lambda tape: math_t.division(a, b, tape), a, b)
        np.testing.assert_allclose(da, [0.25, 0.125])
        np.testing.assert_allclose(db, [-0.125, -0.0625])

    def test_sqrt(self):
        x = _t([4.0, 9.0])
        (dx,) = self._grads(lambda tape: math_t.sqrt(x, tape), x)
        np.testing.assert_allclose(dx, [0.25, 1.0 / 6.0], rtol=1e-6)

    def test_relu(self):
        x = _t([-1.0, 2.0, 0.0])
        (dx,) = self._grads(lambda tape: math_t.relu(x, tape), x)
        self.assertEqual(dx[0], 0.0)
        self.assertEqual(dx[1], 1.0)
        self.assertTrue(np.isnan(dx[2]))

    def test_linear(self):
        x = _t([[1.0, -2.0]])
        (dx,) = self._grads(lambda tape: math_t.linear(x, tape), x)
        np.testing.assert_array_equal(dx, [[1, 1]])

    def test_transpose_applies_inverse_permutation(self):
        x = _t(np.arange(24, dtype=np.float32).reshape(2, 3, 4))
        c = _t(np.arange(24, dtype=np.float32).reshape(3, 4, 2))

        def build(tape):
            y = math_t.transpose(x, (1, 2, 0), tape)
            return math_t.multiplication(y, c, tape)

        (dx,) = self._grads(build, x)
        self.assertEqual(dx.shape, (2, 3, 4))
        np.testing.assert_array_equal(dx, np.transpose(c.to_numpy(), (2, 0, 1)))

    def test_matrix_dot_product(self):
        a = _t(np.arange(6, dtype=np.float32).reshape(2, 3))
        b = _t(np.arange(6, dtype=np.float32).reshape(3, 2) - 2.0)
        c = _t([[1.0, 2.0], [3.0, 4.0]])

        def build(tape):
            return math_t.multiplication(math_t.dot_product(a, b, tape), c, tape)

        da, db = self._grads(build, a, b)
        np.testing.assert_allclose(da, c.to_numpy() @ b.to_numpy().T)
        np.testing.assert_allclose(db, a.to_numpy().T @ c.to_numpy())

    def test_vector_dot_product(self):
        a, b = _t([1.0, 2.0, 3.0]), _t([4.0, 5.0, 6.0])
        da, db = self._grads(lambda tape: math_t.dot_product(a, b, tape), a, b)
        np.testing.assert_array_equal(da, [4, 5, 6])
        np.testing.assert_array_equal(db, [1, 2, 3])

    def test_mse(self):
        p, t = _t([1.0, 2.0, 3.0]), _t([1.0, 1.0, 1.0])
        dp, dt = self._grads(lambda tape: math_t.mse(p, t, tape), p, t)
        np.testing.assert_allclose(dp, [0.0, 2.0 / 3.0, 4.0 / 3.0], rtol=1e-6)
        np.testing.assert_allclose(dt, -dp)

    def test_untaped_ops_record_nothing(self):
        tape = GradientTape()
        math_t.addition(_t([1.0]), _t([2.0]))
        self.assertEqual(len(tape.graph), 0)


if __name__ == "__main__":
    unittest.main()
