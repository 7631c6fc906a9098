import unittest

import numpy as np

from src.myras.domain._enums import TensorOperationType
from src.myras.domain._errors import GraphIntegrityError, ShapeError
from src.myras.infrastructure._tensor_operation import TensorOperation
from src.myras.infrastructure.graph import ValueNode
from src.myras.infrastructure.tensor import Matrix, Tensor


def _double(op):
    (x,) = op.inputs
    return (Tensor(x.values * 2.0, trainable=False),)


def _double_derivative(op, node):
    return (Tensor(node.gradient * 2.0, trainable=False),)


def _make(derivative=_double_derivative, operation=_double):
    x = Tensor.from_array([1.0, 2.0])
    return TensorOperation(TensorOperationType.LINEAR, (x,), operation, derivative)


class TestTensorOperation(unittest.TestCase):
    def test_ids_are_unique(self):
        self.assertNotEqual(_make().id, _make().id)

    def test_gradients_start_as_zeros_shaped_like_inputs(self):
        op = _make()
        self.assertEqual(len(op.gradients), 1)
        self.assertEqual(op.gradients[0].shape, op.inputs[0].shape)
        np.testing.assert_array_equal(op.gradients[0].to_numpy(), [0, 0])

    def test_call_caches_outputs(self):
        op = _make()
        self.assertEqual(op.outputs, ())
        y = op.call_single_result()
        self.assertEqual(op.outputs, (y,))
        np.testing.assert_array_equal(y.to_numpy(), [2, 4])

    def test_call_single_result_requires_one_output(self):
        op = _make(operation=lambda op: ())
        with self.assertRaises(GraphIntegrityError):
            op.call_single_result()

    def test_call_derivative_stores_gradients(self):
        op = _make()
        y = op.call_single_result()
        node = ValueNode(y)
        node.gradient = Matrix.from_array([1.0, 3.0])
        g = op.call_derivative_single_result(node)
        np.testing.assert_array_equal(g.to_numpy(), [2, 6])
        self.assertIs(op.gradients[0], g)

    def test_derivative_before_call_raises(self):
        op = _make()
        with self.assertRaises(GraphIntegrityError):
            op.call_derivative(ValueNode(Tensor.zeros((2,))))

    def test_wrong_gradient_count_raises(self):
        op = _make(derivative=lambda op, node: ())
        y = op.call_single_result()
        with self.assertRaises(GraphIntegrityError):
            op.call_derivative(ValueNode(y))

    def test_wrong_gradient_shape_raises(self):
        op = _make(derivative=lambda op, node: (Tensor.zeros((3,)),))
        y = op.call_single_result()
        with self.assertRaises(ShapeError):
            op.call_derivative(ValueNode(y))


if __name__ == "__main__":
    unittest.main()
