import unittest

from src.myras.domain import IOptimizer, ITensor, ITensorOperation
from src.myras.infrastructure.ops import math_t
from src.myras.infrastructure.optimizers import AdamOptimizerService
from src.myras.infrastructure.tensor import Tensor


class TestProtocolConformance(unittest.TestCase):
    def test_tensor_is_itensor(self):
        self.assertIsInstance(Tensor.zeros((2, 2)), ITensor)

    def test_operation_is_itensor_operation(self):
        op = math_t.addition_op(Tensor.zeros((2,)), Tensor.zeros((2,)))
        self.assertIsInstance(op, ITensorOperation)

    def test_adam_is_ioptimizer(self):
        self.assertIsInstance(AdamOptimizerService(), IOptimizer)

    def test_plain_object_is_not_ioptimizer(self):
        self.assertNotIsInstance(object(), IOptimizer)


if __name__ == "__main__":
    unittest.main()
