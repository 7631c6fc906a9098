import unittest

from src.myras.domain._errors import (
    ConfigurationError,
    GraphIntegrityError,
    IndexOutOfRangeError,
    ReductionError,
    ShapeError,
    TapeStateError,
    UnsupportedTypeError,
)


class TestErrorHierarchy(unittest.TestCase):
    def test_errors_subclass_builtin_exceptions(self):
        self.assertTrue(issubclass(ShapeError, ValueError))
        self.assertTrue(issubclass(ReductionError, ShapeError))
        self.assertTrue(issubclass(IndexOutOfRangeError, IndexError))
        self.assertTrue(issubclass(GraphIntegrityError, RuntimeError))
        self.assertTrue(issubclass(TapeStateError, RuntimeError))
        self.assertTrue(issubclass(ConfigurationError, ValueError))
        self.assertTrue(issubclass(UnsupportedTypeError, NotImplementedError))

    def test_shape_error_keeps_shapes(self):
        err = ShapeError("Cannot broadcast", (2, 3), (3, 2))
        self.assertEqual(len(err.shapes), 2)
        self.assertIn("Cannot broadcast", str(err))

    def test_index_error_mentions_index(self):
        err = IndexOutOfRangeError((2, 0), (2, 3))
        self.assertEqual(err.index, (2, 0))
        self.assertIn("2", str(err))

    def test_unsupported_type_error_message(self):
        err = UnsupportedTypeError("loss function", "mae", ["mse"])
        self.assertEqual(err.kind, "loss function")
        self.assertEqual(err.value, "mae")
        self.assertIn("loss function", str(err))


if __name__ == "__main__":
    unittest.main()
