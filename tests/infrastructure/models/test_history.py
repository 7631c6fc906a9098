import unittest

from src.myras.infrastructure.models import History


class TestHistory(unittest.TestCase):
    def test_append_epoch(self):
        hist = History()
        hist.append_epoch(0, {"loss": 1.0})
        hist.append_epoch(1, {"loss": 0.5, "test_loss": 0.75})
        self.assertEqual(len(hist), 2)
        self.assertEqual(hist.epoch, [0, 1])
        self.assertEqual(hist["loss"], [1.0, 0.5])
        self.assertEqual(hist["test_loss"], [0.75])
        self.assertEqual(hist.last(), {"loss": 0.5, "test_loss": 0.75})

    def test_values_are_python_floats(self):
        hist = History()
        hist.append_epoch(0, {"loss": 1})
        self.assertIsInstance(hist["loss"][0], float)

    def test_missing_metric_raises(self):
        with self.assertRaises(KeyError):
            History()["loss"]


if __name__ == "__main__":
    unittest.main()
