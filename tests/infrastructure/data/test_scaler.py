import unittest

from src.myras.infrastructure.data import ScalerService


class TestScalerService(unittest.TestCase):
    def setUp(self) -> None:
        self.scaler = ScalerService(0.0, 10.0, -1.0, 1.0)

    def test_scale_number(self):
        self.assertAlmostEqual(self.scaler.scale(0.0), -1.0)
        self.assertAlmostEqual(self.scaler.scale(5.0), 0.0)
        self.assertAlmostEqual(self.scaler.scale(10.0), 1.0)

    def test_scale_back_inverts_scale(self):
        for v in (0.0, 2.5, 7.0, 10.0):
            self.assertAlmostEqual(self.scaler.scale_back(self.scaler.scale(v)), v)

    def test_nested_sequences_keep_structure(self):
        out = self.scaler.scale([[0.0, 10.0], [5.0]])
        self.assertEqual(len(out), 2)
        self.assertEqual(out[0], [-1.0, 1.0])
        self.assertEqual(out[1], [0.0])

    def test_fit_uses_observed_range(self):
        scaler = ScalerService.fit([3.0, -1.0, 7.0])
        self.assertEqual((scaler.original_min, scaler.original_max), (-1.0, 7.0))
        self.assertAlmostEqual(scaler.scale(3.0), 0.5)

    def test_degenerate_ranges_raise(self):
        with self.assertRaises(ValueError):
            ScalerService(1.0, 1.0)
        with self.assertRaises(ValueError):
            ScalerService(0.0, 1.0, 2.0, 2.0)
        with self.assertRaises(ValueError):
            ScalerService.fit([])


if __name__ == "__main__":
    unittest.main()
