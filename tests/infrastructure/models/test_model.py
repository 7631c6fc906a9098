import contextlib
import io
import math
import unittest

import numpy as np

from src.myras.domain._enums import ActivationFunctionType, LossFunctionType
from src.myras.domain._errors import ConfigurationError, UnsupportedTypeError
from src.myras.infrastructure.data import ScalerService, XYData, XYDataRow
from src.myras.infrastructure.layers import Layers
from src.myras.infrastructure.models import History, Model
from src.myras.infrastructure.optimizers import AdamOptimizerService
from src.myras.infrastructure.tensor import Tensor


def _build(hidden=4, batch_size=2):
    inputs = Layers.input(shape=(1,), batch_size=batch_size)
    h = Layers.dense(hidden, activation=ActivationFunctionType.RE_LU)(inputs)
    outputs = Layers.dense(1)(h)
    return Model(inputs, outputs), h, outputs


def _linear_data(n):
    return XYData([XYDataRow([i / n], [2.0 * i / n]) for i in range(n)])


class TestModelCompile(unittest.TestCase):
    def setUp(self) -> None:
        np.random.seed(0)

    def test_trainable_weights_follow_layer_order(self):
        model, h, out = _build()
        model.compile()
        self.assertTrue(model.compiled)
        self.assertEqual(
            model.trainable_weights, [h.kernel, h.biases, out.kernel, out.biases]
        )
        cfg = model.optimizer.config
        self.assertIsInstance(model.optimizer, AdamOptimizerService)
        self.assertEqual(len(cfg.first_momentum_vector), 4)
        for w, m in zip(model.trainable_weights, cfg.first_momentum_vector):
            self.assertEqual(w.shape, m.shape)

    def test_kernels_use_glorot_bound(self):
        model, h, out = _build(hidden=100)
        model.compile()
        # hidden: fan_in 1 (input width), fan_out 100 (next layer input width).
        self.assertLessEqual(
            float(np.abs(h.kernel.to_numpy()).max()), math.sqrt(6 / 101) + 1e-6
        )
        # output: fan_in 100, fan_out 0.
        self.assertLessEqual(
            float(np.abs(out.kernel.to_numpy()).max()), math.sqrt(6 / 100) + 1e-6
        )
        # Wider than the [-0.1, 0.1] range Dense uses before compile.
        self.assertGreater(float(np.abs(out.kernel.to_numpy()).max()), 0.1)

    def test_layers_without_biases_are_skipped(self):
        inputs = Layers.input(shape=(2,))
        out = Layers.dense(3, use_biases=False)(inputs)
        model = Model(inputs, out)
        model.compile()
        self.assertEqual(model.trainable_weights, [out.kernel])

    def test_optimizer_params_are_forwarded(self):
        model, _, _ = _build()
        model.compile(optimizer_params={"learning_rate": 0.05})
        self.assertEqual(model.optimizer.config.learning_rate, 0.05)

    def test_invalid_compile_arguments(self):
        model, _, _ = _build()
        with self.assertRaises(UnsupportedTypeError):
            model.compile(loss_type=LossFunctionType.MAE)
        with self.assertRaises(ConfigurationError):
            model.compile(optimizer_params={"first_momentum_vector": []})
        with self.assertRaises(ConfigurationError):
            model.compile(optimizer_params={"momentum": 0.9})
        self.assertFalse(model.compiled)

    def test_model_without_weights_cannot_compile(self):
        inputs = Layers.input(shape=(1,))
        with self.assertRaises(ConfigurationError):
            Model(inputs, inputs).compile()


class TestModelForward(unittest.TestCase):
    def test_forward_pass_shapes(self):
        np.random.seed(0)
        model, _, _ = _build()
        model.compile()
        (y,) = model.forward_pass(Tensor.from_array(np.zeros((5, 1))))
        self.assertEqual(y.shape, (5, 1))
        (p,) = model.predict([Tensor.from_array(np.ones((2, 1)))])
        self.assertEqual(p.shape, (2, 1))

    def test_input_count_mismatch(self):
        model, _, _ = _build()
        x = Tensor.from_array(np.zeros((2, 1)))
        with self.assertRaises(ValueError):
            model.forward_pass([x, x])


class TestModelFit(unittest.TestCase):
    def setUp(self) -> None:
        np.random.seed(1)

    def test_fit_before_compile_raises(self):
        model, _, _ = _build()
        with self.assertRaises(ConfigurationError):
            model.fit(_linear_data(4), batch_size=2)

    def test_fit_returns_history_and_logs(self):
        model, _, _ = _build()
        model.compile()
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            hist = model.fit(
                _linear_data(8), _linear_data(4), batch_size=2, epochs=2
            )
        self.assertIsInstance(hist, History)
        self.assertEqual(hist.epoch, [0, 1])
        self.assertEqual(len(hist["loss"]), 2)
        self.assertEqual(len(hist["test_loss"]), 2)
        lines = buf.getvalue().strip().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("Epoch 1/2 - loss: "))
        self.assertIn(" - test_loss: ", lines[1])

    def test_fit_is_silent_without_verbose(self):
        model, _, _ = _build()
        model.compile()
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            hist = model.fit(_linear_data(4), batch_size=2, verbose=0)
        self.assertEqual(buf.getvalue(), "")
        self.assertNotIn("test_loss", hist.history)

    def test_small_test_set_reports_nan(self):
        model, _, _ = _build(batch_size=4)
        model.compile()
        hist = model.fit(
            _linear_data(8), _linear_data(2), batch_size=4, verbose=0
        )
        self.assertTrue(math.isnan(hist["test_loss"][0]))

    def test_fit_argument_validation(self):
        model, _, _ = _build()
        model.compile()
        with self.assertRaises(ValueError):
            model.fit(_linear_data(1), batch_size=2, verbose=0)
        with self.assertRaises(ValueError):
            model.fit(_linear_data(4), batch_size=2, epochs=0, verbose=0)

    def test_train_on_batch_updates_weights_in_place(self):
        model, h, _ = _build()
        model.compile()
        kernel_id = h.kernel.id
        before = [w.to_numpy() for w in model.trainable_weights]
        x = Tensor.from_array([[0.5], [1.0]], trainable=False)
        y = Tensor.from_array([[1.0], [2.0]], trainable=False)
        loss = model.train_on_batch(x, y)
        self.assertTrue(math.isfinite(loss))
        self.assertEqual(h.kernel.id, kernel_id)
        after = [w.to_numpy() for w in model.trainable_weights]
        self.assertTrue(any(not np.array_equal(a, b) for a, b in zip(after, before)))
        self.assertEqual(model.optimizer.iteration, 1)

    def test_sine_regression_loss_decreases(self):
        np.random.seed(0)
        xs = np.linspace(0.0, 2.0 * np.pi, 64)
        x_scaler = ScalerService(0.0, 2.0 * np.pi, 0.0, 1.0)
        y_scaler = ScalerService(-1.0, 1.0, 0.0, 1.0)
        data = XYData(
            [
                XYDataRow([x_scaler.scale(float(x))], [y_scaler.scale(math.sin(x))])
                for x in xs
            ]
        )
        data.shuffle()

        inputs = Layers.input(shape=(1,), batch_size=8)
        h = Layers.dense(16, activation=ActivationFunctionType.RE_LU)(inputs)
        outputs = Layers.dense(1)(h)
        model = Model(inputs, outputs)
        model.compile(optimizer_params={"learning_rate": 0.01})

        hist = model.fit(data, batch_size=8, epochs=5, verbose=0)
        losses = hist["loss"]
        self.assertTrue(all(math.isfinite(v) for v in losses))
        self.assertLess(losses[1], losses[0])
        self.assertLess(losses[2], losses[1])
        self.assertLess(losses[-1], losses[0])


if __name__ == "__main__":
    unittest.main()
