"""
High-level model: compile, forward pass and a Keras-like training loop.

A `Model` is declared by its input and output layers; the layers in between
are discovered by breadth-first traversal over `layers_next`. The traversal
order fixes the order of the trainable-weights list, which in turn fixes the
index alignment of the optimizer's momentum vectors.

Training
--------
`fit` iterates epochs and fixed-size batches sequentially (a trailing short
batch is dropped). Each training batch runs inside its own `GradientTape`
scope: forward pass, loss, gradients of every trainable weight. The tape is
disposed before the optimizer updates the weights in place, so batch
``n + 1`` always sees the weights produced by batch ``n``. Test batches are
evaluated without a tape. Per-epoch mean losses are printed when `verbose`
is set and returned in a `History`.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Any, Deque, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from ...domain._enums import LayerType, LossFunctionType, OptimizerType
from ...domain._errors import ConfigurationError, UnsupportedTypeError
from .._gradient_tape import GradientTape
from ..data._xy_data import XYData
from ..layers._dense import Dense
from ..layers._layer import Layer
from ..ops import math_t
from ..optimizers._adam import AdamConfig, AdamOptimizerService
from ..optimizers._base import OptimizerService
from ..tensor._tensor import Tensor
from ..utils.weight_initializer import WeightInitializer
from ._history import History

LayerOrLayers = Union[Layer, Sequence[Layer]]
TensorOrTensors = Union[Tensor, Sequence[Tensor]]

_MOMENTUM_KEYS = ("first_momentum_vector", "second_momentum_vector")


def _as_list(items: Any, kind: type) -> List[Any]:
    if isinstance(items, kind):
        return [items]
    return list(items)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else math.nan


class Model:
    """
    Layer-DAG model.

    Parameters
    ----------
    inputs : Layer | Sequence[Layer]
        Input layers, in the order `forward_pass` expects its tensors.
    outputs : Layer | Sequence[Layer]
        Output layers, in the order `forward_pass` returns their tensors.

    Attributes
    ----------
    trainable_weights : List[Tensor]
        Weights handed to the optimizer; populated by `compile`.
    optimizer : Optional[OptimizerService]
        Configured optimizer; None until `compile`.
    loss_type : Optional[LossFunctionType]
        Configured loss; None until `compile`.
    """

    def __init__(self, inputs: LayerOrLayers, outputs: LayerOrLayers) -> None:
        self.inputs: List[Layer] = _as_list(inputs, Layer)
        self.outputs: List[Layer] = _as_list(outputs, Layer)
        if not self.inputs or not self.outputs:
            raise ValueError("Model requires at least one input and one output layer")
        self.trainable_weights: List[Tensor] = []
        self.optimizer: Optional[OptimizerService] = None
        self.loss_type: Optional[LossFunctionType] = None

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------
    def layers(self) -> Iterator[Layer]:
        """Yield every layer reachable from the inputs, breadth-first, once."""
        queue: Deque[Layer] = deque(self.inputs)
        seen = set()
        while queue:
            layer = queue.popleft()
            if id(layer) in seen:
                continue
            seen.add(id(layer))
            yield layer
            queue.extend(layer.layers_next)

    @property
    def compiled(self) -> bool:
        return self.optimizer is not None

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------
    def _initialize_dense(self, layer: Dense) -> None:
        previous, following = layer.layers_previous, layer.layers_next
        fan_in = previous[0].output_shape[-1] if previous else 0
        fan_out = following[0].input_shape[-1] if following else 0
        WeightInitializer("xavier_uniform")(layer.kernel, fan_in, fan_out)

    def compile(
        self,
        optimizer_type: OptimizerType = OptimizerType.ADAM,
        optimizer_params: Optional[Mapping[str, Any]] = None,
        loss_type: LossFunctionType = LossFunctionType.MSE,
    ) -> None:
        """
        Initialize weights, collect trainable weights and set up the optimizer.

        Parameters
        ----------
        optimizer_type : OptimizerType, optional
            Only `OptimizerType.ADAM` is implemented.
        optimizer_params : Mapping[str, Any], optional
            `AdamConfig` overrides (``learning_rate``, ``decay_rate_1``,
            ``decay_rate_2``, ``epsilon``). Momentum vectors are built here
            and must not be supplied.
        loss_type : LossFunctionType, optional
            Only `LossFunctionType.MSE` is implemented.

        Raises
        ------
        UnsupportedTypeError
            For an unimplemented optimizer, loss or layer type.
        ConfigurationError
            For invalid optimizer parameters, or a model without trainable
            weights.
        """
        if optimizer_type is not OptimizerType.ADAM:
            raise UnsupportedTypeError(
                "optimizer type", optimizer_type, [OptimizerType.ADAM]
            )
        if loss_type is not LossFunctionType.MSE:
            raise UnsupportedTypeError(
                "loss function", loss_type, [LossFunctionType.MSE]
            )

        weights: List[Tensor] = []
        for layer in self.layers():
            if layer.layer_type is LayerType.INPUT:
                continue
            if layer.layer_type is LayerType.DENSE:
                self._initialize_dense(layer)  # type: ignore[arg-type]
                if layer.trainable:
                    weights.extend(layer.trainable_weights)
                continue
            raise UnsupportedTypeError("layer type", layer.layer_type)

        params: Dict[str, Any] = dict(optimizer_params or {})
        supplied = [k for k in _MOMENTUM_KEYS if k in params]
        if supplied:
            raise ConfigurationError(
                f"Momentum vectors are built by compile(); got {', '.join(supplied)}"
            )
        params["first_momentum_vector"] = [
            Tensor.zeros(w.shape, trainable=False) for w in weights
        ]
        params["second_momentum_vector"] = [
            Tensor.zeros(w.shape, trainable=False) for w in weights
        ]

        optimizer = AdamOptimizerService()
        optimizer.initialize(AdamConfig.from_mapping(params))

        self.trainable_weights = weights
        self.optimizer = optimizer
        self.loss_type = loss_type

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------
    def forward_pass(
        self, inputs: TensorOrTensors, tape: Optional[GradientTape] = None
    ) -> List[Tensor]:
        """
        Run every layer once, breadth-first from the inputs.

        Parameters
        ----------
        inputs : Tensor | Sequence[Tensor]
            One tensor per input layer, batched as ``(batch, features)``.
        tape : Optional[GradientTape], optional
            Tape recording every operation of the pass.

        Returns
        -------
        List[Tensor]
            Output tensors of the output layers, in declaration order.

        Raises
        ------
        ValueError
            If the number of tensors differs from the number of input layers.
        """
        tensors: List[Tensor] = _as_list(inputs, Tensor)
        if len(tensors) != len(self.inputs):
            raise ValueError(
                f"Model has {len(self.inputs)} input layer(s), got {len(tensors)} "
                "tensor(s)"
            )
        for layer, x in zip(self.inputs, tensors):
            layer.input = x

        for layer in self.layers():
            output = layer.forward_pass(tape)
            for nxt in layer.layers_next:
                nxt.input = output
        return [layer.output for layer in self.outputs]  # type: ignore[misc]

    def predict(self, inputs: TensorOrTensors) -> List[Tensor]:
        """Untaped forward pass."""
        return self.forward_pass(inputs)

    # ------------------------------------------------------------------
    # Loss & training steps
    # ------------------------------------------------------------------
    def _require_compiled(self) -> OptimizerService:
        if self.optimizer is None:
            raise ConfigurationError("Model must be compiled before training.")
        return self.optimizer

    def _loss(
        self,
        predictions: Sequence[Tensor],
        targets: TensorOrTensors,
        tape: Optional[GradientTape],
    ) -> Tensor:
        targets = _as_list(targets, Tensor)
        if len(targets) != len(predictions):
            raise ValueError(
                f"Model has {len(predictions)} output(s), got {len(targets)} target(s)"
            )
        if self.loss_type is not LossFunctionType.MSE:
            raise UnsupportedTypeError("loss function", self.loss_type)
        total: Optional[Tensor] = None
        for predicted, target in zip(predictions, targets):
            loss = math_t.mse(predicted, target, tape)
            total = loss if total is None else math_t.addition(total, loss, tape)
        return total  # type: ignore[return-value]

    def train_on_batch(
        self, x_batch: TensorOrTensors, y_batch: TensorOrTensors
    ) -> float:
        """
        Run one optimization step on a batch.

        Returns
        -------
        float
            Loss of the batch before the update.
        """
        optimizer = self._require_compiled()
        with GradientTape() as tape:
            predictions = self.forward_pass(x_batch, tape)
            loss = self._loss(predictions, y_batch, tape)
            gradients = tape.get_gradients(loss, *self.trainable_weights)
        optimizer.optimize(self.trainable_weights, gradients)
        return loss.item()

    def test_on_batch(
        self, x_batch: TensorOrTensors, y_batch: TensorOrTensors
    ) -> float:
        """Return the loss of a batch without recording or updating."""
        self._require_compiled()
        predictions = self.forward_pass(x_batch)
        return self._loss(predictions, y_batch, None).item()

    def fit(
        self,
        train_data: XYData,
        test_data: Optional[XYData] = None,
        batch_size: int = 1,
        epochs: int = 1,
        verbose: int = 1,
    ) -> History:
        """
        Train the model for a fixed number of epochs.

        Parameters
        ----------
        train_data : XYData
            Training rows. Must contain at least one full batch.
        test_data : Optional[XYData], optional
            Held-out rows evaluated after each epoch. When given, the epoch
            logs include ``test_loss`` (NaN if it holds no full batch).
        batch_size : int, optional
            Rows per batch. Default is 1.
        epochs : int, optional
            Number of passes over `train_data`. Default is 1.
        verbose : int, optional
            If non-zero, prints one summary line per epoch. Default is 1.

        Returns
        -------
        History
            Per-epoch mean ``loss`` (and ``test_loss``).

        Raises
        ------
        ConfigurationError
            If the model has not been compiled.
        ValueError
            If `epochs < 1`, `batch_size < 1`, or `train_data` has fewer rows
            than `batch_size`.
        """
        self._require_compiled()
        if epochs < 1:
            raise ValueError("epochs must be >= 1")
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if len(train_data) < batch_size:
            raise ValueError(
                f"train_data has {len(train_data)} row(s), fewer than one batch "
                f"of {batch_size}"
            )

        hist = History()
        for epoch_idx in range(epochs):
            train_losses = [
                self.train_on_batch(xb, yb)
                for xb, yb in train_data.iter_batches(batch_size)
            ]
            logs: Dict[str, float] = {"loss": _mean(train_losses)}
            if test_data is not None:
                test_losses = [
                    self.test_on_batch(xb, yb)
                    for xb, yb in test_data.iter_batches(batch_size)
                ]
                logs["test_loss"] = _mean(test_losses)

            hist.append_epoch(epoch_idx, logs)

            if verbose:
                parts = [f"Epoch {epoch_idx + 1}/{epochs}"]
                for k, v in logs.items():
                    parts.append(f"{k}: {v:.6f}")
                print(" - ".join(parts))

        return hist
