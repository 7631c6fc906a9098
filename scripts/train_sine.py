#!/usr/bin/env python3
"""
Fit a noisy sine wave with a small Myras regression model.

Generates ``y = sin(x) + noise`` on ``[-2*pi, 2*pi]``, scales both columns to
``[-1, 1]``, splits the rows into training and test sets, trains a
1 -> 50 -> 100 -> 200 -> 1 ReLU network with Adam and prints target vs.
predicted values for the test rows, sorted by x.

Usage
-----
    python scripts/train_sine.py --epochs 20
    python scripts/train_sine.py --dot graph.dot   # dump one recorded batch
"""

import os
import sys

# Ensure repo_root/src is importable when running this file directly.
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import argparse
from pathlib import Path

import numpy as np

from myras import (
    ActivationFunctionType,
    GradientTape,
    Layers,
    LossFunctionType,
    Model,
    OptimizerType,
    ScalerService,
    XYData,
    math_t,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    p.add_argument("--size", type=int, default=1500, help="number of samples")
    p.add_argument("--noise", type=float, default=0.05, help="noise std factor")
    p.add_argument("--split", type=float, default=0.75, help="train fraction")
    p.add_argument("--batch-size", type=int, default=32)
    p.add_argument("--learning-rate", type=float, default=1e-3)
    p.add_argument("--epochs", type=int, default=100)
    p.add_argument("--seed", type=int, default=23144532)
    p.add_argument(
        "--dot",
        type=Path,
        default=None,
        help="write the computation graph of one training batch (Graphviz DOT)",
    )
    return p.parse_args()


def generate_data(size: int, noise: float) -> np.ndarray:
    x = np.linspace(-2.0 * np.pi, 2.0 * np.pi, size, endpoint=False)
    y = np.sin(x) + noise * np.random.standard_normal(size)
    return np.stack([x, y], axis=1)


def build_model(batch_size: int) -> Model:
    inputs = Layers.input(shape=(1,), batch_size=batch_size)
    x = Layers.dense(50, activation=ActivationFunctionType.RE_LU)(inputs)
    x = Layers.dense(100, activation=ActivationFunctionType.RE_LU)(x)
    x = Layers.dense(200, activation=ActivationFunctionType.RE_LU)(x)
    outputs = Layers.dense(1, activation=ActivationFunctionType.LINEAR)(x)
    return Model(inputs, outputs)


def write_graph(model: Model, data: XYData, batch_size: int, path: Path) -> None:
    x, y = next(data.iter_batches(batch_size))
    with GradientTape() as tape:
        (predicted,) = model.forward_pass(x, tape)
        math_t.mse(predicted, y, tape)
        path.write_text(tape.graph.to_dot(), encoding="utf-8")
    print(f"Wrote computation graph to: {path.resolve()}")


def main() -> None:
    args = parse_args()
    np.random.seed(args.seed % (2**32))

    raw = generate_data(args.size, args.noise)
    scaler_x = ScalerService.fit(raw[:, 0], -1.0, 1.0)
    scaler_y = ScalerService.fit(raw[:, 1], -1.0, 1.0)

    data = XYData.convert(raw.tolist(), y_start_index=1)
    for row in data:
        row.x = scaler_x.scale(row.x)
        row.y = scaler_y.scale(row.y)

    train, test = XYData.split(data, args.split)
    train.shuffle()
    test.shuffle()

    model = build_model(args.batch_size)
    model.compile(
        OptimizerType.ADAM,
        {"learning_rate": args.learning_rate},
        LossFunctionType.MSE,
    )
    if args.dot is not None:
        write_graph(model, train, args.batch_size, args.dot)

    model.fit(train, test, batch_size=args.batch_size, epochs=args.epochs)

    xs, targets, predictions = [], [], []
    for x, y in test.iter_batches(args.batch_size):
        (p,) = model.predict(x)
        xs.extend(x.to_numpy()[:, 0])
        targets.extend(y.to_numpy()[:, 0])
        predictions.extend(p.to_numpy()[:, 0])

    print("yTarget\tyPredicted")
    for i in np.argsort(xs):
        print(f"{targets[i]:.6f}\t{predictions[i]:.6f}")


if __name__ == "__main__":
    main()
