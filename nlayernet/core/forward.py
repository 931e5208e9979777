"""Forward propagation."""

from __future__ import annotations

import numpy as np

from .activations import ActivationFunction
from .types import Array, LayerBuffers
from .weights import WeightStore


def run(buffers: LayerBuffers, weights: WeightStore, activation: ActivationFunction) -> Array:
    """Propagate ``buffers.activations[0]`` through every layer.

    Layers are filled strictly in increasing order; layers ``1..n-1`` are
    overwritten and the output layer is returned.
    """

    activations = buffers.activations
    for a in range(1, len(activations)):
        activations[a][:] = activation.f(activations[a - 1] @ weights[a - 1])
    return activations[-1]


def predict(weights: WeightStore, inputs: Array, activation: ActivationFunction) -> Array:
    """Return a copy of the network output for a single input vector."""

    buffers = LayerBuffers.allocate(weights.topology, training=False)
    buffers.load_input(np.asarray(inputs, dtype=np.float64))
    return run(buffers, weights, activation).copy()


__all__ = ["run", "predict"]
