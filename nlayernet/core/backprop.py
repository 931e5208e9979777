"""Backpropagation with in-place weight updates.

One training step for a case is :func:`run_for_train` followed immediately by
:func:`backpropagation`.  The backward sweep walks from the last hidden layer
towards the input.  For each layer ``a`` the downstream error ``omega`` is
accumulated from ``psi[a + 1]`` and the weights of boundary ``a`` *before*
they are updated, then the update is applied.  Every weight change of a case
is therefore the gradient step at the weights the case started with.

The first hidden layer is special cased: nothing upstream of the input layer
needs ``psi[1]``, so its ``omega`` is folded straight into the update of the
input boundary instead of being stored.
"""

from __future__ import annotations

import numpy as np

from .activations import ActivationFunction
from .errors import ConfigurationError
from .types import Array, LayerBuffers
from .weights import WeightStore

INPUT_LAYER = 0
FIRST_HIDDEN = 1


def _require_training_buffers(buffers: LayerBuffers) -> None:
    if not buffers.trainable:
        raise ValueError("Training buffers need theta and psi; allocate with training=True")


def run_for_train(
    buffers: LayerBuffers,
    weights: WeightStore,
    activation: ActivationFunction,
    expected: Array,
) -> Array:
    """Forward pass that records ``theta`` and seeds ``psi`` at the output layer.

    Returns the output activations.
    """

    _require_training_buffers(buffers)
    activations, theta, psi = buffers.activations, buffers.theta, buffers.psi
    out = len(activations) - 1
    for a in range(1, out + 1):
        theta[a][:] = activations[a - 1] @ weights[a - 1]
        activations[a][:] = activation.f(theta[a])

    omega = np.asarray(expected, dtype=np.float64) - activations[out]
    psi[out][:] = omega * activation.f_prime(theta[out])
    return activations[out]


def backpropagation(
    buffers: LayerBuffers,
    weights: WeightStore,
    activation: ActivationFunction,
    lr: float,
) -> None:
    """Propagate ``psi`` backwards and update every weight matrix in place.

    Expects ``buffers`` as left by :func:`run_for_train` for the same case.
    """

    _require_training_buffers(buffers)
    activations, theta, psi = buffers.activations, buffers.theta, buffers.psi
    n = len(activations)
    if n < 3:
        raise ConfigurationError(
            "Backpropagation requires at least one hidden layer (got a "
            f"{n}-layer network)"
        )

    for a in range(n - 2, FIRST_HIDDEN, -1):
        W = weights[a]
        omega = W @ psi[a + 1]
        W += lr * np.outer(activations[a], psi[a + 1])
        psi[a][:] = omega * activation.f_prime(theta[a])

    W = weights[FIRST_HIDDEN]
    omega = W @ psi[FIRST_HIDDEN + 1]
    W += lr * np.outer(activations[FIRST_HIDDEN], psi[FIRST_HIDDEN + 1])

    W = weights[INPUT_LAYER]
    W += lr * np.outer(
        activations[INPUT_LAYER], omega * activation.f_prime(theta[FIRST_HIDDEN])
    )


def train_case(
    buffers: LayerBuffers,
    weights: WeightStore,
    activation: ActivationFunction,
    inputs: Array,
    expected: Array,
    lr: float,
) -> None:
    """Load ``inputs`` and run one forward/backward step for a single case."""

    buffers.load_input(inputs)
    run_for_train(buffers, weights, activation, expected)
    backpropagation(buffers, weights, activation, lr)


__all__ = ["run_for_train", "backpropagation", "train_case"]
