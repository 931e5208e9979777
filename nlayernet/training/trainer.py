"""Online gradient-descent training loop for N-layer perceptrons."""

from __future__ import annotations

import sys
from typing import Mapping, Sequence

import numpy as np

from ..core import backprop, forward
from ..core.activations import ActivationFunction
from ..core.errors import ConfigurationError
from ..core.types import (
    CONVERGED,
    MAX_ITERATIONS,
    RUN_ONLY,
    LayerBuffers,
    TrainingResult,
    TrainingState,
)
from ..core.weights import WeightStore
from ..data.truth_table import Dataset
from .losses import half_squared_error

ERROR_SENTINEL = sys.float_info.max


def _positive_float(name: str, value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a real number, got {value!r}") from exc
    if not np.isfinite(number) or number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return number


class Trainer:
    """Drive epochs over a dataset until the error threshold or iteration cap.

    Each epoch visits the cases in dataset order.  For every case the weights
    are updated immediately (online updates), then the output is recomputed
    with the new weights and its half squared error added to the epoch total.
    The epoch's average error is the only convergence signal.

    Callbacks exposing ``on_epoch(epoch, metrics)`` (or plain callables) are
    invoked every ``report_every`` epochs and always for the final epoch.
    """

    def __init__(
        self,
        weights: WeightStore,
        activation: ActivationFunction,
        *,
        lr: float,
        error_threshold: float,
        max_iterations: int,
        callbacks: Sequence[object] | None = None,
        report_every: int = 1,
    ) -> None:
        if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
            raise ConfigurationError(f"max_iterations must be an integer, got {max_iterations!r}")
        if max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be positive, got {max_iterations}")
        self.weights = weights
        self.activation = activation
        self.lr = _positive_float("lr", lr)
        self.error_threshold = _positive_float("error_threshold", error_threshold)
        self.max_iterations = int(max_iterations)
        self.callbacks = list(callbacks or [])
        self.report_every = max(1, int(report_every))
        self.state = TrainingState()

    @property
    def topology(self):
        return self.weights.topology

    def train(self, dataset: Dataset) -> TrainingResult:
        """Train in place until convergence or ``max_iterations`` epochs."""

        self.topology.require_hidden_layer()
        dataset.validate(self.topology)
        buffers = LayerBuffers.allocate(self.topology, training=True)
        cases = len(dataset)

        state = TrainingState(iterations=0, total_error=ERROR_SENTINEL)
        state.average_error = state.total_error / cases
        self.state = state

        while state.average_error > self.error_threshold and state.iterations < self.max_iterations:
            state.iterations += 1
            state.total_error = 0.0
            for case in dataset:
                backprop.train_case(
                    buffers, self.weights, self.activation, case.inputs, case.targets, self.lr
                )
                output = forward.run(buffers, self.weights, self.activation)
                state.total_error += half_squared_error(case.targets, output)
            state.average_error = state.total_error / cases

            if state.iterations % self.report_every == 0:
                self._emit_epoch(state)

        if state.iterations and state.iterations % self.report_every != 0:
            self._emit_epoch(state)

        stop_reason = CONVERGED if state.average_error <= self.error_threshold else MAX_ITERATIONS
        outputs, final_error = run_all_cases(self.weights, self.activation, dataset)
        return TrainingResult(
            outputs=outputs,
            average_error=state.average_error,
            final_error=final_error,
            iterations=state.iterations,
            stop_reason=stop_reason,
            error_threshold=self.error_threshold,
            max_iterations=self.max_iterations,
        )

    def evaluate(self, dataset: Dataset) -> TrainingResult:
        """Run every case once without touching the weights."""

        result = evaluate(self.weights, self.activation, dataset)
        self.state = TrainingState(
            iterations=0,
            total_error=result.average_error * len(dataset),
            average_error=result.average_error,
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers

    def _emit_epoch(self, state: TrainingState) -> None:
        metrics: Mapping[str, float] = {
            "average_error": float(state.average_error),
            "total_error": float(state.total_error),
        }
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(state.iterations, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(state.iterations, metrics)


def run_all_cases(
    weights: WeightStore, activation: ActivationFunction, dataset: Dataset
) -> tuple[np.ndarray, float]:
    """Return every case's output and the average half squared error."""

    topology = weights.topology
    buffers = LayerBuffers.allocate(topology, training=False)
    outputs = np.zeros((len(dataset), topology.output_dim), dtype=np.float64)
    total = 0.0
    for idx, case in enumerate(dataset):
        buffers.load_input(case.inputs)
        outputs[idx] = forward.run(buffers, weights, activation)
        total += half_squared_error(case.targets, outputs[idx])
    return outputs, total / len(dataset)


def evaluate(
    weights: WeightStore, activation: ActivationFunction, dataset: Dataset
) -> TrainingResult:
    """Run-only mode: one forward pass per case, weights are never written."""

    dataset.validate(weights.topology)
    outputs, average_error = run_all_cases(weights, activation, dataset)
    return TrainingResult(
        outputs=outputs,
        average_error=average_error,
        final_error=average_error,
        iterations=0,
        stop_reason=RUN_ONLY,
    )


__all__ = ["Trainer", "evaluate", "run_all_cases", "ERROR_SENTINEL"]
