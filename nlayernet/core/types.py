"""Core typing contracts for nlayernet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError

Array = np.ndarray

CONVERGED = "converged"
MAX_ITERATIONS = "max_iterations"
RUN_ONLY = "run_only"


@dataclass(frozen=True)
class Topology:
    """Ordered layer widths: input, zero or more hidden, output."""

    layer_dims: Tuple[int, ...]

    def __post_init__(self) -> None:
        dims = tuple(self.layer_dims)
        if len(dims) < 2:
            raise ConfigurationError(
                f"A network needs at least an input and an output layer, got {list(dims)}"
            )
        for idx, width in enumerate(dims):
            if isinstance(width, bool) or not isinstance(width, (int, np.integer)):
                raise ConfigurationError(f"Layer {idx} width must be an integer, got {width!r}")
            if width < 1:
                raise ConfigurationError(f"Layer {idx} width must be positive, got {width}")
        object.__setattr__(self, "layer_dims", tuple(int(w) for w in dims))

    @classmethod
    def of(cls, dims: Sequence[int]) -> "Topology":
        return cls(tuple(dims))

    @property
    def n_layers(self) -> int:
        return len(self.layer_dims)

    @property
    def input_dim(self) -> int:
        return self.layer_dims[0]

    @property
    def output_dim(self) -> int:
        return self.layer_dims[-1]

    @property
    def hidden_dims(self) -> Tuple[int, ...]:
        return self.layer_dims[1:-1]

    @property
    def weight_shapes(self) -> List[Tuple[int, int]]:
        dims = self.layer_dims
        return [(dims[a], dims[a + 1]) for a in range(len(dims) - 1)]

    @property
    def parameter_count(self) -> int:
        return int(sum(rows * cols for rows, cols in self.weight_shapes))

    def require_hidden_layer(self) -> None:
        """Raise unless the backward sweep can run on this topology."""

        if not self.hidden_dims:
            raise ConfigurationError(
                f"Training requires at least one hidden layer; topology {self} has none"
            )

    def __str__(self) -> str:
        return "-".join(str(w) for w in self.layer_dims)


@dataclass
class LayerBuffers:
    """Per-layer working vectors for one forward/backward pass.

    ``activations`` is always allocated.  ``theta`` (pre-activation sums) and
    ``psi`` (local error gradients) are only needed while training and stay
    empty for evaluation-only buffers.
    """

    activations: List[Array]
    theta: List[Array] = field(default_factory=list)
    psi: List[Array] = field(default_factory=list)

    @classmethod
    def allocate(cls, topology: Topology, *, training: bool = True) -> "LayerBuffers":
        dims = topology.layer_dims
        activations = [np.zeros(width, dtype=np.float64) for width in dims]
        if not training:
            return cls(activations=activations)
        theta = [np.zeros(width, dtype=np.float64) for width in dims]
        psi = [np.zeros(width, dtype=np.float64) for width in dims]
        return cls(activations=activations, theta=theta, psi=psi)

    @property
    def trainable(self) -> bool:
        return bool(self.theta) and bool(self.psi)

    def load_input(self, inputs: Array) -> None:
        self.activations[0][:] = inputs

    @property
    def output(self) -> Array:
        return self.activations[-1]


@dataclass(frozen=True)
class Case:
    """A single (input, expected output) pair."""

    inputs: Array
    targets: Array


@dataclass
class TrainingState:
    """Counters tracked by the training loop."""

    iterations: int = 0
    total_error: float = 0.0
    average_error: float = 0.0


@dataclass(frozen=True)
class TrainingResult:
    """Outcome of :meth:`nlayernet.training.trainer.Trainer.train` or ``evaluate``.

    ``outputs`` holds the network output for every case computed with the
    final weights; ``average_error`` is the convergence signal of the last
    epoch (or of the single pass in run-only mode) and ``final_error`` the
    same metric recomputed with the final weights.
    """

    outputs: Array
    average_error: float
    final_error: float
    iterations: int
    stop_reason: str
    error_threshold: float | None = None
    max_iterations: int | None = None

    @property
    def converged(self) -> bool:
        return self.stop_reason == CONVERGED


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`nlayernet.training.pipelines.run_pipeline`."""

    iterations: int
    average_error: float
    stop_reason: str
    outputs: Array
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    report_path: str = ""
    weights_path: str = ""


__all__ = [
    "Array",
    "CONVERGED",
    "MAX_ITERATIONS",
    "RUN_ONLY",
    "Topology",
    "LayerBuffers",
    "Case",
    "TrainingState",
    "TrainingResult",
    "RunResult",
]
