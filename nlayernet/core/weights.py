"""Per-boundary weight matrices."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence

import numpy as np

from .errors import WeightFileError
from .types import Array, Topology


class WeightStore:
    """Ordered list of 2-D matrices, one per layer boundary.

    ``matrices[a]`` has shape ``(layer_dims[a], layer_dims[a + 1])`` and maps
    source unit ``[k, :]`` of layer ``a`` to destination unit ``[:, j]`` of
    layer ``a + 1``.
    """

    def __init__(self, topology: Topology, matrices: Sequence[Array]) -> None:
        shapes = topology.weight_shapes
        if len(matrices) != len(shapes):
            raise WeightFileError(
                f"Topology {topology} needs {len(shapes)} weight matrices, got {len(matrices)}"
            )
        checked: List[Array] = []
        for idx, (matrix, shape) in enumerate(zip(matrices, shapes)):
            W = np.array(matrix, dtype=np.float64)
            if W.shape != shape:
                raise WeightFileError(
                    f"Weight matrix {idx} has shape {W.shape}, expected {shape}"
                )
            checked.append(W)
        self.topology = topology
        self.matrices = checked

    @classmethod
    def zeros(cls, topology: Topology) -> "WeightStore":
        return cls(topology, [np.zeros(shape) for shape in topology.weight_shapes])

    @classmethod
    def random(
        cls,
        topology: Topology,
        low: float,
        high: float,
        rng: np.random.Generator | None = None,
    ) -> "WeightStore":
        """Draw every weight uniformly from ``[low, high)``."""

        rng = rng if rng is not None else np.random.default_rng()
        matrices = [rng.uniform(low, high, size=shape) for shape in topology.weight_shapes]
        return cls(topology, matrices)

    @classmethod
    def from_flat(cls, topology: Topology, values: Iterable[float]) -> "WeightStore":
        """Rebuild a store from values ordered boundary, source unit, destination unit."""

        flat = np.asarray(list(values), dtype=np.float64)
        expected = topology.parameter_count
        if flat.size != expected:
            raise WeightFileError(
                f"Topology {topology} needs {expected} weights, got {flat.size}"
            )
        matrices: List[Array] = []
        offset = 0
        for rows, cols in topology.weight_shapes:
            size = rows * cols
            matrices.append(flat[offset : offset + size].reshape(rows, cols))
            offset += size
        return cls(topology, matrices)

    def flatten(self) -> Array:
        """Return every weight in save order (row-major per boundary)."""

        return np.concatenate([W.reshape(-1) for W in self.matrices])

    def copy(self) -> "WeightStore":
        return WeightStore(self.topology, [W.copy() for W in self.matrices])

    def parameter_count(self) -> int:
        return int(sum(int(W.size) for W in self.matrices))

    def __len__(self) -> int:
        return len(self.matrices)

    def __getitem__(self, idx: int) -> Array:
        return self.matrices[idx]

    def __iter__(self) -> Iterator[Array]:
        return iter(self.matrices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightStore):
            return NotImplemented
        return self.topology == other.topology and all(
            np.array_equal(a, b) for a, b in zip(self.matrices, other.matrices)
        )

    def __repr__(self) -> str:
        return f"WeightStore(topology={self.topology}, parameters={self.parameter_count()})"


__all__ = ["WeightStore"]
