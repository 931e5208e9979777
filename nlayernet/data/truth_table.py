"""Truth-table datasets: fixed lists of (input, expected output) cases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from ..core.errors import DatasetShapeError
from ..core.types import Array, Case, Topology


@dataclass(frozen=True)
class Dataset:
    """Ordered training cases stored as two 2-D arrays.

    Attributes
    ----------
    inputs:
        ``(cases, input_dim)`` array.
    targets:
        ``(cases, output_dim)`` array of expected outputs.
    """

    inputs: Array
    targets: Array

    def __post_init__(self) -> None:
        inputs = np.array(self.inputs, dtype=np.float64, ndmin=2)
        targets = np.array(self.targets, dtype=np.float64, ndmin=2)
        if inputs.ndim != 2 or targets.ndim != 2:
            raise DatasetShapeError("Dataset inputs and targets must be 2-D")
        if inputs.shape[0] != targets.shape[0]:
            raise DatasetShapeError(
                f"Dataset has {inputs.shape[0]} inputs but {targets.shape[0]} targets"
            )
        inputs.setflags(write=False)
        targets.setflags(write=False)
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(self, "targets", targets)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Sequence[float], Sequence[float]]]) -> "Dataset":
        """Build a dataset from ``(inputs, targets)`` pairs."""

        rows = [(list(x), list(y)) for x, y in pairs]
        if not rows:
            raise DatasetShapeError("Dataset must contain at least one case")
        widths_in = {len(x) for x, _ in rows}
        widths_out = {len(y) for _, y in rows}
        if len(widths_in) != 1 or len(widths_out) != 1:
            raise DatasetShapeError(
                "All cases must share the same input and output widths, got "
                f"inputs {sorted(widths_in)} and outputs {sorted(widths_out)}"
            )
        return cls(
            inputs=np.array([x for x, _ in rows], dtype=np.float64),
            targets=np.array([y for _, y in rows], dtype=np.float64),
        )

    @property
    def input_dim(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def output_dim(self) -> int:
        return int(self.targets.shape[1])

    def validate(self, topology: Topology) -> None:
        """Fail fast when the cases do not fit ``topology``."""

        if len(self) == 0:
            raise DatasetShapeError("Dataset must contain at least one case")
        if self.input_dim != topology.input_dim:
            raise DatasetShapeError(
                f"Cases have {self.input_dim} inputs but topology {topology} "
                f"expects {topology.input_dim}"
            )
        if self.output_dim != topology.output_dim:
            raise DatasetShapeError(
                f"Cases have {self.output_dim} outputs but topology {topology} "
                f"expects {topology.output_dim}"
            )

    def provenance(self) -> dict:
        return {
            "type": "truth_table",
            "cases": len(self),
            "d_in": self.input_dim,
            "d_out": self.output_dim,
        }

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def __iter__(self) -> Iterator[Case]:
        for x, y in zip(self.inputs, self.targets):
            yield Case(inputs=x, targets=y)


def load_truth_table(
    path: str | Path,
    input_dim: int,
    output_dim: int,
    number_of_cases: int | None = None,
) -> Dataset:
    """Parse a whitespace separated truth table.

    Each non-blank line holds one case: ``input_dim`` input values followed by
    ``output_dim`` expected outputs.  Lines starting with ``#`` are ignored.
    """

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DatasetShapeError(f"Truth table not found: {path}") from exc

    width = input_dim + output_dim
    rows: List[List[float]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        tokens = stripped.split()
        if len(tokens) != width:
            raise DatasetShapeError(
                f"{path}:{lineno}: expected {input_dim} inputs and {output_dim} outputs "
                f"({width} values), got {len(tokens)}"
            )
        try:
            rows.append([float(tok) for tok in tokens])
        except ValueError as exc:
            raise DatasetShapeError(f"{path}:{lineno}: {exc}") from exc

    if not rows:
        raise DatasetShapeError(f"Truth table {path} contains no cases")
    if number_of_cases is not None and len(rows) != number_of_cases:
        raise DatasetShapeError(
            f"Truth table {path} has {len(rows)} cases, configuration declares {number_of_cases}"
        )
    table = np.array(rows, dtype=np.float64)
    return Dataset(inputs=table[:, :input_dim], targets=table[:, input_dim:])


def format_truth_table(dataset: Dataset) -> str:
    """Render the cases as ``a0 a1 ... | F0 ...`` rows."""

    header = "  ".join(f"a{k}" for k in range(dataset.input_dim))
    header += "    " + "  ".join(f"F{i}" for i in range(dataset.output_dim))
    lines = ["Truth Table", header]
    for case in dataset:
        inputs = " ".join(repr(float(v)) for v in case.inputs)
        targets = " ".join(repr(float(v)) for v in case.targets)
        lines.append(f"{inputs} | {targets}")
    return "\n".join(lines)


__all__ = ["Dataset", "load_truth_table", "format_truth_table"]
