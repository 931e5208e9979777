"""Plain-text weight files: one value per line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .errors import WeightFileError
from .types import Topology
from .weights import WeightStore

logger = logging.getLogger(__name__)


def save_weights(path: str | Path, store: WeightStore) -> str:
    """Write ``store`` to ``path`` in boundary, source, destination order.

    Values are written with :func:`repr` so that loading them back yields
    bit-identical floats.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [repr(float(value)) for value in store.flatten()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug("Saved %d weights to %s", len(lines), path)
    return str(path)


def load_weights(path: str | Path, topology: Topology) -> WeightStore:
    """Read a weight file written by :func:`save_weights` for ``topology``."""

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise WeightFileError(f"Weight file not found: {path}") from exc

    values: List[float] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        for token in line.split():
            try:
                values.append(float(token))
            except ValueError as exc:
                raise WeightFileError(
                    f"{path}:{lineno}: cannot parse weight value {token!r}"
                ) from exc

    if len(values) != topology.parameter_count:
        raise WeightFileError(
            f"{path} holds {len(values)} weights but topology {topology} "
            f"needs {topology.parameter_count}"
        )
    logger.debug("Loaded %d weights from %s", len(values), path)
    return WeightStore.from_flat(topology, values)


__all__ = ["save_weights", "load_weights"]
