"""Epoch error sinks used as trainer callbacks.

Every sink receives ``(iteration, metrics)`` where ``metrics`` carries the
epoch's ``average_error`` and ``total_error``.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Callable, Mapping

ERROR_FIELDS = ("iteration", "average_error", "total_error")


def _error_record(iteration: int, metrics: Mapping[str, float]) -> dict:
    record: dict = {"iteration": int(iteration)}
    for key in ERROR_FIELDS[1:]:
        if key in metrics:
            record[key] = float(metrics[key])
    return record


class JsonlSink:
    """One JSON line per reported iteration, tagged with the run mode."""

    def __init__(self, path: str | Path, *, mode: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.mode = mode

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        record = _error_record(iteration, metrics)
        record["mode"] = self.mode
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Error curve as ``iteration,average_error,total_error`` rows."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow(ERROR_FIELDS)

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        record = _error_record(iteration, metrics)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow([record.get(key, "") for key in ERROR_FIELDS])


class KeepAlivePrinter:
    """Print ``Iteration N, Error = E`` every ``every`` iterations."""

    def __init__(self, every: int, echo: Callable[[str], None] = print) -> None:
        self.every = int(every)
        self.echo = echo

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        if self.every >= 1 and iteration % self.every == 0:
            self.echo(f"Iteration {iteration}, Error = {float(metrics['average_error']):f}")


class MetricsCapture:
    """Keep every emitted epoch in memory."""

    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []
        self.last: Mapping[str, float] = {}

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        payload = {k: float(v) for k, v in metrics.items()}
        self.history.append((int(iteration), payload))
        self.last = payload

    @property
    def errors(self) -> list[float]:
        return [metrics["average_error"] for _, metrics in self.history]


__all__ = ["CsvSink", "ERROR_FIELDS", "JsonlSink", "KeepAlivePrinter", "MetricsCapture"]
