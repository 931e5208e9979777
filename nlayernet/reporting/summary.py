"""Convergence summary of a run, derived from its metrics file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Sequence

from ..core.types import TrainingResult
from .report import exit_reasons


def _read_records(path: Path) -> List[Mapping[str, object]]:
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def iterations_to_threshold(
    records: Sequence[Mapping[str, object]], error_threshold: float | None
) -> int | None:
    """First reported iteration whose average error is at or below the threshold."""

    if error_threshold is None:
        return None
    for record in records:
        if float(record["average_error"]) <= error_threshold:  # type: ignore[arg-type]
            return int(record["iteration"])  # type: ignore[arg-type]
    return None


def summarise_errors(
    records: Sequence[Mapping[str, object]], result: TrainingResult | None = None
) -> Mapping[str, object]:
    errors = [float(r["average_error"]) for r in records]  # type: ignore[arg-type]
    summary: dict[str, object] = {"version": 1, "records": len(records)}
    if errors:
        summary["average_error"] = {
            "first": errors[0],
            "min": min(errors),
            "last": errors[-1],
        }
    if result is not None:
        summary["result"] = {
            "iterations": int(result.iterations),
            "average_error": float(result.average_error),
            "final_error": float(result.final_error),
            "stop_reason": result.stop_reason,
            "exit_reasons": exit_reasons(result),
            "iterations_to_threshold": iterations_to_threshold(
                records, result.error_threshold
            ),
        }
    return summary


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    result: TrainingResult | None = None,
) -> str:
    """Write ``summary.json`` for the records in ``metrics_jsonl``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise_errors(_read_records(Path(metrics_jsonl)), result)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["iterations_to_threshold", "summarise_errors", "write_summary"]
