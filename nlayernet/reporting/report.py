"""Human-readable run reports."""

from __future__ import annotations

from typing import List

from ..core.types import RUN_ONLY, TrainingResult
from ..data.truth_table import Dataset, format_truth_table

_MS_PER_SECOND = 1000
_SECONDS_PER_MINUTE = 60
_MINUTES_PER_HOUR = 60
_HOURS_PER_DAY = 24
_DAYS_PER_WEEK = 7


def format_elapsed(seconds: float) -> str:
    """Return ``seconds`` in the largest unit that keeps the value readable."""

    if seconds < 1.0:
        return f"Elapsed time: {seconds * _MS_PER_SECOND:g} milliseconds"
    if seconds < _SECONDS_PER_MINUTE:
        return f"Elapsed time: {seconds:g} seconds"
    minutes = seconds / _SECONDS_PER_MINUTE
    if minutes < _MINUTES_PER_HOUR:
        return f"Elapsed time: {minutes:g} minutes"
    hours = minutes / _MINUTES_PER_HOUR
    if hours < _HOURS_PER_DAY:
        return f"Elapsed time: {hours:g} hours"
    days = hours / _HOURS_PER_DAY
    if days < _DAYS_PER_WEEK:
        return f"Elapsed time: {days:g} days"
    return f"Elapsed time: {days / _DAYS_PER_WEEK:g} weeks"


def format_config_echo(config) -> str:
    """Describe a :class:`~nlayernet.training.config.NetworkConfig` before a run."""

    lines = [f"{config.topology} Network"]
    cases = config.number_of_cases
    if cases is None and config.cases is not None:
        cases = len(config.cases)
    if cases is not None:
        lines.append(f"Number of test cases: {cases}")
    if config.train:
        lines.append("Training")
        lines.append(f"Error threshold: {config.error_threshold:.4f}")
        lines.append(f"Maximum iterations: {config.max_iterations}")
        lines.append(f"Learning rate: {config.lr}")
    else:
        lines.append("Running")
    if config.save_weights:
        lines.append(f"Saving weights to file with path {config.weights_path}")
    if config.randomize:
        lines.append(f"Random weight values in the range ({config.low}, {config.high})")
    else:
        lines.append(f"Loading weights from file with path {config.weights_path}")
    return "\n".join(lines)


def exit_reasons(result: TrainingResult) -> List[str]:
    """List why training stopped; both reasons can hold at once."""

    reasons: List[str] = []
    if result.stop_reason == RUN_ONLY:
        return reasons
    if result.max_iterations is not None and result.iterations >= result.max_iterations:
        reasons.append(f"Max iterations ({result.max_iterations}) reached")
    if result.error_threshold is not None and result.average_error <= result.error_threshold:
        reasons.append(f"error under error threshold ({result.error_threshold:.4f})")
    return reasons


def format_report(dataset: Dataset, result: TrainingResult) -> str:
    """Truth table, per-case outputs and the training outcome."""

    lines = [format_truth_table(dataset), "", "Outputs"]
    for row in result.outputs:
        lines.append(" ".join(f"{float(value):.17f}" for value in row))
    lines.append("")
    if result.stop_reason != RUN_ONLY:
        lines.append(f"number of iterations: {result.iterations}")
        lines.append("Reason(s) for exiting:")
        lines.extend(exit_reasons(result))
    lines.append(f"average error: {result.average_error:.4f}")
    return "\n".join(lines)


__all__ = ["exit_reasons", "format_config_echo", "format_elapsed", "format_report"]
