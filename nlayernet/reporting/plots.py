"""Error curve figure for a training run."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class ErrorCurvePlot:
    """Record the average error per reported iteration and draw it on close.

    The curve is drawn on a log axis with the error threshold as a dashed
    line, so a converged run ends below the line.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        enabled: bool = False,
        error_threshold: float | None = None,
        title: str = "Training error",
    ) -> None:
        self.path = Path(path)
        self.enabled = enabled
        self.error_threshold = error_threshold
        self.title = title
        self._points: List[Tuple[int, float]] = []

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        if self.enabled:
            self._points.append((int(iteration), float(metrics["average_error"])))

    def close(self) -> str | None:
        """Write the figure and return its path, or ``None`` when nothing was drawn."""

        if not self.enabled or not self._points:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        iterations, errors = zip(*self._points)
        fig, ax = plt.subplots()
        ax.semilogy(iterations, errors, label="average error")
        if self.error_threshold is not None:
            ax.axhline(self.error_threshold, linestyle="--", color="grey", label="threshold")
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Average error")
        ax.set_title(self.title)
        ax.legend()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(self.path)
        plt.close(fig)
        return str(self.path)

    __call__ = on_epoch


__all__ = ["ErrorCurvePlot"]
