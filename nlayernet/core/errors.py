"""Exception types raised by nlayernet."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Malformed or missing topology, hyperparameters or file references."""


class DatasetShapeError(ValueError):
    """A training case does not match the declared layer widths."""


class WeightFileError(ValueError):
    """Weight values do not match the shape implied by the topology."""


__all__ = ["ConfigurationError", "DatasetShapeError", "WeightFileError"]
