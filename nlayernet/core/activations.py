"""Activation utilities for nlayernet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Protocol

import numpy as np

from .errors import ConfigurationError
from .types import Array


class ActivationFunction(Protocol):
    """Scalar activation applied elementwise, together with its derivative."""

    name: str

    def f(self, x: Array) -> Array:
        """Return the activation of ``x``."""

    def f_prime(self, x: Array) -> Array:
        """Return the slope of :meth:`f` at ``x``."""


@dataclass(frozen=True)
class Sigmoid:
    """Logistic sigmoid ``1 / (1 + e^-x)``."""

    name: str = "sigmoid"

    def f(self, x: Array) -> Array:
        # exp(-log(1 + e^-x)) saturates to 0/1 without overflowing.
        return np.exp(-np.logaddexp(0.0, -np.asarray(x, dtype=np.float64)))

    def f_prime(self, x: Array) -> Array:
        res = self.f(x)
        return res * (1.0 - res)


ActivationFactory = Callable[[], ActivationFunction]


class ActivationRegistry:
    """Name to activation lookup used by configuration."""

    def __init__(self) -> None:
        self._registry: Dict[str, ActivationFactory] = {}

    def register(self, name: str, factory: ActivationFactory) -> None:
        self._registry[name.lower()] = factory

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def get(self, name: str) -> ActivationFunction:
        key = str(name).strip().lower()
        if key not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise ConfigurationError(
                f"Unknown activation function {name!r}. Available: {available}"
            )
        return self._registry[key]()


REGISTRY = ActivationRegistry()
REGISTRY.register("sigmoid", Sigmoid)


def get_activation(name: str) -> ActivationFunction:
    """Return a fresh activation instance registered under ``name``."""

    return REGISTRY.get(name)


__all__ = ["ActivationFunction", "Sigmoid", "ActivationRegistry", "REGISTRY", "get_activation"]
