"""Core numerical primitives for nlayernet."""

from . import activations, backprop, errors, forward, serialization, types, weights

__all__ = ["activations", "backprop", "errors", "forward", "serialization", "types", "weights"]
