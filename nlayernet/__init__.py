"""nlayernet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Sigmoid, get_activation
from .core.errors import ConfigurationError, DatasetShapeError, WeightFileError
from .core.serialization import load_weights, save_weights
from .core.types import Topology
from .core.weights import WeightStore
from .data.truth_table import Dataset, load_truth_table
from .training.config import NetworkConfig, load_preset, presets, read_config_file
from .training.pipelines import run_pipeline
from .training.trainer import Trainer, evaluate

__all__ = [
    "ConfigurationError",
    "Dataset",
    "DatasetShapeError",
    "NetworkConfig",
    "Sigmoid",
    "Topology",
    "Trainer",
    "WeightFileError",
    "WeightStore",
    "activations",
    "evaluate",
    "get_activation",
    "load_preset",
    "load_truth_table",
    "load_weights",
    "presets",
    "read_config_file",
    "run_pipeline",
    "save_weights",
    "types",
]
