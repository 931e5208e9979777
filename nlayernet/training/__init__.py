"""Training loop, configuration and pipeline assembly."""

from .config import NetworkConfig, load_preset, presets, read_config_file
from .pipelines import run_pipeline
from .trainer import Trainer, evaluate

__all__ = [
    "NetworkConfig",
    "Trainer",
    "evaluate",
    "load_preset",
    "presets",
    "read_config_file",
    "run_pipeline",
]
