"""Run configuration: validation, presets and file formats.

Configurations are nested mappings with ``data``, ``model`` and ``train``
sections::

    {
        "data": {"cases": [[[0, 0], [0]], [[0, 1], [1]]]},
        "model": {
            "layers": [2, 2, 1],
            "activation": "sigmoid",
            "weights": {"init": "random", "low": -1.5, "high": 1.5},
        },
        "train": {"enabled": True, "lr": 0.3, "error_threshold": 2e-4,
                  "max_iterations": 100000},
    }

They can be read from JSON, YAML or the plain ``key = value`` text format
(see :func:`parse_text_config`).
"""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..core.activations import get_activation
from ..core.errors import ConfigurationError, DatasetShapeError
from ..core.types import Topology
from ..data.truth_table import Dataset, load_truth_table

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("data", "model", "train")
WEIGHT_INITS = ("random", "file")

_XOR_CASES = [
    [[0, 0], [0]],
    [[0, 1], [1]],
    [[1, 0], [1]],
    [[1, 1], [0]],
]

# The networks have no bias units. The 2-2-1 xor network usually settles on a
# plateau (average error near 0.0625) and stops at max_iterations.
_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"cases": _XOR_CASES},
        "model": {
            "layers": [2, 2, 1],
            "activation": "sigmoid",
            "weights": {"init": "random", "low": -1.5, "high": 1.5},
        },
        "train": {
            "enabled": True,
            "lr": 0.3,
            "error_threshold": 0.0002,
            "max_iterations": 100000,
            "keep_alive": 10000,
            "run_dir": "runs/xor",
        },
    },
    "and-or-xor": {
        "data": {
            "cases": [
                [[0, 0], [0, 0, 0]],
                [[0, 1], [0, 1, 1]],
                [[1, 0], [0, 1, 1]],
                [[1, 1], [1, 1, 0]],
            ]
        },
        "model": {
            "layers": [2, 5, 3],
            "activation": "sigmoid",
            "weights": {"init": "random", "low": -1.5, "high": 1.5},
        },
        "train": {
            "enabled": True,
            "lr": 0.3,
            "error_threshold": 0.0002,
            "max_iterations": 100000,
            "keep_alive": 10000,
            "run_dir": "runs/and-or-xor",
        },
    },
    "deep-xor": {
        "data": {"cases": _XOR_CASES},
        "model": {
            "layers": [2, 4, 3, 1],
            "activation": "sigmoid",
            "weights": {"init": "random", "low": -1.5, "high": 1.5},
        },
        "train": {
            "enabled": True,
            "lr": 0.3,
            "error_threshold": 0.0002,
            "max_iterations": 100000,
            "keep_alive": 10000,
            "run_dir": "runs/deep-xor",
        },
    },
}
_ALIASES = {"default": "xor"}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {
        name: deepcopy(cfg) for name, cfg in _PRESETS.items()
    }
    for alias, target in _ALIASES.items():
        combined[alias] = deepcopy(_PRESETS[target])
    return combined


def load_preset(name: str) -> Dict[str, Any]:
    key = _ALIASES.get(name, name)
    try:
        return deepcopy(dict(_PRESETS[key]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base`` and return ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = value
    return base


# ----------------------------------------------------------------------
# Validated view


@dataclass(frozen=True)
class NetworkConfig:
    """Validated run configuration.

    Numeric training hyperparameters are required whenever training is
    enabled; nothing is defaulted for them.
    """

    layers: Tuple[int, ...]
    activation: str
    train: bool
    lr: float | None
    error_threshold: float | None
    max_iterations: int | None
    weight_init: str
    low: float | None
    high: float | None
    weights_path: str | None
    save_weights: bool
    keep_alive: int
    seed: int | None
    cases: Tuple[Tuple[Tuple[float, ...], Tuple[float, ...]], ...] | None
    truth_table: str | None
    number_of_cases: int | None
    run_dir: str | None
    enable_plots: bool

    @property
    def topology(self) -> Topology:
        return Topology(self.layers)

    @property
    def randomize(self) -> bool:
        return self.weight_init == "random"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "NetworkConfig":
        if not isinstance(config, Mapping):
            raise ConfigurationError("Configuration must be a mapping")
        missing = [name for name in REQUIRED_SECTIONS if name not in config]
        if missing:
            raise ConfigurationError(
                f"Configuration is missing required sections: {', '.join(missing)}"
            )
        data_cfg = _section(config, "data")
        model_cfg = _section(config, "model")
        train_cfg = _section(config, "train")
        weights_cfg = _section(model_cfg, "weights", required=False)

        if "layers" not in model_cfg:
            raise ConfigurationError("model.layers is required")
        layers = model_cfg["layers"]
        if not isinstance(layers, Sequence) or isinstance(layers, (str, bytes)):
            raise ConfigurationError(f"model.layers must be a list of widths, got {layers!r}")
        topology = Topology(tuple(_as_int("model.layers[]", w) for w in layers))

        activation = str(model_cfg.get("activation", "sigmoid"))
        get_activation(activation)

        train = _as_bool("train.enabled", train_cfg.get("enabled", True))
        lr = error_threshold = None
        max_iterations = None
        if train:
            topology.require_hidden_layer()
            lr = _as_positive_float("train.lr", _required(train_cfg, "train", "lr"))
            error_threshold = _as_positive_float(
                "train.error_threshold", _required(train_cfg, "train", "error_threshold")
            )
            max_iterations = _as_int(
                "train.max_iterations", _required(train_cfg, "train", "max_iterations")
            )
            if max_iterations < 1:
                raise ConfigurationError(
                    f"train.max_iterations must be positive, got {max_iterations}"
                )

        weight_init = str(weights_cfg.get("init", "random")).lower()
        if weight_init not in WEIGHT_INITS:
            raise ConfigurationError(
                f"model.weights.init must be one of {WEIGHT_INITS}, got {weight_init!r}"
            )
        low = high = None
        if weight_init == "random":
            low = _as_float("model.weights.low", _required(weights_cfg, "model.weights", "low"))
            high = _as_float("model.weights.high", _required(weights_cfg, "model.weights", "high"))
            if not low < high:
                raise ConfigurationError(
                    f"model.weights.low ({low}) must be below model.weights.high ({high})"
                )
        weights_path = weights_cfg.get("path")
        weights_path = str(weights_path) if weights_path not in (None, "") else None
        save_weights = _as_bool("model.weights.save", weights_cfg.get("save", False))
        if weight_init == "file" and weights_path is None:
            raise ConfigurationError("model.weights.path is required to load weights")
        if save_weights and weights_path is None:
            raise ConfigurationError("model.weights.path is required to save weights")

        keep_alive = _as_int("train.keep_alive", train_cfg.get("keep_alive", 0))
        if keep_alive < 0:
            raise ConfigurationError(f"train.keep_alive must not be negative, got {keep_alive}")
        seed = train_cfg.get("seed")
        seed = _as_int("train.seed", seed) if seed is not None else None

        cases, truth_table, number_of_cases = _parse_data(data_cfg)
        run_dir = train_cfg.get("run_dir")

        return cls(
            layers=topology.layer_dims,
            activation=activation,
            train=train,
            lr=lr,
            error_threshold=error_threshold,
            max_iterations=max_iterations,
            weight_init=weight_init,
            low=low,
            high=high,
            weights_path=weights_path,
            save_weights=save_weights,
            keep_alive=keep_alive,
            seed=seed,
            cases=cases,
            truth_table=truth_table,
            number_of_cases=number_of_cases,
            run_dir=str(run_dir) if run_dir is not None else None,
            enable_plots=_as_bool("train.enable_plots", train_cfg.get("enable_plots", False)),
        )

    def load_dataset(self) -> Dataset:
        """Build the dataset and check it against the topology."""

        topology = self.topology
        if self.cases is not None:
            dataset = Dataset.from_pairs(self.cases)
            if self.number_of_cases is not None and len(dataset) != self.number_of_cases:
                raise DatasetShapeError(
                    f"Configuration declares {self.number_of_cases} cases but lists {len(dataset)}"
                )
        elif self.truth_table is not None:
            dataset = load_truth_table(
                self.truth_table,
                topology.input_dim,
                topology.output_dim,
                number_of_cases=self.number_of_cases,
            )
        else:
            raise ConfigurationError("data needs exactly one of 'cases' or 'truth_table'")
        dataset.validate(topology)
        return dataset


def _parse_data(
    data_cfg: Mapping[str, Any]
) -> Tuple[Tuple[Tuple[Tuple[float, ...], Tuple[float, ...]], ...] | None, str | None, int | None]:
    has_cases = data_cfg.get("cases") is not None
    has_table = data_cfg.get("truth_table") not in (None, "")
    if has_cases == has_table:
        raise ConfigurationError("data needs exactly one of 'cases' or 'truth_table'")
    number_of_cases = data_cfg.get("number_of_cases")
    if number_of_cases is not None:
        number_of_cases = _as_int("data.number_of_cases", number_of_cases)
        if number_of_cases < 1:
            raise ConfigurationError(
                f"data.number_of_cases must be positive, got {number_of_cases}"
            )
    if has_table:
        return None, str(data_cfg["truth_table"]), number_of_cases

    cases: List[Tuple[Tuple[float, ...], Tuple[float, ...]]] = []
    for idx, entry in enumerate(data_cfg["cases"]):
        if isinstance(entry, Mapping):
            inputs, targets = entry.get("inputs"), entry.get("targets")
        elif isinstance(entry, Sequence) and len(entry) == 2:
            inputs, targets = entry
        else:
            raise ConfigurationError(f"data.cases[{idx}] must be an [inputs, targets] pair")
        try:
            cases.append(
                (tuple(float(v) for v in inputs), tuple(float(v) for v in targets))
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"data.cases[{idx}] holds non-numeric values") from exc
    if not cases:
        raise ConfigurationError("data.cases must not be empty")
    return tuple(cases), None, number_of_cases


def _section(config: Mapping[str, Any], name: str, *, required: bool = True) -> Mapping[str, Any]:
    value = config.get(name)
    if value is None and not required:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Section {name!r} must be a mapping")
    return value


def _required(section: Mapping[str, Any], prefix: str, key: str) -> Any:
    if section.get(key) is None:
        raise ConfigurationError(f"{prefix}.{key} is required")
    return section[key]


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ConfigurationError(f"{name} must be true or false, got {value!r}")


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a real number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a real number, got {value!r}") from exc


def _as_positive_float(name: str, value: Any) -> float:
    number = _as_float(name, value)
    if not number > 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return number


def _as_int(name: str, value: Any) -> int:
    number = _as_float(name, value)
    if not number.is_integer():
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return int(number)


# ----------------------------------------------------------------------
# File formats

_TEXT_NUMERIC_KEYS = {
    "maxIterations": ("train", "max_iterations"),
    "lambda": ("train", "lr"),
    "errorThreshold": ("train", "error_threshold"),
    "keepAlive": ("train", "keep_alive"),
    "numberOfCases": ("data", "number_of_cases"),
    "low": ("model.weights", "low"),
    "high": ("model.weights", "high"),
}


def parse_text_config(text: str) -> Dict[str, Any]:
    """Parse the plain ``key = value`` configuration format.

    Recognised keys: ``n`` (layer count), ``inputNodes``,
    ``hiddenLayerNodes<i>``, ``outputNodes``, ``maxIterations``,
    ``numberOfCases``, ``lambda``, ``errorThreshold``, ``low``, ``high``,
    ``keepAlive``, ``shouldTrain``, ``shouldSaveWeights``,
    ``useRandomWeights``, ``weightsFilePath``, ``activationFunction`` and
    ``truthTableFilePath``.

    Without ``shouldTrain = true`` the network only runs on the cases.
    """

    raw: Dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            raise ConfigurationError(f"line {lineno}: expected 'key = value', got {stripped!r}")
        key, value = (part.strip() for part in stripped.split("=", 1))
        raw[key] = value

    if "n" not in raw:
        raise ConfigurationError("text configuration must define the layer count 'n'")
    n = _as_int("n", raw.pop("n"))
    if n < 2:
        raise ConfigurationError(f"n must be at least 2, got {n}")
    layers: List[int | None] = [None] * n

    config: Dict[str, Any] = {
        "data": {},
        "model": {"weights": {}},
        "train": {"enabled": False},
    }
    sections = {
        "data": config["data"],
        "model": config["model"],
        "model.weights": config["model"]["weights"],
        "train": config["train"],
    }

    for key, value in raw.items():
        if key == "inputNodes":
            layers[0] = _as_int(key, value)
        elif key == "outputNodes":
            layers[n - 1] = _as_int(key, value)
        elif key.startswith("hiddenLayerNodes"):
            index = _as_int(key, key[len("hiddenLayerNodes"):] or "nan")
            if not 0 < index < n - 1:
                raise ConfigurationError(f"{key} does not name a hidden layer of a {n}-layer network")
            layers[index] = _as_int(key, value)
        elif key in _TEXT_NUMERIC_KEYS:
            section, name = _TEXT_NUMERIC_KEYS[key]
            sections[section][name] = _as_float(key, value)
        elif key == "shouldTrain":
            config["train"]["enabled"] = _as_bool(key, value)
        elif key == "shouldSaveWeights":
            config["model"]["weights"]["save"] = _as_bool(key, value)
        elif key == "useRandomWeights":
            random_init = _as_bool(key, value)
            config["model"]["weights"]["init"] = "random" if random_init else "file"
        elif key == "weightsFilePath":
            config["model"]["weights"]["path"] = value
        elif key == "truthTableFilePath":
            config["data"]["truth_table"] = value
        elif key == "activationFunction":
            config["model"]["activation"] = value.lower()
        else:
            logger.warning("Ignoring unknown configuration key %r", key)

    unset = [idx for idx, width in enumerate(layers) if width is None]
    if unset:
        raise ConfigurationError(f"Widths missing for layer(s) {unset} of a {n}-layer network")
    config["model"]["layers"] = layers
    return config


def read_config_file(path: str | Path) -> Dict[str, Any]:
    """Load a JSON, YAML or text configuration.

    Relative ``truth_table`` and weight paths are resolved against the
    directory holding the configuration file.
    """

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {path}") from exc

    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Configuration {path} is not valid YAML: {exc}") from exc
    elif suffix == ".json":
        try:
            data = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration {path} is not valid JSON: {exc}") from exc
    else:
        data = parse_text_config(text)

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration {path.name} must decode to a mapping")
    data = json.loads(json.dumps(data))
    _resolve_relative_paths(data, path.parent)
    return data


def _resolve_relative_paths(config: Dict[str, Any], base: Path) -> None:
    data_cfg = config.get("data")
    if isinstance(data_cfg, dict) and data_cfg.get("truth_table"):
        data_cfg["truth_table"] = _resolve(base, data_cfg["truth_table"])
    model_cfg = config.get("model")
    weights_cfg = model_cfg.get("weights") if isinstance(model_cfg, dict) else None
    if isinstance(weights_cfg, dict) and weights_cfg.get("path"):
        weights_cfg["path"] = _resolve(base, weights_cfg["path"])


def _resolve(base: Path, value: str) -> str:
    candidate = Path(value)
    return str(candidate if candidate.is_absolute() else base / candidate)


__all__ = [
    "NetworkConfig",
    "load_preset",
    "merge_config",
    "parse_text_config",
    "presets",
    "read_config_file",
]
