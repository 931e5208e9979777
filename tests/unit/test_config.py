import dataclasses
import json
import logging

import pytest

from nlayernet.core.errors import ConfigurationError, DatasetShapeError
from nlayernet.training.config import (
    NetworkConfig,
    load_preset,
    merge_config,
    parse_text_config,
    presets,
    read_config_file,
)


def _minimal(**train):
    cfg = load_preset("xor")
    cfg["train"] = {"enabled": True, "lr": 0.3, "error_threshold": 0.0002, "max_iterations": 10}
    cfg["train"].update(train)
    return cfg


def test_presets_include_default_alias():
    available = presets()
    assert {"xor", "and-or-xor", "deep-xor", "default"} <= set(available)
    assert load_preset("default") == load_preset("xor")
    with pytest.raises(KeyError):
        load_preset("nope")


def test_load_preset_returns_independent_copy():
    cfg = load_preset("xor")
    cfg["model"]["layers"].append(9)
    assert load_preset("xor")["model"]["layers"] == [2, 2, 1]


@pytest.mark.parametrize("name", ["xor", "and-or-xor", "deep-xor"])
def test_presets_validate_and_load_data(name):
    cfg = NetworkConfig.from_mapping(load_preset(name))
    dataset = cfg.load_dataset()
    assert dataset.input_dim == cfg.topology.input_dim
    assert dataset.output_dim == cfg.topology.output_dim
    assert cfg.train and cfg.randomize


def test_merge_config_is_recursive():
    base = {"train": {"lr": 0.3, "max_iterations": 5}, "model": {"layers": [2, 2, 1]}}
    merged = merge_config(base, {"train": {"lr": 0.1}})
    assert merged["train"] == {"lr": 0.1, "max_iterations": 5}
    assert merged["model"]["layers"] == [2, 2, 1]


@pytest.mark.parametrize("key", ["lr", "error_threshold", "max_iterations"])
def test_training_hyperparameters_are_required(key):
    cfg = _minimal()
    del cfg["train"][key]
    with pytest.raises(ConfigurationError, match=key):
        NetworkConfig.from_mapping(cfg)


@pytest.mark.parametrize(
    "override",
    [{"lr": 0}, {"lr": -0.1}, {"error_threshold": 0}, {"max_iterations": 0}, {"keep_alive": -1}],
)
def test_non_positive_hyperparameters_are_rejected(override):
    with pytest.raises(ConfigurationError):
        NetworkConfig.from_mapping(_minimal(**override))


def test_run_only_needs_no_hyperparameters():
    cfg = load_preset("xor")
    cfg["train"] = {"enabled": False}
    parsed = NetworkConfig.from_mapping(cfg)
    assert not parsed.train
    assert parsed.lr is None and parsed.max_iterations is None


def test_network_without_hidden_layer_only_runs():
    cfg = _minimal()
    cfg["model"]["layers"] = [2, 1]
    with pytest.raises(ConfigurationError, match="hidden"):
        NetworkConfig.from_mapping(cfg)
    cfg["train"]["enabled"] = False
    assert NetworkConfig.from_mapping(cfg).layers == (2, 1)


def test_weight_range_must_be_ordered():
    cfg = _minimal()
    cfg["model"]["weights"].update({"low": 1.0, "high": 1.0})
    with pytest.raises(ConfigurationError, match="below"):
        NetworkConfig.from_mapping(cfg)


def test_file_init_and_save_need_a_path():
    cfg = _minimal()
    cfg["model"]["weights"] = {"init": "file"}
    with pytest.raises(ConfigurationError, match="path"):
        NetworkConfig.from_mapping(cfg)
    cfg["model"]["weights"] = {"init": "random", "low": -1, "high": 1, "save": True}
    with pytest.raises(ConfigurationError, match="path"):
        NetworkConfig.from_mapping(cfg)


def test_unknown_activation_is_rejected():
    cfg = _minimal()
    cfg["model"]["activation"] = "tanh"
    with pytest.raises(ConfigurationError, match="tanh"):
        NetworkConfig.from_mapping(cfg)


def test_data_needs_exactly_one_source(tmp_path):
    cfg = _minimal()
    cfg["data"]["truth_table"] = str(tmp_path / "t.txt")
    with pytest.raises(ConfigurationError, match="exactly one"):
        NetworkConfig.from_mapping(cfg)
    cfg["data"] = {}
    with pytest.raises(ConfigurationError, match="exactly one"):
        NetworkConfig.from_mapping(cfg)


def test_missing_section_is_reported():
    cfg = _minimal()
    del cfg["model"]
    with pytest.raises(ConfigurationError, match="model"):
        NetworkConfig.from_mapping(cfg)


def test_dataset_must_match_topology():
    cfg = _minimal()
    cfg["model"]["layers"] = [3, 2, 1]
    parsed = NetworkConfig.from_mapping(cfg)
    with pytest.raises(DatasetShapeError):
        parsed.load_dataset()


def test_declared_case_count_checked_for_inline_cases():
    cfg = _minimal()
    cfg["data"]["number_of_cases"] = 5
    with pytest.raises(DatasetShapeError, match="declares 5"):
        NetworkConfig.from_mapping(cfg).load_dataset()


TEXT_CONFIG = """\
# xor network
n = 3
inputNodes = 2
hiddenLayerNodes1 = 2
outputNodes = 1
maxIterations = 100000
numberOfCases = 4
lambda = 0.3
errorThreshold = 0.0002
low = -1.5
high = 1.5
keepAlive = 10000
shouldTrain = true
shouldSaveWeights = false
useRandomWeights = true
weightsFilePath = weights.txt
truthTableFilePath = xor.txt
activationFunction = Sigmoid
"""


def test_parse_text_config_maps_legacy_keys():
    cfg = parse_text_config(TEXT_CONFIG)
    assert cfg["model"]["layers"] == [2, 2, 1]
    assert cfg["model"]["activation"] == "sigmoid"
    assert cfg["model"]["weights"] == {
        "low": -1.5,
        "high": 1.5,
        "save": False,
        "init": "random",
        "path": "weights.txt",
    }
    assert cfg["train"]["lr"] == 0.3
    assert cfg["train"]["enabled"] is True
    assert cfg["data"] == {"number_of_cases": 4.0, "truth_table": "xor.txt"}


def test_parse_text_config_requires_every_width():
    with pytest.raises(ConfigurationError, match="layer"):
        parse_text_config("n = 4\ninputNodes = 2\nhiddenLayerNodes1 = 3\noutputNodes = 1\n")
    with pytest.raises(ConfigurationError, match="'n'"):
        parse_text_config("inputNodes = 2\n")
    with pytest.raises(ConfigurationError, match="hidden layer"):
        parse_text_config("n = 3\ninputNodes = 2\nhiddenLayerNodes2 = 3\noutputNodes = 1\n")


def test_parse_text_config_warns_on_unknown_keys(caplog):
    text = "n = 2\ninputNodes = 2\noutputNodes = 1\nmomentum = 0.9\n"
    with caplog.at_level(logging.WARNING, logger="nlayernet.training.config"):
        cfg = parse_text_config(text)
    assert cfg["model"]["layers"] == [2, 1]
    assert "momentum" in caplog.text


def test_read_text_config_resolves_relative_paths(tmp_path):
    (tmp_path / "xor.txt").write_text("0 0 0\n0 1 1\n1 0 1\n1 1 0\n")
    path = tmp_path / "xor.cfg"
    path.write_text(TEXT_CONFIG)
    cfg = read_config_file(path)
    assert cfg["data"]["truth_table"] == str(tmp_path / "xor.txt")
    assert cfg["model"]["weights"]["path"] == str(tmp_path / "weights.txt")
    parsed = NetworkConfig.from_mapping(cfg)
    assert parsed.max_iterations == 100000
    assert parsed.keep_alive == 10000
    assert len(parsed.load_dataset()) == 4


def test_read_json_config(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps(_minimal()))
    cfg = read_config_file(path)
    assert NetworkConfig.from_mapping(cfg).max_iterations == 10


def test_read_yaml_config(tmp_path):
    yaml = pytest.importorskip("yaml")
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(_minimal(seed=3)))
    parsed = NetworkConfig.from_mapping(read_config_file(path))
    assert parsed.seed == 3
    assert parsed.layers == (2, 2, 1)


def test_read_missing_config(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        read_config_file(tmp_path / "nope.json")


def test_text_config_without_should_train_only_runs():
    cfg = parse_text_config(
        "n = 3\ninputNodes = 2\nhiddenLayerNodes1 = 2\noutputNodes = 1\n"
        "useRandomWeights = true\nlow = -1\nhigh = 1\n"
    )
    assert cfg["train"]["enabled"] is False
    cfg["data"]["cases"] = [[[0, 1], [1]]]
    parsed = NetworkConfig.from_mapping(cfg)
    assert not parsed.train
    assert parsed.lr is None


def test_dataset_needs_a_source_even_when_built_directly():
    parsed = NetworkConfig.from_mapping(_minimal())
    with pytest.raises(ConfigurationError, match="exactly one"):
        dataclasses.replace(parsed, cases=None).load_dataset()


def test_malformed_json_names_the_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text('{"data": {"cases": [}')
    with pytest.raises(ConfigurationError, match="broken.json"):
        read_config_file(path)


def test_malformed_yaml_names_the_file(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "broken.yaml"
    path.write_text("data: [unclosed\n")
    with pytest.raises(ConfigurationError, match="broken.yaml"):
        read_config_file(path)
