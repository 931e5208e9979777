"""Pipeline assembly: configuration to trained weights and run artifacts."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from ..core.activations import get_activation
from ..core.serialization import load_weights, save_weights
from ..core.types import RunResult
from ..core.weights import WeightStore
from ..data.truth_table import Dataset
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink, KeepAlivePrinter
from ..reporting.plots import ErrorCurvePlot
from ..reporting.report import format_config_echo, format_elapsed, format_report
from ..reporting.summary import write_summary
from .config import NetworkConfig, load_preset, presets
from .trainer import Trainer, evaluate

logger = logging.getLogger(__name__)


def build_weights(config: NetworkConfig) -> WeightStore:
    """Randomise weights or load them from ``config.weights_path``."""

    topology = config.topology
    if config.randomize:
        rng = np.random.default_rng(config.seed)
        return WeightStore.random(topology, config.low, config.high, rng)
    logger.info("Loading weights from %s", config.weights_path)
    return load_weights(config.weights_path, topology)


def run_pipeline(config: Mapping[str, Any]) -> RunResult:
    """Validate ``config``, train or run the network and write artifacts."""

    start = time.perf_counter()
    cfg = NetworkConfig.from_mapping(config)
    dataset = cfg.load_dataset()
    weights = build_weights(cfg)
    activation = get_activation(cfg.activation)

    run_dir = _resolve_run_dir(cfg)
    run_dir.mkdir(parents=True, exist_ok=True)

    print(format_config_echo(cfg))

    mode = "train" if cfg.train else "run"
    errors_jsonl = JsonlSink(run_dir / "errors.jsonl", mode=mode)
    errors_csv = CsvSink(run_dir / "errors.csv")
    plot = ErrorCurvePlot(
        run_dir / "error.png",
        enabled=cfg.enable_plots,
        error_threshold=cfg.error_threshold,
        title=f"{cfg.topology} network",
    )

    if cfg.train:
        callbacks: list[object] = [errors_jsonl, errors_csv, plot]
        if cfg.keep_alive:
            callbacks.append(KeepAlivePrinter(cfg.keep_alive))
        trainer = Trainer(
            weights,
            activation,
            lr=cfg.lr,
            error_threshold=cfg.error_threshold,
            max_iterations=cfg.max_iterations,
            callbacks=callbacks,
            report_every=cfg.keep_alive or 1,
        )
        result = trainer.train(dataset)
    else:
        result = evaluate(weights, activation, dataset)
        metrics = {
            "average_error": result.average_error,
            "total_error": result.average_error * len(dataset),
        }
        errors_jsonl.on_epoch(0, metrics)
        errors_csv.on_epoch(0, metrics)
    plot.close()

    weights_path = ""
    if cfg.save_weights:
        weights_path = save_weights(cfg.weights_path, weights)
        logger.info("Saved weights to %s", weights_path)

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        topology=cfg.topology,
        dataset_provenance=_provenance(cfg, dataset),
        seed=cfg.seed,
    )
    summary_path = write_summary(errors_jsonl.path, run_dir / "summary.json", result=result)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    report = format_report(dataset, result)
    report_path = run_dir / "report.txt"
    report_path.write_text(report + "\n")
    print()
    print(report)
    print(format_elapsed(time.perf_counter() - start))

    return RunResult(
        iterations=result.iterations,
        average_error=result.average_error,
        stop_reason=result.stop_reason,
        outputs=result.outputs,
        metrics_path=str(errors_jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        report_path=str(report_path),
        weights_path=weights_path,
    )


def _resolve_run_dir(cfg: NetworkConfig) -> Path:
    if cfg.run_dir:
        return Path(cfg.run_dir)
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / str(cfg.topology)


def _provenance(cfg: NetworkConfig, dataset: Dataset) -> Mapping[str, object]:
    provenance: dict[str, object] = dict(dataset.provenance())
    if cfg.truth_table:
        provenance["path"] = cfg.truth_table
    else:
        provenance["source"] = "inline"
    return provenance


__all__ = ["build_weights", "load_preset", "presets", "run_pipeline"]
