"""Command line entry point for nlayernet runs."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from nlayernet.training import config as run_config
from nlayernet.training import pipelines

DEFAULT_PRESET = "default"

logger = logging.getLogger("nlayernet.cli")


def _format_result(result) -> str:
    payload = {
        "iterations": result.iterations,
        "average_error": result.average_error,
        "stop_reason": result.stop_reason,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "report": result.report_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    if getattr(result, "weights_path", ""):
        payload["weights"] = result.weights_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(run_config.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "config",
        nargs="?",
        type=Path,
        help="Configuration file (.json, .yaml/.yml or key = value text)",
    )
    parser.add_argument(
        "--preset",
        choices=preset_names,
        help=f"Preset configuration to execute (default: {DEFAULT_PRESET})",
    )
    parser.add_argument("--seed", type=int, help="Seed for random weight initialisation")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write an error curve plot"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(run_config.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.config is not None and args.preset is not None:
        raise SystemExit("Pass either a config file or --preset, not both")

    if args.config is not None:
        config = run_config.read_config_file(args.config)
    else:
        if args.preset is None:
            logger.info("No config file passed, using preset %r instead", DEFAULT_PRESET)
        config = run_config.load_preset(args.preset or DEFAULT_PRESET)
    config = json.loads(json.dumps(config))

    overrides: dict = {}
    if args.enable_plots:
        overrides["enable_plots"] = True
    if args.seed is not None:
        overrides["seed"] = int(args.seed)
    if args.run_dir is not None:
        overrides["run_dir"] = str(args.run_dir)
    if overrides:
        config = run_config.merge_config(config, {"train": overrides})

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
