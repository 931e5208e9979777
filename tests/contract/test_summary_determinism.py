from pathlib import Path

from nlayernet.training import config as run_config
from nlayernet.training import pipelines


def test_summary_outputs_are_deterministic(tmp_path):
    config = run_config.load_preset("deep-xor")
    config["train"].update(
        {
            "max_iterations": 40,
            "keep_alive": 0,
            "seed": 55,
            "run_dir": str(tmp_path / "run_a"),
            "enable_plots": False,
        }
    )

    first = pipelines.run_pipeline(config)
    summary_a = Path(first.summary_path).read_bytes()
    metrics_a = Path(first.metrics_path).read_bytes()

    config["train"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)
    summary_b = Path(second.summary_path).read_bytes()
    metrics_b = Path(second.metrics_path).read_bytes()

    assert metrics_a == metrics_b
    assert summary_a == summary_b
