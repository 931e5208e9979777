import json

import numpy as np
import pytest

from nlayernet.core.types import CONVERGED, MAX_ITERATIONS, RUN_ONLY, TrainingResult
from nlayernet.data.truth_table import Dataset
from nlayernet.reporting.metrics import CsvSink, JsonlSink
from nlayernet.reporting.plots import ErrorCurvePlot
from nlayernet.reporting.report import exit_reasons, format_elapsed, format_report
from nlayernet.reporting.summary import iterations_to_threshold, write_summary

XOR = Dataset.from_pairs([([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [0])])


def _result(stop_reason, iterations=10, average_error=0.0001, max_iterations=10):
    return TrainingResult(
        outputs=np.array([[0.01], [0.98], [0.98], [0.02]]),
        average_error=average_error,
        final_error=average_error,
        iterations=iterations,
        stop_reason=stop_reason,
        error_threshold=0.0002 if stop_reason != RUN_ONLY else None,
        max_iterations=max_iterations if stop_reason != RUN_ONLY else None,
    )


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0.25, "Elapsed time: 250 milliseconds"),
        (12.5, "Elapsed time: 12.5 seconds"),
        (90.0, "Elapsed time: 1.5 minutes"),
        (2 * 3600.0, "Elapsed time: 2 hours"),
        (3 * 86400.0, "Elapsed time: 3 days"),
        (14 * 86400.0, "Elapsed time: 2 weeks"),
    ],
)
def test_format_elapsed_picks_unit(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_exit_reasons_can_both_hold():
    reasons = exit_reasons(_result(CONVERGED, iterations=10, max_iterations=10))
    assert reasons == [
        "Max iterations (10) reached",
        "error under error threshold (0.0002)",
    ]
    assert exit_reasons(_result(MAX_ITERATIONS, average_error=0.2)) == [
        "Max iterations (10) reached"
    ]
    assert exit_reasons(_result(RUN_ONLY)) == []


def test_training_report_lists_outputs_and_outcome():
    text = format_report(XOR, _result(CONVERGED, iterations=4, max_iterations=10))
    lines = text.splitlines()
    assert lines[0] == "Truth Table"
    assert "Outputs" in lines
    assert "0.01000000000000000" in text
    assert "number of iterations: 4" in lines
    assert "Reason(s) for exiting:" in lines
    assert lines[-1] == "average error: 0.0001"


def test_run_only_report_omits_training_outcome():
    text = format_report(XOR, _result(RUN_ONLY))
    assert "number of iterations" not in text
    assert "Reason(s) for exiting" not in text
    assert text.endswith("average error: 0.0001")


def _records(errors):
    return [
        {"iteration": i, "average_error": err, "total_error": 4 * err, "mode": "train"}
        for i, err in enumerate(errors, start=1)
    ]


def test_iterations_to_threshold():
    records = _records([0.3, 0.0001, 0.00005])
    assert iterations_to_threshold(records, 0.0002) == 2
    assert iterations_to_threshold(records, 1e-9) is None
    assert iterations_to_threshold(records, None) is None


def test_write_summary_reports_convergence(tmp_path):
    metrics = tmp_path / "errors.jsonl"
    metrics.write_text("\n".join(json.dumps(r) for r in _records([0.3, 0.2, 0.0001])))
    path = write_summary(metrics, tmp_path / "summary.json", result=_result(CONVERGED, iterations=3))
    summary = json.loads(open(path).read())
    assert summary["records"] == 3
    assert summary["average_error"] == {"first": 0.3, "min": 0.0001, "last": 0.0001}
    assert summary["result"]["stop_reason"] == CONVERGED
    assert summary["result"]["iterations_to_threshold"] == 3
    assert summary["result"]["exit_reasons"] == ["error under error threshold (0.0002)"]


def test_summary_of_missing_metrics_file(tmp_path):
    path = write_summary(tmp_path / "absent.jsonl", tmp_path / "summary.json")
    assert json.loads(open(path).read()) == {"records": 0, "version": 1}


def test_error_sinks_share_one_schema(tmp_path):
    jsonl = JsonlSink(tmp_path / "errors.jsonl", mode="run")
    table = CsvSink(tmp_path / "errors.csv")
    for sink in (jsonl, table):
        sink.on_epoch(0, {"average_error": 0.25})
    assert json.loads((tmp_path / "errors.jsonl").read_text()) == {
        "iteration": 0,
        "average_error": 0.25,
        "mode": "run",
    }
    assert (tmp_path / "errors.csv").read_text().splitlines() == [
        "iteration,average_error,total_error",
        "0,0.25,",
    ]


def test_error_curve_plot(tmp_path):
    pytest.importorskip("matplotlib")
    plot = ErrorCurvePlot(tmp_path / "curve" / "error.png", enabled=True, error_threshold=0.01)
    for i, err in enumerate([0.5, 0.1, 0.02], start=1):
        plot.on_epoch(i, {"average_error": err, "total_error": 4 * err})
    assert plot.close() == str(tmp_path / "curve" / "error.png")
    assert (tmp_path / "curve" / "error.png").exists()
    assert ErrorCurvePlot(tmp_path / "off.png").close() is None
