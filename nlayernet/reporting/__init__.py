"""Reporting utilities for nlayernet."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink, KeepAlivePrinter, MetricsCapture
from .plots import ErrorCurvePlot
from .report import format_elapsed, format_report
from .summary import write_summary

__all__ = [
    "write_manifest",
    "CsvSink",
    "ErrorCurvePlot",
    "JsonlSink",
    "KeepAlivePrinter",
    "MetricsCapture",
    "format_elapsed",
    "format_report",
    "write_summary",
]
