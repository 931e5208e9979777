"""Dataset helpers for nlayernet."""

from .truth_table import Dataset, format_truth_table, load_truth_table

__all__ = ["Dataset", "format_truth_table", "load_truth_table"]
