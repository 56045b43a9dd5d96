"""Reporting utilities for gridmlp."""

from .artifacts import evaluate_directory, write_report
from .dashboard import AnsiRenderer, Dashboard, LogRenderer, make_renderer
from .summary import format_ranked_table, rank_results

__all__ = [
    "AnsiRenderer",
    "Dashboard",
    "LogRenderer",
    "evaluate_directory",
    "format_ranked_table",
    "make_renderer",
    "rank_results",
    "write_report",
]
