"""Structured status report extraction from issue comments."""

from .extract import MARKER_IS_REPORT, Report, parse_report
from .select import select_most_recent_comment, select_reports

__all__ = [
    "MARKER_IS_REPORT",
    "Report",
    "parse_report",
    "select_most_recent_comment",
    "select_reports",
]
