"""Reporting for Flex Pinot.

This module provides the console reporter for import progress and the JSON
run report.
"""

from flex_pinot.reporting.console import ImportReporter, RowResult, RowStatus
from flex_pinot.reporting.report import build_report, write_json_report

__all__ = [
    "ImportReporter",
    "RowResult",
    "RowStatus",
    "build_report",
    "write_json_report",
]
