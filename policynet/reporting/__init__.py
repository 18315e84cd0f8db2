"""Reporting utilities for policynet."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "write_manifest",
    "write_summary",
    "JsonlSink",
    "CsvSink",
    "MetricsCapture",
    "PlotAdapter",
]
