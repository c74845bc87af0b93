"""
Reporting Module

This module provides the degradation report workflow for raw form inputs
and export of panel history.
"""

from .degradation_report import DegradationReport, ReportBuilder
from .data_export import DataExporter

__all__ = ["DegradationReport", "ReportBuilder", "DataExporter"]
