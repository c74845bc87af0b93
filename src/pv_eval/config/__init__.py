"""
Configuration Module

This module provides tools for handling estimator configuration,
data formats, and input validation.
"""

from .estimator_config import ConfigManager, EstimatorConfig, LatestTestPolicy
from .data_formats import DataFormats, DegradationReportForm

__all__ = ["ConfigManager", "EstimatorConfig", "LatestTestPolicy", "DataFormats", "DegradationReportForm"]
