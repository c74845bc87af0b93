"""
Degradation Module

This module provides tools for estimating PV panel degradation from
nameplate specifications and field measurements.
"""

from .estimator import DegradationEstimator, InsufficientDataError
from .profile_generator import ProfileGenerator

__all__ = ["DegradationEstimator", "InsufficientDataError", "ProfileGenerator"]
