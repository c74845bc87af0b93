"""
PV Eval
=======

Estimates photovoltaic panel degradation from nameplate specifications and a
field measurement.

Main Components:
- Panel specification store and test/profile logs
- Degradation estimator with Pmax efficiency fallback
- Profile generation
- Report workflow, export and REST API

Usage:
    >>> from pv_eval import PVPanel, PVPanelTest, SpecificationKey
    >>> from datetime import datetime
    >>> panel = PVPanel("panel-1")
    >>> panel.record_specifications({SpecificationKey.MODULE_AREA: 2.0,
    ...                              SpecificationKey.RATED_EFFICIENCY: 20})
    >>> panel.record_test(PVPanelTest(timestamp=datetime.now(), power_output=370))
    >>> round(panel.generate_profile().degradation, 3)
    0.075
"""

from .panel.pv_panel import PVPanel, PVPanelTest, PVPanelProfile, SpecificationKey
from .degradation.estimator import DegradationEstimator, InsufficientDataError
from .degradation.profile_generator import ProfileGenerator
from .config.estimator_config import EstimatorConfig

__version__ = "1.0.0"

__all__ = [
    "PVPanel",
    "PVPanelTest",
    "PVPanelProfile",
    "SpecificationKey",
    "DegradationEstimator",
    "InsufficientDataError",
    "ProfileGenerator",
    "EstimatorConfig",
]
