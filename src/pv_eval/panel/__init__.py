"""
Panel Module

This module provides the panel state model: nameplate specifications,
field test records and generated degradation profiles.
"""

from .pv_panel import PVPanel, PVPanelTest, PVPanelProfile, SpecificationKey

__all__ = ["PVPanel", "PVPanelTest", "PVPanelProfile", "SpecificationKey"]
