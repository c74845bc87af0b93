"""
Profile Generator Module

This module turns a degradation estimate into a timestamped profile and
records it in the panel's profile history.
"""

import logging
from datetime import datetime
from typing import Optional

from ..config.estimator_config import EstimatorConfig
from ..panel.pv_panel import PVPanel, PVPanelProfile
from .estimator import DegradationEstimator, InsufficientDataError

logger = logging.getLogger(__name__)


class ProfileGenerator:
    """Generates degradation profiles for panels"""

    def __init__(self, config: Optional[EstimatorConfig] = None,
                 estimator: Optional[DegradationEstimator] = None):
        """
        Initialize profile generator

        Args:
            config: Estimator configuration, used when no estimator is given
            estimator: Degradation estimator to run
        """
        self.estimator = estimator or DegradationEstimator(config)

    def generate_profile(self, panel: PVPanel) -> PVPanelProfile:
        """
        Generate and record a profile for the panel

        The panel state is read afresh on every call. The profile history is
        only appended to once the estimate has succeeded.

        Args:
            panel: Panel to profile

        Returns:
            Generated profile
        """
        # Hold the panel lock so the estimate and the append see the same state
        with panel.lock:
            try:
                degradation = self.estimator.estimate(panel)
            except InsufficientDataError:
                logger.warning(f"Insufficient data to profile panel {panel.panel_id}")
                raise

            profile = PVPanelProfile(
                panel_id=panel.panel_id,
                degradation=degradation,
                generated_on=datetime.now()
            )
            panel.record_profile(profile)

        logger.info(f"Generated profile for panel {panel.panel_id}: "
                    f"degradation {degradation * 100:.2f}%")
        return profile
