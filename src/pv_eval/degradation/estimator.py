"""
Degradation Estimator Module

This module estimates how far a PV panel has degraded from its nameplate
rating, using the panel's latest field measurement and its specifications.

The theoretical output of an undegraded panel at the reference irradiance is

    P_rated = η × G_ref × A

where η is the rated efficiency as a fraction, G_ref the reference irradiance
(W/m²) and A the module area (m²). The degradation fraction is then

    D = 1 - P_measured / P_rated

D = 0 means no degradation, D > 0 underperformance and D < 0 output above the
nameplate rating. No clamping is applied.

When the rated efficiency is not known it is derived from the rated maximum
power: η = Pmax / (G_ref × A).

References:
- IEC 61215 Standard Test Conditions
- "Photovoltaic Systems Engineering" - Messenger & Ventre
"""

import logging
import numpy as np
from typing import Dict, Optional, Sequence, Tuple

from ..config.estimator_config import EstimatorConfig, LatestTestPolicy
from ..panel.pv_panel import PVPanel, PVPanelTest, SpecificationKey

logger = logging.getLogger(__name__)


class InsufficientDataError(Exception):
    """Raised when a panel lacks the data needed to estimate degradation"""

    description = "There was insufficient data about the solar panel to generate a profile."

    def __init__(self):
        super().__init__(self.description)

    def __str__(self) -> str:
        return self.description


class DegradationEstimator:
    """
    Degradation fraction estimator.

    Preconditions, checked in order:
    - at least one test record
    - module area
    - rated efficiency, or rated Pmax to derive it from
    Any failure raises InsufficientDataError.
    """

    def __init__(self, config: Optional[EstimatorConfig] = None):
        """
        Initialize estimator

        Args:
            config: Estimator configuration, defaults to STC reference conditions
        """
        self.config = config or EstimatorConfig()

    @property
    def reference_irradiance(self) -> float:
        return self.config.reference_irradiance_wm2

    def select_latest_test(self, tests: Sequence[PVPanelTest]) -> PVPanelTest:
        """
        Pick the test record the estimate is based on

        Args:
            tests: Test log in append order

        Returns:
            Latest test record according to the configured policy
        """
        if not tests:
            raise InsufficientDataError()

        if self.config.latest_test_policy == LatestTestPolicy.TIMESTAMP:
            # max() keeps the first maximum, so reverse to prefer the later append on ties
            return max(reversed(tests), key=lambda test: test.timestamp)

        return tests[-1]

    def rated_efficiency_fraction(self, specifications: Dict[SpecificationKey, float],
                                  area: float) -> float:
        """
        Rated efficiency as a fraction (0.2 for a 20 % panel)

        The nameplate efficiency is stored in percent. The Pmax-derived value
        is already a ratio and is used unchanged.

        Args:
            specifications: Panel specification mapping
            area: Module area (m²)

        Returns:
            Efficiency fraction
        """
        rated_efficiency = specifications.get(SpecificationKey.RATED_EFFICIENCY)
        if rated_efficiency is not None:
            return rated_efficiency / 100.0

        pmax = specifications.get(SpecificationKey.PMAX)
        if pmax is None:
            raise InsufficientDataError()

        with np.errstate(divide="ignore", invalid="ignore"):
            derived = float(np.float64(pmax) / (self.reference_irradiance * area))
        logger.debug(f"Derived rated efficiency {derived:.4f} from Pmax {pmax} W")
        return derived

    def rated_power(self, specifications: Dict[SpecificationKey, float]) -> float:
        """
        Theoretical output of the undegraded panel at the reference irradiance

        Args:
            specifications: Panel specification mapping

        Returns:
            Rated power (W)
        """
        area = specifications.get(SpecificationKey.MODULE_AREA)
        if area is None:
            raise InsufficientDataError()

        efficiency = self.rated_efficiency_fraction(specifications, area)
        return efficiency * self.reference_irradiance * area

    def estimate(self, panel: PVPanel) -> float:
        """
        Estimate the degradation fraction of a panel

        Args:
            panel: Panel to evaluate

        Returns:
            Degradation fraction (unclamped)
        """
        specifications, tests = panel.snapshot()

        latest_test = self.select_latest_test(tests)
        rated_power = self.rated_power(specifications)

        # Zero or non-finite ratings follow IEEE float rules instead of raising
        with np.errstate(divide="ignore", invalid="ignore"):
            degradation = float(1.0 - np.float64(latest_test.power_output) / rated_power)

        logger.debug(f"Panel {panel.panel_id}: measured {latest_test.power_output:.2f} W, "
                     f"rated {rated_power:.2f} W, degradation {degradation:.4f}")
        return degradation

    def estimate_or_error(self, panel: PVPanel) -> Tuple[Optional[float], Optional[InsufficientDataError]]:
        """
        Estimate degradation as a (value, error) pair

        Args:
            panel: Panel to evaluate

        Returns:
            (degradation, None) on success, (None, error) otherwise
        """
        try:
            return self.estimate(panel), None
        except InsufficientDataError as e:
            return None, e
