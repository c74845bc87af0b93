"""
Degradation Report
==================

Runs the complete report workflow for a single set of form inputs: a fresh
panel is created, the parsed specifications and the V × I measurement are
recorded on it, and a profile is generated.

Classes:
    DegradationReport: Outcome of one report request
    ReportBuilder: Builds reports from raw form inputs
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

from ..config.data_formats import DegradationReportForm
from ..degradation.estimator import InsufficientDataError
from ..degradation.profile_generator import ProfileGenerator
from ..panel.pv_panel import PVPanel, PVPanelProfile, PVPanelTest

logger = logging.getLogger(__name__)


def round_percent(fraction: float) -> float:
    """Fraction as a percentage rounded to two decimals"""
    return round(fraction * 100.0, 2)


def finite_or_none(value: Optional[float]) -> Optional[float]:
    """Non-finite values as None, for strict JSON payloads"""
    if value is None or not math.isfinite(value):
        return None
    return value


@dataclass
class DegradationReport:
    """Outcome of one report request: a profile or an error, never both"""
    panel: PVPanel
    profile: Optional[PVPanelProfile] = None
    error: Optional[InsufficientDataError] = None

    @property
    def success(self) -> bool:
        return self.profile is not None and self.profile.degradation is not None

    @property
    def degradation_percent(self) -> Optional[float]:
        if not self.success:
            return None
        return round_percent(self.profile.degradation)

    @property
    def performance_percent(self) -> Optional[float]:
        if not self.success:
            return None
        return round_percent(1.0 - self.profile.degradation)

    @property
    def message(self) -> str:
        if self.error is not None:
            return f"Error generating panel profile: {self.error}"
        return (f"We calculated an estimated degradation of {self.degradation_percent}%, "
                f"meaning that the panel is operating at {self.performance_percent}% "
                f"of what it originally was.")

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'success': self.success,
            'panel_id': self.panel.panel_id,
            'model_number': self.panel.model_number,
            'message': self.message
        }
        if self.success:
            result.update({
                'degradation': finite_or_none(self.profile.degradation),
                'degradation_percent': finite_or_none(self.degradation_percent),
                'performance_percent': finite_or_none(self.performance_percent),
                'generated_on': self.profile.generated_on.isoformat()
            })
        else:
            result['error'] = str(self.error)
        return result


class ReportBuilder:
    """Builds degradation reports from raw form inputs"""

    def __init__(self, generator: Optional[ProfileGenerator] = None):
        self.generator = generator or ProfileGenerator()

    def build_panel(self, form: DegradationReportForm) -> PVPanel:
        """
        Create a panel populated from the form

        Args:
            form: Parsed report form

        Returns:
            Panel with a fresh identifier, the form's specifications and,
            when voltage and current are both present, one test record
        """
        panel = PVPanel(panel_id=str(uuid.uuid4()), model_number=form.model_number)
        panel.record_specifications(form.specifications)

        power = form.measured_power
        if power is not None:
            panel.record_test(PVPanelTest(timestamp=datetime.now(), power_output=power))

        return panel

    def generate_report(self, form: Union[DegradationReportForm, Dict[str, Any]]) -> DegradationReport:
        """
        Run the report workflow

        Args:
            form: Parsed form or a mapping of raw form values

        Returns:
            Report carrying either the profile or the insufficient data error
        """
        if not isinstance(form, DegradationReportForm):
            form = DegradationReportForm(**form)

        panel = self.build_panel(form)
        report = DegradationReport(panel=panel)

        def completion(profile, error):
            report.profile = profile
            report.error = error

        panel.generate_profile(completion, generator=self.generator)

        if report.error is not None:
            logger.info(f"Report for panel {panel.panel_id} failed: {report.error}")
        return report
