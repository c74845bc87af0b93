"""
PV Eval - Main Interface

This module provides the main interface for the PV panel degradation
estimator. It ties together panel state, the estimator, report generation and
export behind a high-level API.

Usage:
    from pv_eval.main import PanelEvaluationModel

    model = PanelEvaluationModel()
    panel = model.create_panel(model_number="SP-400")
    model.record_specifications(panel.panel_id, {"MODULE_AREA": 2.0, "PMAX": 400})
    model.record_measurement(panel.panel_id, voltage=37.0, current=10.0)
    profile = model.generate_profile(panel.panel_id)
"""

import sys
import uuid
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .config.estimator_config import ConfigManager, EstimatorConfig
from .config.data_formats import DataFormats, DegradationReportForm, to_local_naive
from .degradation.estimator import DegradationEstimator
from .degradation.profile_generator import ProfileGenerator
from .panel.pv_panel import PVPanel, PVPanelProfile, PVPanelTest, SpecificationKey
from .reporting.degradation_report import (DegradationReport, ReportBuilder,
                                          finite_or_none, round_percent)
from .reporting.data_export import DataExporter


logger = logging.getLogger(__name__)


class PanelEvaluationModel:
    """
    Main interface for PV panel degradation analysis.

    Panels registered here live for the lifetime of the model instance only.

    Features:
    - Panel registry
    - Specification and measurement recording
    - Profile generation
    - One-shot reports from raw form inputs
    - Summary statistics and export
    """

    def __init__(self, config: Optional[EstimatorConfig] = None,
                 log_level: str = "INFO"):
        """
        Initialize evaluation model

        Args:
            config: Estimator configuration, STC defaults when omitted
            log_level: Logging level
        """
        logging.getLogger("pv_eval").setLevel(getattr(logging, log_level.upper()))

        self.config_manager = ConfigManager()
        self.data_formats = DataFormats()
        self.panels: Dict[str, PVPanel] = {}
        self._registry_lock = threading.Lock()

        self.configure(config or EstimatorConfig())

    def configure(self, config: EstimatorConfig):
        """Apply a configuration to the estimator pipeline"""
        self.config = config
        self.estimator = DegradationEstimator(config)
        self.profile_generator = ProfileGenerator(estimator=self.estimator)
        self.report_builder = ReportBuilder(self.profile_generator)
        logger.info(f"Configured estimator: {config.name}, "
                    f"reference irradiance {config.reference_irradiance_wm2} W/m²")

    def load_config(self, filepath: str) -> bool:
        """
        Load estimator configuration from file

        Args:
            filepath: Path to JSON or YAML configuration

        Returns:
            True if successful
        """
        try:
            logger.info(f"Loading configuration from {filepath}")
            self.configure(self.config_manager.load_config(filepath))
            return True

        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Failed to load configuration: {e}")
            return False

    def use_preset(self, preset_name: str, **kwargs) -> bool:
        """
        Configure from a named preset

        Args:
            preset_name: Name of preset
            **kwargs: Configuration overrides

        Returns:
            True if successful
        """
        try:
            self.configure(self.config_manager.create_from_preset(preset_name, **kwargs))
            return True

        except ValueError as e:
            logger.error(f"Failed to apply preset: {e}")
            return False

    def create_panel(self, model_number: Optional[str] = None,
                     panel_id: Optional[str] = None,
                     specifications: Optional[Mapping[Union[SpecificationKey, str], float]] = None) -> PVPanel:
        """
        Register a new panel

        Args:
            model_number: Optional model number
            panel_id: Identifier to use, a fresh UUID when omitted
            specifications: Initial specifications, recorded before registration

        Returns:
            The new panel
        """
        panel_id = panel_id or str(uuid.uuid4())
        panel = PVPanel(panel_id=panel_id, model_number=model_number)
        if specifications:
            panel.record_specifications(specifications)

        with self._registry_lock:
            if panel_id in self.panels:
                raise ValueError(f"Panel already exists: {panel_id}")
            self.panels[panel_id] = panel

        logger.info(f"Created panel {panel_id}")
        return panel

    def get_panel(self, panel_id: str) -> PVPanel:
        """Look up a registered panel, KeyError if unknown"""
        with self._registry_lock:
            if panel_id not in self.panels:
                raise KeyError(f"Panel not found: {panel_id}")
            return self.panels[panel_id]

    def list_panels(self) -> List[str]:
        with self._registry_lock:
            return list(self.panels.keys())

    def record_specifications(self, panel_id: str,
                              values: Mapping[Union[SpecificationKey, str], float]) -> Dict[SpecificationKey, float]:
        """
        Merge specifications into a panel

        Returns:
            The panel's specifications after the merge
        """
        panel = self.get_panel(panel_id)
        panel.record_specifications(values)
        return panel.specifications

    def record_test(self, panel_id: str, power_output: float,
                    timestamp: Optional[datetime] = None) -> PVPanelTest:
        """
        Record a measured power output on a panel

        Args:
            panel_id: Panel identifier
            power_output: Measured power (W)
            timestamp: Measurement time, now when omitted

        Returns:
            The recorded test
        """
        test = PVPanelTest(timestamp=to_local_naive(timestamp or datetime.now()),
                           power_output=float(power_output))
        self.get_panel(panel_id).record_test(test)
        return test

    def record_measurement(self, panel_id: str, voltage: float, current: float,
                           timestamp: Optional[datetime] = None) -> PVPanelTest:
        """Record a voltage/current measurement as a V × I power test"""
        return self.record_test(panel_id, float(voltage) * float(current), timestamp)

    def generate_profile(self, panel_id: str) -> PVPanelProfile:
        """
        Generate a degradation profile for a registered panel

        Raises:
            InsufficientDataError: if the panel lacks tests, area or an efficiency source
        """
        return self.profile_generator.generate_profile(self.get_panel(panel_id))

    def generate_report(self, form: Union[DegradationReportForm, Dict[str, Any]],
                        register: bool = False) -> DegradationReport:
        """
        Run the one-shot report workflow on raw form inputs

        Args:
            form: Report form or mapping of raw values
            register: Keep the report's panel in the registry

        Returns:
            Degradation report
        """
        report = self.report_builder.generate_report(form)
        if register:
            with self._registry_lock:
                self.panels[report.panel.panel_id] = report.panel
        return report

    def get_summary(self, panel_id: str) -> Dict[str, Any]:
        """
        Get panel summary

        Returns:
            Summary dictionary
        """
        panel = self.get_panel(panel_id)
        profiles = panel.recorded_profiles
        latest = profiles[-1] if profiles else None

        summary = {
            'panel': {
                'panel_id': panel.panel_id,
                'model_number': panel.model_number,
                'specifications': {key.name: value for key, value in panel.specifications.items()}
            },
            'tests': self.data_formats.get_test_statistics(panel),
            'profiles': {
                'count': len(profiles),
                'latest': None
            },
            'configuration': self.config_manager.generate_config_summary(self.config)
        }

        if latest is not None:
            summary['profiles']['latest'] = {
                'degradation': finite_or_none(latest.degradation),
                'degradation_percent': finite_or_none(round_percent(latest.degradation)),
                'performance_percent': finite_or_none(round_percent(1.0 - latest.degradation)),
                'generated_on': latest.generated_on.isoformat()
            }

        return summary

    def export_panel(self, panel_id: str, output_dir: str, format: str = "csv") -> List[Path]:
        """
        Export a panel's test log and profile history

        Args:
            panel_id: Panel identifier
            output_dir: Output directory
            format: "csv" or "json"

        Returns:
            Paths of the written files
        """
        exporter = DataExporter(output_dir)
        return exporter.export(self.get_panel(panel_id), format)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line interface for the PV panel degradation estimator"""
    import argparse

    parser = argparse.ArgumentParser(description="PV panel degradation estimator")
    parser.add_argument("--model-number", help="Panel model number")
    parser.add_argument("--efficiency", help="Rated efficiency (%%)")
    parser.add_argument("--area", help="Panel area (m²)")
    parser.add_argument("--pmax", help="Rated Pmax (W), used when efficiency is missing")
    parser.add_argument("--voltage", help="Measured voltage (V)")
    parser.add_argument("--current", help="Measured current (A)")
    parser.add_argument("--config", help="Estimator configuration file (JSON or YAML)")
    parser.add_argument("--preset", help="Estimator configuration preset")
    parser.add_argument("--irradiance", type=float, help="Reference irradiance override (W/m²)")
    parser.add_argument("--export", metavar="DIR", help="Export the panel history to DIR")
    parser.add_argument("--format", choices=DataExporter.SUPPORTED_FORMATS, default="csv",
                        help="Export format")
    parser.add_argument("--list-presets", action="store_true", help="List configuration presets")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="Logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper()))
    model = PanelEvaluationModel(log_level=args.log_level)

    if args.list_presets:
        print("Available presets:")
        for preset in model.config_manager.list_presets():
            print(f"  - {preset}")
        return 0

    if args.config and not model.load_config(args.config):
        print("Failed to load configuration")
        return 2

    if args.preset and not model.use_preset(args.preset):
        print(f"Unknown preset: {args.preset}")
        return 2

    if args.irradiance is not None:
        overrides = model.config.model_dump()
        overrides['reference_irradiance_wm2'] = args.irradiance
        try:
            model.configure(model.config_manager.validate_config(overrides))
        except ValueError as e:
            print(f"Invalid reference irradiance: {e}")
            return 2

    report = model.generate_report({
        'model_number': args.model_number,
        'rated_efficiency': args.efficiency,
        'panel_area': args.area,
        'rated_pmax': args.pmax,
        'measured_voltage': args.voltage,
        'measured_current': args.current
    }, register=True)

    print(report.message)

    if args.export:
        for path in model.export_panel(report.panel.panel_id, args.export, args.format):
            print(f"Exported {path}")

    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())
