#!/usr/bin/env python3
"""
Basic Usage Example for the PV Panel Degradation Estimator

This example demonstrates profiling a panel from its nameplate data and a
field measurement, both through the panel API and the one-shot report form.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add the src directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pv_eval.main import PanelEvaluationModel
from pv_eval.degradation.estimator import InsufficientDataError
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Main example function"""
    print("=" * 60)
    print("PV Panel Degradation Estimator - Basic Usage Example")
    print("=" * 60)

    # Create model instance
    print("\n1. Creating evaluation model...")
    model = PanelEvaluationModel()

    print("\n2. Available configuration presets:")
    for preset in model.config_manager.list_presets():
        print(f"   - {preset}")

    # Register a panel with nameplate data
    print("\n3. Registering a 400 W panel...")
    panel = model.create_panel(model_number="SP-400")
    model.record_specifications(panel.panel_id, {"MODULE_AREA": 2.0, "PMAX": 400})

    # Profiling without a measurement fails
    print("\n4. Profiling before any measurement...")
    try:
        model.generate_profile(panel.panel_id)
    except InsufficientDataError as e:
        print(f"   {e}")

    # Record two yearly measurements
    print("\n5. Recording field measurements...")
    start = datetime.now() - timedelta(days=365)
    model.record_measurement(panel.panel_id, voltage=38.5, current=10.2, timestamp=start)
    model.record_measurement(panel.panel_id, voltage=37.0, current=10.0)

    profile = model.generate_profile(panel.panel_id)
    print(f"   Degradation: {profile.degradation_percent:.2f}%")
    print(f"   Performance: {profile.performance_percent:.2f}% of original")

    # Summary
    print("\n6. Panel summary:")
    summary = model.get_summary(panel.panel_id)
    print(f"   Tests recorded: {summary['tests']['total_records']}")
    print(f"   Mean measured power: {summary['tests']['power_W']['mean']:.1f} W")
    print(f"   Profiles generated: {summary['profiles']['count']}")

    # One-shot report from raw form strings
    print("\n7. One-shot report from form inputs...")
    report = model.generate_report({
        'model_number': 'SP-400',
        'rated_efficiency': '20',
        'panel_area': '2',
        'measured_voltage': '37',
        'measured_current': '10'
    })
    print(f"   {report.message}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
