#!/usr/bin/env python3
"""
Basic Tests
===========

Simple tests to verify configuration, data formats and package wiring
of the PV panel degradation estimator.

Usage:
    python -m pytest tests/test_basic.py -v
"""

import json
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def test_default_config():
    """Test default estimator configuration"""
    from pv_eval.config.estimator_config import EstimatorConfig, LatestTestPolicy

    config = EstimatorConfig()

    assert config.reference_irradiance_wm2 == 1000.0
    assert config.latest_test_policy == LatestTestPolicy.APPENDED


def test_config_rejects_non_positive_irradiance():
    """Test that reference irradiance must be positive"""
    from pydantic import ValidationError
    from pv_eval.config.estimator_config import EstimatorConfig

    with pytest.raises(ValidationError):
        EstimatorConfig(reference_irradiance_wm2=0)

    with pytest.raises(ValidationError):
        EstimatorConfig(unknown_setting=True)


def test_presets():
    """Test configuration presets"""
    from pv_eval.config.estimator_config import ConfigManager

    manager = ConfigManager()
    presets = manager.list_presets()

    assert presets == ["STC", "NOCT", "LOW_LIGHT"]

    noct = manager.create_from_preset("NOCT")
    assert noct.reference_irradiance_wm2 == 800.0

    custom = manager.create_from_preset("STC", latest_test_policy="timestamp")
    assert custom.latest_test_policy.value == "timestamp"
    # Presets are not modified by overrides
    assert manager.presets["STC"]["latest_test_policy"] == "appended"

    with pytest.raises(ValueError):
        manager.create_from_preset("Mars")


def test_config_json_roundtrip(tmp_path):
    """Test saving and loading a JSON configuration"""
    from pv_eval.config.estimator_config import ConfigManager

    manager = ConfigManager()
    config = manager.create_from_preset("LOW_LIGHT")
    path = tmp_path / "config" / "low_light.json"

    manager.save_config(config, str(path))
    loaded = manager.load_config(str(path))

    assert loaded.name == "LOW_LIGHT"
    assert loaded.reference_irradiance_wm2 == 200.0
    assert manager.config is loaded


def test_config_yaml_loading(tmp_path):
    """Test loading a YAML configuration"""
    from pv_eval.config.estimator_config import ConfigManager, LatestTestPolicy

    path = tmp_path / "estimator.yaml"
    path.write_text("name: field\nreference_irradiance_wm2: 850\nlatest_test_policy: timestamp\n",
                    encoding="utf-8")

    config = ConfigManager().load_config(str(path))

    assert config.name == "field"
    assert config.reference_irradiance_wm2 == 850.0
    assert config.latest_test_policy == LatestTestPolicy.TIMESTAMP


def test_config_loading_errors(tmp_path):
    """Test configuration loading failures"""
    from pv_eval.config.estimator_config import ConfigManager

    manager = ConfigManager()

    with pytest.raises(FileNotFoundError):
        manager.load_config(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        manager.load_config(str(broken))

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"reference_irradiance_wm2": -5}), encoding="utf-8")
    with pytest.raises(ValueError):
        manager.load_config(str(invalid))


def test_config_schema():
    """Test configuration schema generation"""
    from pv_eval.config.estimator_config import ConfigManager

    schema = ConfigManager().get_config_schema()

    assert "reference_irradiance_wm2" in schema["properties"]
    assert "latest_test_policy" in schema["properties"]


def test_specification_key_coercion():
    """Test specification keys given as names or labels"""
    from pv_eval.panel.pv_panel import SpecificationKey

    assert SpecificationKey.coerce("MODULE_AREA") is SpecificationKey.MODULE_AREA
    assert SpecificationKey.coerce("module_area") is SpecificationKey.MODULE_AREA
    assert SpecificationKey.coerce("Rated Pmax (W)") is SpecificationKey.PMAX
    assert SpecificationKey.coerce(SpecificationKey.SHORT_CIRCUIT_CURRENT) is SpecificationKey.SHORT_CIRCUIT_CURRENT

    with pytest.raises(ValueError):
        SpecificationKey.coerce("irradiance")


def test_report_form_parsing():
    """Test that non-numeric form input is dropped rather than rejected"""
    from pv_eval.config.data_formats import DegradationReportForm
    from pv_eval.panel.pv_panel import SpecificationKey

    form = DegradationReportForm(
        model_number="  ",
        rated_efficiency="18.5",
        panel_area="two",
        measured_current=" 8.2 ",
        measured_voltage="",
        rated_pmax=None
    )

    assert form.model_number is None
    assert form.rated_efficiency == 18.5
    assert form.panel_area is None
    assert form.measured_current == 8.2
    assert form.measured_voltage is None
    assert form.measured_power is None
    assert form.specifications == {SpecificationKey.RATED_EFFICIENCY: 18.5}


def test_report_form_measured_power():
    """Test measured power is voltage times current"""
    from pv_eval.config.data_formats import DegradationReportForm

    form = DegradationReportForm(measured_voltage="37", measured_current="10", model_number="SP-400")

    assert form.measured_power == pytest.approx(370.0)
    assert form.model_number == "SP-400"


def test_test_record_from_dict():
    """Test building test records from exchange data"""
    from datetime import datetime
    from pv_eval.config.data_formats import DataFormats

    formats = DataFormats()

    record = formats.test_record_from_dict({"timestamp": "2024-05-01T12:00:00", "power_W": 310.5})
    assert record.timestamp == datetime(2024, 5, 1, 12, 0, 0)
    assert record.power_output == 310.5

    record = formats.test_record_from_dict({"voltage_V": 30, "current_A": 9})
    assert record.power_output == pytest.approx(270.0)

    with pytest.raises(ValueError):
        formats.test_record_from_dict({"voltage_V": 30})


def test_test_record_offset_timestamps():
    """Test that timestamps with a UTC offset become naive local time"""
    from datetime import datetime, timezone
    from pv_eval.config.data_formats import DataFormats, to_local_naive

    formats = DataFormats()

    record = formats.test_record_from_dict({"timestamp": "2024-01-01T00:00:00Z", "power_W": 300})
    expected = datetime(2024, 1, 1, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert record.timestamp.tzinfo is None
    assert record.timestamp == expected

    naive = datetime(2024, 1, 1, 12, 0, 0)
    assert to_local_naive(naive) is naive


def test_schema_info():
    """Test data schema information"""
    from pv_eval.config.data_formats import DataFormats

    formats = DataFormats()
    info = formats.get_schema_info("test")

    assert info["fields"] == ["timestamp", "power_W"]
    assert info["field_types"]["power_W"] == "float"
    assert formats.validate_data("profile", {"panel_id": "p", "generated_on": "2024-01-01T00:00:00"})
    assert not formats.validate_data("test", [{"timestamp": "2024-01-01T00:00:00"}])

    with pytest.raises(ValueError):
        formats.get_schema_info("orbital")


def test_import_dependencies():
    """Test that all required modules can be imported"""
    try:
        # Core modules
        import numpy as np
        import pandas as pd
        import yaml
        import flask

        # Project modules
        from pv_eval import PVPanel, DegradationEstimator, ProfileGenerator, InsufficientDataError
        from pv_eval.main import PanelEvaluationModel
        from pv_eval.reporting import DataExporter, ReportBuilder
        from pv_eval.api import create_app

        assert True

    except ImportError as e:
        pytest.fail(f"Failed to import required module: {e}")


if __name__ == "__main__":
    # Run tests directly
    pytest.main([__file__, "-v"])
