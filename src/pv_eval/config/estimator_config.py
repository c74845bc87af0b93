"""
Estimator Configuration Module

This module handles configuration, validation, and management of the
degradation estimator settings. It provides a validated configuration model,
JSON/YAML loading and saving, and named presets for common reference
conditions.

References:
- IEC 61215 Standard Test Conditions (1000 W/m², 25 °C, AM1.5)
- IEC 61853-1 Nominal Operating Cell Temperature conditions (800 W/m²)
- Pydantic configuration management
"""

import copy
import json
import yaml
from typing import Dict, List, Optional, Any
from datetime import datetime
from pathlib import Path
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class LatestTestPolicy(str, Enum):
    """How the estimator picks the latest test record"""
    APPENDED = "appended"       # Last record appended to the log
    TIMESTAMP = "timestamp"     # Record with the greatest timestamp


class EstimatorConfig(BaseModel):
    """Degradation estimator configuration"""
    model_config = ConfigDict(extra="forbid")

    name: str = Field("STC", description="Configuration name")
    description: Optional[str] = Field(None, description="Configuration description")
    reference_irradiance_wm2: float = Field(
        1000.0, gt=0, description="Irradiance the rated output is referred to (W/m²)"
    )
    latest_test_policy: LatestTestPolicy = Field(
        LatestTestPolicy.APPENDED, description="Selection rule for the latest test record"
    )
    created_at: datetime = Field(default_factory=datetime.now)


class ConfigManager:
    """
    Estimator configuration management system.

    Features:
    - JSON/YAML configuration loading and validation
    - Pre-defined reference condition presets
    - Preset-based creation with overrides
    - Configuration export
    """

    def __init__(self):
        """Initialize configuration manager"""
        self.config: Optional[EstimatorConfig] = None
        self.presets = self._load_default_presets()

    def load_config(self, filepath: str) -> EstimatorConfig:
        """
        Load configuration from file

        Args:
            filepath: Path to configuration file (.json, .yaml or .yml)

        Returns:
            Validated estimator configuration
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)

            self.config = EstimatorConfig(**(data or {}))
            return self.config

        except (ValidationError, json.JSONDecodeError, yaml.YAMLError, TypeError) as e:
            raise ValueError(f"Error loading configuration: {e}")

    def save_config(self, config: EstimatorConfig, filepath: str, format: str = "json"):
        """
        Save configuration to file

        Args:
            config: Configuration to save
            filepath: Output file path
            format: Output format ("json" or "yaml")
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(mode="json")

        with open(path, 'w', encoding='utf-8') as f:
            if format.lower() in ['yaml', 'yml']:
                yaml.safe_dump(data, f, default_flow_style=False, indent=2)
            else:
                json.dump(data, f, indent=2)

    def create_from_preset(self, preset_name: str, **kwargs) -> EstimatorConfig:
        """
        Create configuration from a named preset

        Args:
            preset_name: Name of preset
            **kwargs: Fields to override

        Returns:
            Validated configuration
        """
        if preset_name not in self.presets:
            raise ValueError(f"Preset not found: {preset_name}")

        preset_data = copy.deepcopy(self.presets[preset_name])
        preset_data.update(kwargs)

        return EstimatorConfig(**preset_data)

    def validate_config(self, config_data: Dict) -> EstimatorConfig:
        """
        Validate configuration data

        Args:
            config_data: Configuration data dictionary

        Returns:
            Validated configuration
        """
        return EstimatorConfig(**config_data)

    def get_config_schema(self) -> Dict:
        """JSON schema for the configuration"""
        return EstimatorConfig.model_json_schema()

    def list_presets(self) -> List[str]:
        """List available preset names"""
        return list(self.presets.keys())

    def _load_default_presets(self) -> Dict[str, Dict[str, Any]]:
        """Load default reference condition presets"""
        return {
            "STC": {
                "name": "STC",
                "description": "Standard Test Conditions, nameplate reference",
                "reference_irradiance_wm2": 1000.0,
                "latest_test_policy": "appended"
            },
            "NOCT": {
                "name": "NOCT",
                "description": "Nominal Operating Cell Temperature irradiance",
                "reference_irradiance_wm2": 800.0,
                "latest_test_policy": "appended"
            },
            "LOW_LIGHT": {
                "name": "LOW_LIGHT",
                "description": "Low irradiance field conditions",
                "reference_irradiance_wm2": 200.0,
                "latest_test_policy": "appended"
            }
        }

    def generate_config_summary(self, config: EstimatorConfig) -> Dict:
        """
        Generate configuration summary

        Args:
            config: Estimator configuration

        Returns:
            Configuration summary dictionary
        """
        return {
            'name': config.name,
            'description': config.description,
            'reference_irradiance_wm2': config.reference_irradiance_wm2,
            'latest_test_policy': config.latest_test_policy.value
        }
