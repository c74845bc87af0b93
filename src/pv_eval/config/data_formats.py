"""
Data Formats Module

This module defines standardized data formats for the inputs and outputs of
the degradation estimator: the raw report form a user fills in, the test
record and profile exchange formats, and conversion of panel logs to tabular
data.
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Union, Any
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..panel.pv_panel import PVPanel, PVPanelTest, SpecificationKey


class DataVersion(str, Enum):
    """Data format versioning"""
    V1_0 = "1.0"


@dataclass
class DataSchema:
    """Data schema definition"""
    name: str
    version: DataVersion
    fields: Dict[str, type]
    required_fields: List[str]
    description: str
    units: Dict[str, str] = field(default_factory=dict)


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a user-entered numeric value

    Blank or non-numeric input yields None instead of an error.

    Args:
        value: Raw value, usually a string

    Returns:
        Parsed float or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def to_local_naive(timestamp: datetime) -> datetime:
    """Offset-aware timestamps converted to naive local time, naive ones unchanged"""
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        return timestamp
    return timestamp.astimezone().replace(tzinfo=None)


class DegradationReportForm(BaseModel):
    """Raw inputs collected for a single degradation report"""
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model_number: Optional[str] = Field(None, description="Panel model number")
    rated_efficiency: Optional[float] = Field(None, description="Rated efficiency (%)")
    panel_area: Optional[float] = Field(None, description="Panel area (m²)")
    measured_current: Optional[float] = Field(None, description="Measured current (A)")
    measured_voltage: Optional[float] = Field(None, description="Measured voltage (V)")
    rated_pmax: Optional[float] = Field(None, description="Rated Pmax (W), used when efficiency is missing")

    @field_validator('rated_efficiency', 'panel_area', 'measured_current',
                     'measured_voltage', 'rated_pmax', mode='before')
    @classmethod
    def drop_non_numeric(cls, v):
        return parse_number(v)

    @field_validator('model_number', mode='before')
    @classmethod
    def blank_model_number(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def specifications(self) -> Dict[SpecificationKey, float]:
        """Specification values present on the form"""
        candidates = {
            SpecificationKey.RATED_EFFICIENCY: self.rated_efficiency,
            SpecificationKey.MODULE_AREA: self.panel_area,
            SpecificationKey.PMAX: self.rated_pmax,
        }
        return {key: value for key, value in candidates.items() if value is not None}

    @property
    def measured_power(self) -> Optional[float]:
        """Measured power V × I, None unless both were given"""
        if self.measured_voltage is None or self.measured_current is None:
            return None
        return self.measured_voltage * self.measured_current


class TestRecordFormat(BaseModel):
    """Standard format for test record data"""
    timestamp: datetime = Field(..., description="Measurement time")
    power_W: float = Field(..., description="Measured power output (W)")


class ProfileFormat(BaseModel):
    """Standard format for profile data"""
    panel_id: str = Field(..., description="Panel identifier")
    degradation: Optional[float] = Field(None, description="Degradation fraction")
    generated_on: datetime = Field(..., description="Generation time")


class DataFormats:
    """
    Standardized data formats manager.

    Features:
    - Standardized data schemas
    - Data validation
    - Panel log conversion to pandas DataFrames
    - Schema information
    """

    def __init__(self):
        """Initialize data formats manager"""
        self.schemas = self._define_schemas()
        self.validators = {
            "test": TestRecordFormat,
            "profile": ProfileFormat,
            "report_form": DegradationReportForm
        }

    def _define_schemas(self) -> Dict[str, DataSchema]:
        """Define standard data schemas"""
        return {
            "test": DataSchema(
                name="test_record_data",
                version=DataVersion.V1_0,
                fields={"timestamp": datetime, "power_W": float},
                required_fields=["timestamp", "power_W"],
                description="Field power measurements of a panel",
                units={"power": "W"}
            ),
            "profile": DataSchema(
                name="profile_data",
                version=DataVersion.V1_0,
                fields={"panel_id": str, "degradation": float, "generated_on": datetime},
                required_fields=["panel_id", "generated_on"],
                description="Generated degradation profiles",
                units={"degradation": "fraction"}
            ),
            "report_form": DataSchema(
                name="report_form_data",
                version=DataVersion.V1_0,
                fields={
                    "model_number": str,
                    "rated_efficiency": float,
                    "panel_area": float,
                    "measured_current": float,
                    "measured_voltage": float,
                    "rated_pmax": float
                },
                required_fields=[],
                description="Raw inputs for a degradation report",
                units={
                    "rated_efficiency": "%",
                    "panel_area": "m²",
                    "measured_current": "A",
                    "measured_voltage": "V",
                    "rated_pmax": "W"
                }
            )
        }

    def validate_data(self, data_type: str, data: Union[Dict, List]) -> bool:
        """
        Validate data against schema

        Args:
            data_type: Type of data to validate
            data: Data to validate (dict or list of dicts)

        Returns:
            True if valid
        """
        if data_type not in self.validators:
            raise ValueError(f"Unknown data type: {data_type}")

        validator = self.validators[data_type]

        try:
            if isinstance(data, list):
                for item in data:
                    validator(**item)
            else:
                validator(**data)
            return True
        except ValidationError:
            return False

    def parse_report_form(self, raw: Dict[str, Any]) -> DegradationReportForm:
        """Parse raw form values, dropping anything non-numeric"""
        return DegradationReportForm(**raw)

    def test_record_from_dict(self, data: Dict[str, Any]) -> PVPanelTest:
        """
        Build a test record from exchange data

        Accepts either power_W directly, or voltage_V and current_A.
        A missing timestamp means now. Timestamps with a UTC offset are
        converted to naive local time.
        """
        data = dict(data)
        if 'power_W' not in data and 'voltage_V' in data and 'current_A' in data:
            data['power_W'] = float(data['voltage_V']) * float(data['current_A'])
        data.setdefault('timestamp', datetime.now())

        record = TestRecordFormat(**{k: data[k] for k in ('timestamp', 'power_W') if k in data})
        return PVPanelTest(timestamp=to_local_naive(record.timestamp), power_output=record.power_W)

    def tests_to_dataframe(self, panel: PVPanel) -> pd.DataFrame:
        """Test log of a panel as a DataFrame, in append order"""
        rows = [{
            'panel_id': panel.panel_id,
            'timestamp': test.timestamp,
            'power_W': test.power_output
        } for test in panel.recorded_tests]
        return pd.DataFrame(rows, columns=['panel_id', 'timestamp', 'power_W'])

    def profiles_to_dataframe(self, panel: PVPanel) -> pd.DataFrame:
        """Profile history of a panel as a DataFrame"""
        columns = ['panel_id', 'generated_on', 'degradation', 'degradation_percent', 'performance_percent']
        rows = [{
            'panel_id': profile.panel_id,
            'generated_on': profile.generated_on,
            'degradation': profile.degradation,
            'degradation_percent': profile.degradation_percent,
            'performance_percent': profile.performance_percent
        } for profile in panel.recorded_profiles]
        return pd.DataFrame(rows, columns=columns)

    def get_test_statistics(self, panel: PVPanel) -> Dict:
        """
        Calculate statistics of the measured power in a panel's test log

        Args:
            panel: Panel to analyze

        Returns:
            Statistics dictionary, empty when no tests are recorded
        """
        tests = panel.recorded_tests
        if not tests:
            return {}

        powers = np.array([test.power_output for test in tests], dtype=float)

        return {
            'total_records': len(tests),
            'time_range': {
                'start': min(test.timestamp for test in tests).isoformat(),
                'end': max(test.timestamp for test in tests).isoformat()
            },
            'power_W': {
                'mean': float(np.mean(powers)),
                'std': float(np.std(powers)),
                'min': float(np.min(powers)),
                'max': float(np.max(powers)),
                'latest': float(powers[-1])
            }
        }

    def get_schema_info(self, data_type: str) -> Dict:
        """
        Get schema information for data type

        Args:
            data_type: Type of data

        Returns:
            Schema information dictionary
        """
        if data_type not in self.schemas:
            raise ValueError(f"Unknown data type: {data_type}")

        schema = self.schemas[data_type]

        return {
            "name": schema.name,
            "version": schema.version.value,
            "description": schema.description,
            "fields": list(schema.fields.keys()),
            "field_types": {k: v.__name__ for k, v in schema.fields.items()},
            "required_fields": schema.required_fields,
            "units": schema.units
        }
