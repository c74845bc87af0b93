"""
Data Export
===========

Handles export of a panel's test log and profile history in CSV and JSON
formats for analysis and reporting.

Classes:
    DataExporter: Main data export class
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config.data_formats import DataFormats
from ..panel.pv_panel import PVPanel

logger = logging.getLogger(__name__)


class DataExporter:
    """Main data export class"""

    SUPPORTED_FORMATS = ("csv", "json")

    def __init__(self, export_dir: Union[str, Path] = "exports"):
        """
        Initialize data exporter

        Args:
            export_dir: Directory exported files are written to
        """
        self.export_dir = Path(export_dir)
        self.data_formats = DataFormats()

    def _ensure_dir(self):
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def _default_stem(self, panel: PVPanel) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"panel_{panel.panel_id[:8]}_{timestamp}"

    def export_csv(self, panel: PVPanel, filename: Optional[str] = None) -> List[Path]:
        """
        Export test log and profile history to CSV

        Two files are written, <stem>_tests.csv and <stem>_profiles.csv.

        Args:
            panel: Panel to export
            filename: Optional custom file stem

        Returns:
            Paths of the exported files
        """
        self._ensure_dir()
        stem = filename or self._default_stem(panel)

        tests_path = self.export_dir / f"{stem}_tests.csv"
        profiles_path = self.export_dir / f"{stem}_profiles.csv"

        self.data_formats.tests_to_dataframe(panel).to_csv(tests_path, index=False)
        self.data_formats.profiles_to_dataframe(panel).to_csv(profiles_path, index=False)

        logger.info(f"Exported panel {panel.panel_id} to {tests_path} and {profiles_path}")
        return [tests_path, profiles_path]

    def export_json(self, panel: PVPanel, filename: Optional[str] = None) -> List[Path]:
        """
        Export panel specifications, test log and profile history to JSON

        Args:
            panel: Panel to export
            filename: Optional custom file stem

        Returns:
            Path of the exported file, as a one-element list
        """
        self._ensure_dir()
        stem = filename or self._default_stem(panel)
        filepath = self.export_dir / f"{stem}.json"

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.panel_to_dict(panel), f, indent=2, default=str)

        logger.info(f"Exported panel {panel.panel_id} to {filepath}")
        return [filepath]

    def export(self, panel: PVPanel, format: str = "csv", filename: Optional[str] = None) -> List[Path]:
        """Export in the given format ("csv" or "json")"""
        format = format.lower()
        if format == "csv":
            return self.export_csv(panel, filename)
        elif format == "json":
            return self.export_json(panel, filename)
        raise ValueError(f"Unsupported export format: {format}")

    def panel_to_dict(self, panel: PVPanel) -> Dict:
        """JSON-serializable view of a panel"""
        tests = self.data_formats.tests_to_dataframe(panel)
        profiles = self.data_formats.profiles_to_dataframe(panel)

        return {
            'export_info': {
                'export_time': datetime.now().isoformat(),
                'format_version': '1.0'
            },
            'panel': {
                'panel_id': panel.panel_id,
                'model_number': panel.model_number,
                'specifications': {key.name: value for key, value in panel.specifications.items()}
            },
            'tests': json.loads(tests.to_json(orient='records', date_format='iso')),
            'profiles': json.loads(profiles.to_json(orient='records', date_format='iso'))
        }
