"""
API Server
==========

Flask-based REST API server for the PV panel degradation estimator.

Panels created through the API are held in memory for the lifetime of the
server process.

Routes:
    GET /api/health - Health check
    GET /api/config - Active estimator configuration
    POST /api/report - One-shot degradation report from form inputs
    POST /api/panels - Create panel
    GET /api/panels/{id} - Panel summary
    POST /api/panels/{id}/specifications - Merge specifications
    POST /api/panels/{id}/tests - Record a test
    POST /api/panels/{id}/profiles - Generate a profile
    GET /api/panels/{id}/export - Download panel history (json, or csv with table=tests|profiles)
"""

import io
import logging
import tempfile
from datetime import datetime
from typing import Optional

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from pydantic import ValidationError

from ..config.estimator_config import EstimatorConfig
from ..degradation.estimator import InsufficientDataError
from ..main import PanelEvaluationModel
from ..panel.pv_panel import SpecificationKey
from ..reporting.data_export import DataExporter
from ..reporting.degradation_report import finite_or_none

logger = logging.getLogger(__name__)

# Order matches the files written by DataExporter.export_csv
CSV_TABLES = ('tests', 'profiles')


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


def _profile_data(profile) -> dict:
    return {
        'panel_id': profile.panel_id,
        'degradation': finite_or_none(profile.degradation),
        'degradation_percent': finite_or_none(profile.degradation_percent),
        'performance_percent': finite_or_none(profile.performance_percent),
        'generated_on': profile.generated_on.isoformat()
    }


def create_app(config: Optional[EstimatorConfig] = None,
               model: Optional[PanelEvaluationModel] = None) -> Flask:
    """
    Create and configure Flask app

    Args:
        config: Estimator configuration for a new model
        model: Existing evaluation model to serve

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend

    evaluation = model or PanelEvaluationModel(config)
    app.config['EVALUATION_MODEL'] = evaluation

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now().isoformat(),
            'version': '1.0.0'
        })

    @app.route('/api/config', methods=['GET'])
    def get_config():
        """Active estimator configuration"""
        return jsonify({
            'success': True,
            'config': evaluation.config_manager.generate_config_summary(evaluation.config),
            'presets': evaluation.config_manager.list_presets()
        })

    @app.route('/api/report', methods=['POST'])
    def create_report():
        """Run the one-shot report workflow on form inputs"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error('No data provided', 400)

        report = evaluation.generate_report(data)
        return jsonify(report.to_dict()), (200 if report.success else 422)

    @app.route('/api/panels', methods=['POST'])
    def create_panel():
        """Create a panel"""
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return _error('No data provided', 400)

        # Validate specifications before the panel is registered
        specifications = data.get('specifications') or {}
        try:
            specifications = {SpecificationKey.coerce(key): float(value)
                              for key, value in specifications.items()}
        except (AttributeError, TypeError, ValueError) as e:
            return _error(f'Invalid specifications: {e}', 400)

        try:
            panel = evaluation.create_panel(model_number=data.get('model_number'),
                                            panel_id=data.get('panel_id'),
                                            specifications=specifications)
        except ValueError as e:
            return _error(str(e), 409)

        return jsonify({
            'success': True,
            'panel_id': panel.panel_id,
            'model_number': panel.model_number
        }), 201

    @app.route('/api/panels/<panel_id>', methods=['GET'])
    def get_panel(panel_id: str):
        """Panel summary"""
        try:
            summary = evaluation.get_summary(panel_id)
        except KeyError:
            return _error(f'Panel not found: {panel_id}', 404)

        return jsonify({'success': True, 'summary': summary})

    @app.route('/api/panels/<panel_id>/specifications', methods=['POST'])
    def record_specifications(panel_id: str):
        """Merge specifications into a panel"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not data:
            return _error('No specifications provided', 400)

        try:
            specifications = evaluation.record_specifications(panel_id, data)
        except KeyError:
            return _error(f'Panel not found: {panel_id}', 404)
        except (TypeError, ValueError) as e:
            return _error(str(e), 400)

        return jsonify({
            'success': True,
            'specifications': {key.name: value for key, value in specifications.items()}
        })

    @app.route('/api/panels/<panel_id>/tests', methods=['POST'])
    def record_test(panel_id: str):
        """Record a test from power_W, or voltage_V and current_A"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error('No data provided', 400)

        try:
            panel = evaluation.get_panel(panel_id)
        except KeyError:
            return _error(f'Panel not found: {panel_id}', 404)

        try:
            test = evaluation.data_formats.test_record_from_dict(data)
        except (ValidationError, TypeError, ValueError) as e:
            return _error(f'Invalid test record: {e}', 400)

        panel.record_test(test)
        return jsonify({
            'success': True,
            'test': {'timestamp': test.timestamp.isoformat(), 'power_W': test.power_output},
            'total_tests': len(panel.recorded_tests)
        }), 201

    @app.route('/api/panels/<panel_id>/profiles', methods=['POST'])
    def generate_profile(panel_id: str):
        """Generate a degradation profile"""
        try:
            profile = evaluation.generate_profile(panel_id)
        except KeyError:
            return _error(f'Panel not found: {panel_id}', 404)
        except InsufficientDataError as e:
            return _error(str(e), 422)

        return jsonify({'success': True, 'profile': _profile_data(profile)}), 201

    @app.route('/api/panels/<panel_id>/export', methods=['GET'])
    def export_panel(panel_id: str):
        """Export panel history as JSON, or one CSV table (tests or profiles)"""
        export_format = request.args.get('format', 'json').lower()
        if export_format not in DataExporter.SUPPORTED_FORMATS:
            return _error(f'Unsupported export format: {export_format}', 400)

        table = request.args.get('table', 'profiles').lower()
        if export_format == 'csv' and table not in CSV_TABLES:
            return _error(f'Unsupported export table: {table}', 400)

        try:
            panel = evaluation.get_panel(panel_id)
        except KeyError:
            return _error(f'Panel not found: {panel_id}', 404)

        with tempfile.TemporaryDirectory(prefix="pv_eval_") as export_dir:
            exporter = DataExporter(export_dir)
            if export_format == 'json':
                file_path = exporter.export_json(panel)[0]
                download_name = f'panel_{panel_id[:8]}.json'
            else:
                file_path = exporter.export_csv(panel)[CSV_TABLES.index(table)]
                download_name = f'panel_{panel_id[:8]}_{table}.csv'
            payload = io.BytesIO(file_path.read_bytes())

        return send_file(
            payload,
            mimetype='application/json' if export_format == 'json' else 'text/csv',
            as_attachment=True,
            download_name=download_name
        )

    return app


def run_server(host='127.0.0.1', port=5000, debug=False):
    """Run the API server"""
    logging.basicConfig(level=logging.INFO)
    create_app().run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_server(debug=True)
