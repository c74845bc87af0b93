"""
API tests for the PV panel degradation estimator REST server.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pv_eval.api.server import create_app
from pv_eval.config.estimator_config import EstimatorConfig


@pytest.fixture
def client():
    app = create_app()
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


class TestHealthAndConfig:
    """Test service endpoints"""

    def test_health(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_config(self):
        app = create_app(EstimatorConfig(name="field", reference_irradiance_wm2=900))
        response = app.test_client().get('/api/config')

        data = response.get_json()
        assert data['config']['name'] == 'field'
        assert data['config']['reference_irradiance_wm2'] == 900.0
        assert 'STC' in data['presets']


class TestReportEndpoint:
    """Test the one-shot report endpoint"""

    def test_report_success(self, client):
        response = client.post('/api/report', json={
            'model_number': 'SP-400',
            'rated_efficiency': '20',
            'panel_area': '2',
            'measured_voltage': '37',
            'measured_current': '10'
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['degradation_percent'] == 7.5
        assert data['performance_percent'] == 92.5
        assert data['model_number'] == 'SP-400'

    def test_report_insufficient_data(self, client):
        response = client.post('/api/report', json={'rated_efficiency': '20', 'panel_area': '2'})

        assert response.status_code == 422
        data = response.get_json()
        assert data['success'] is False
        assert data['error'] == "There was insufficient data about the solar panel to generate a profile."

    def test_report_without_body(self, client):
        response = client.post('/api/report', data='not json', content_type='text/plain')

        assert response.status_code == 400


class TestPanelEndpoints:
    """Test panel management endpoints"""

    def create_panel(self, client, **payload):
        response = client.post('/api/panels', json=payload)
        assert response.status_code == 201
        return response.get_json()['panel_id']

    def test_full_workflow(self, client):
        panel_id = self.create_panel(client, model_number='SP-400')

        response = client.post(f'/api/panels/{panel_id}/specifications',
                               json={'MODULE_AREA': 2.0, 'PMAX': 400})
        assert response.status_code == 200
        assert response.get_json()['specifications'] == {'MODULE_AREA': 2.0, 'PMAX': 400.0}

        response = client.post(f'/api/panels/{panel_id}/tests',
                               json={'voltage_V': 37, 'current_A': 10})
        assert response.status_code == 201
        assert response.get_json()['test']['power_W'] == pytest.approx(370.0)

        response = client.post(f'/api/panels/{panel_id}/profiles')
        assert response.status_code == 201
        assert response.get_json()['profile']['degradation'] == pytest.approx(0.075)

        summary = client.get(f'/api/panels/{panel_id}').get_json()['summary']
        assert summary['profiles']['count'] == 1
        assert summary['panel']['model_number'] == 'SP-400'

    def test_profile_insufficient_data(self, client):
        panel_id = self.create_panel(client, specifications={'RATED_EFFICIENCY': 20})

        response = client.post(f'/api/panels/{panel_id}/profiles')

        assert response.status_code == 422
        summary = client.get(f'/api/panels/{panel_id}').get_json()['summary']
        assert summary['profiles']['count'] == 0

    def test_duplicate_panel(self, client):
        self.create_panel(client, panel_id='p1')

        response = client.post('/api/panels', json={'panel_id': 'p1'})
        assert response.status_code == 409

    def test_unknown_panel(self, client):
        assert client.get('/api/panels/missing').status_code == 404
        assert client.post('/api/panels/missing/profiles').status_code == 404
        assert client.post('/api/panels/missing/tests', json={'power_W': 1}).status_code == 404
        assert client.post('/api/panels/missing/specifications',
                           json={'PMAX': 1}).status_code == 404

    def test_invalid_inputs(self, client):
        panel_id = self.create_panel(client)

        response = client.post(f'/api/panels/{panel_id}/specifications', json={'irradiance': 900})
        assert response.status_code == 400

        response = client.post(f'/api/panels/{panel_id}/tests', json={'voltage_V': 37})
        assert response.status_code == 400

    def test_export(self, client):
        panel_id = self.create_panel(client, specifications={'MODULE_AREA': 2.0, 'RATED_EFFICIENCY': 20})
        client.post(f'/api/panels/{panel_id}/tests', json={'power_W': 370})
        client.post(f'/api/panels/{panel_id}/profiles')

        response = client.get(f'/api/panels/{panel_id}/export?format=json')
        assert response.status_code == 200
        assert response.get_json()['panel']['panel_id'] == panel_id

        response = client.get(f'/api/panels/{panel_id}/export?format=csv')
        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert b'degradation' in response.data

        response = client.get(f'/api/panels/{panel_id}/export?format=csv&table=tests')
        assert response.status_code == 200
        assert b'power_W' in response.data
        assert b'370' in response.data
        assert '_tests.csv' in response.headers['Content-Disposition']

        response = client.get(f'/api/panels/{panel_id}/export?format=csv&table=everything')
        assert response.status_code == 400

        response = client.get(f'/api/panels/{panel_id}/export?format=xlsx')
        assert response.status_code == 400

    def test_export_leaves_no_files(self, client, tmp_path, monkeypatch):
        import tempfile

        panel_id = self.create_panel(client)
        client.post(f'/api/panels/{panel_id}/tests', json={'power_W': 370})
        monkeypatch.setattr(tempfile, 'tempdir', str(tmp_path))

        for query in ('format=json', 'format=csv&table=tests', 'format=csv&table=profiles'):
            response = client.get(f'/api/panels/{panel_id}/export?{query}')
            assert response.status_code == 200
            response.close()

        assert list(tmp_path.iterdir()) == []

    def test_create_panel_requires_object_body(self, client):
        assert client.post('/api/panels', json=['p1']).status_code == 400
        assert client.post('/api/panels', json=42).status_code == 400

        response = client.post('/api/panels', data='not json', content_type='text/plain')
        assert response.status_code == 201

    def test_create_panel_retry_after_rejected_specifications(self, client):
        response = client.post('/api/panels', json={'panel_id': 'p1', 'specifications': {'irradiance': 900}})
        assert response.status_code == 400

        response = client.post('/api/panels', json={'panel_id': 'p1', 'specifications': ['MODULE_AREA']})
        assert response.status_code == 400

        self.create_panel(client, panel_id='p1', specifications={'MODULE_AREA': 2.0})
        summary = client.get('/api/panels/p1').get_json()['summary']
        assert summary['panel']['specifications'] == {'MODULE_AREA': 2.0}

    def test_mixed_timestamp_offsets(self, client):
        panel_id = self.create_panel(client, specifications={'MODULE_AREA': 2.0, 'RATED_EFFICIENCY': 20})

        assert client.post(f'/api/panels/{panel_id}/tests',
                           json={'power_W': 300, 'timestamp': '2024-01-01T00:00:00Z'}).status_code == 201
        assert client.post(f'/api/panels/{panel_id}/tests', json={'power_W': 310}).status_code == 201

        response = client.get(f'/api/panels/{panel_id}')
        assert response.status_code == 200
        assert response.get_json()['summary']['tests']['total_records'] == 2

    def test_mixed_timestamp_offsets_with_timestamp_policy(self):
        client = create_app(EstimatorConfig(latest_test_policy="timestamp")).test_client()
        response = client.post('/api/panels', json={'specifications': {'MODULE_AREA': 2.0, 'RATED_EFFICIENCY': 20}})
        panel_id = response.get_json()['panel_id']

        client.post(f'/api/panels/{panel_id}/tests', json={'power_W': 380, 'timestamp': '2024-01-01T00:00:00+02:00'})
        client.post(f'/api/panels/{panel_id}/tests', json={'power_W': 370, 'timestamp': '2024-06-01T12:00:00'})

        response = client.post(f'/api/panels/{panel_id}/profiles')
        assert response.status_code == 201
        assert response.get_json()['profile']['degradation'] == pytest.approx(0.075)

    def test_non_finite_degradation_is_null(self, client):
        import json

        panel_id = self.create_panel(client, specifications={'MODULE_AREA': 0, 'RATED_EFFICIENCY': 20})
        client.post(f'/api/panels/{panel_id}/tests', json={'power_W': 100})

        response = client.post(f'/api/panels/{panel_id}/profiles')
        assert response.status_code == 201
        profile = json.loads(response.data)['profile']
        assert profile['degradation'] is None
        assert profile['performance_percent'] is None

        summary = json.loads(client.get(f'/api/panels/{panel_id}').data)['summary']
        assert summary['profiles']['latest']['degradation'] is None
