"""
Tests for health check endpoints.
"""

import unicodedata

from config import LINTER_VERSION


def test_health_endpoint_returns_200(client):
    """Health endpoint should report status and capabilities."""
    response = client.get('/api/health')

    assert response.status_code == 200
    data = response.get_json()

    assert data['status'] == 'healthy'
    assert data['version'] == LINTER_VERSION
    assert data['capabilities']['diff_library'] is True


def test_version_endpoint_returns_200(client):
    """Version endpoint should return version, Unicode data version and build info."""
    response = client.get('/api/version')

    assert response.status_code == 200
    data = response.get_json()

    assert data['version'] == LINTER_VERSION
    assert data['unicodeVersion'] == unicodedata.unidata_version
    assert 'buildTime' in data
    assert data['environment'] == 'testing'


def test_health_rejects_post(client):
    assert client.post('/api/health').status_code == 405
