"""
Park Fan Sync - Flask App Unit Tests

Tests the documentation application:
- App creation and configuration
- README served as HTML and markdown
- OpenAPI document (present / missing)
- Health check with the database mocked
"""

from unittest.mock import patch

import pytest
from parkfan.api.app import create_app
from parkfan.utils.readme_cache import ReadmeCache


@pytest.fixture
def readme_file(tmp_path):
    readme = tmp_path / "README.md"
    readme.write_text("# Park Fan Sync\nSyncs <parks>.", encoding="utf-8")
    return readme


@pytest.fixture
def client(readme_file, tmp_path):
    openapi = tmp_path / "openapi.yaml"
    openapi.write_text("openapi: 3.0.3\n", encoding="utf-8")
    app = create_app(readme_cache=ReadmeCache(str(readme_file)), openapi_path=str(openapi))
    app.config['TESTING'] = True
    return app.test_client()


class TestCreateApp:

    def test_configuration(self, readme_file):
        app = create_app(readme_cache=ReadmeCache(str(readme_file)))

        assert 'ENV' in app.config
        assert 'DEBUG' in app.config
        assert 'SECRET_KEY' in app.config

    def test_cors_headers(self, client):
        """Any origin is answered with the wildcard, not an echo of the Origin header."""
        response = client.get('/readme', headers={'Origin': 'https://park.fan'})

        assert response.headers.get('Access-Control-Allow-Origin') == '*'


class TestDocumentation:

    def test_index_serves_escaped_html(self, client):
        response = client.get('/')

        assert response.status_code == 200
        assert response.mimetype == 'text/html'
        body = response.get_data(as_text=True)
        assert "# Park Fan Sync<br>" in body
        assert "&lt;parks&gt;" in body

    def test_readme_serves_markdown(self, client):
        response = client.get('/readme')

        assert response.status_code == 200
        assert response.mimetype == 'text/markdown'
        assert response.get_data(as_text=True) == "# Park Fan Sync\nSyncs <parks>."

    def test_openapi(self, client):
        response = client.get('/openapi.yaml')

        assert response.status_code == 200
        assert response.mimetype == 'application/x-yaml'
        assert response.get_data(as_text=True).startswith("openapi:")

    def test_openapi_missing(self, readme_file, tmp_path):
        app = create_app(readme_cache=ReadmeCache(str(readme_file)), openapi_path=str(tmp_path / "nope.yaml"))

        response = app.test_client().get('/openapi.yaml')

        assert response.status_code == 404


class TestHealthCheck:

    def test_healthy(self, client):
        with patch('parkfan.api.app.test_database_connection', return_value=True):
            response = client.get('/api/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['checks']['database']['status'] == 'healthy'

    def test_unhealthy(self, client):
        with patch('parkfan.api.app.test_database_connection', return_value=False):
            response = client.get('/api/health')

        assert response.status_code == 503
        assert response.get_json()['status'] == 'unhealthy'
