"""
Park Fan Sync - Flask Documentation Application
Serves the README, the OpenAPI document and a health check.
"""

import os
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, g, jsonify, request
from flask_cors import CORS

from ..database.connection import test_database_connection
from ..utils.config import (
    FLASK_ENV, FLASK_DEBUG, SECRET_KEY, README_PATH, OPENAPI_PATH, README_REFRESH_SECONDS
)
from ..utils.logger import logger, log_api_request
from ..utils.readme_cache import ReadmeCache


def create_app(readme_cache: Optional[ReadmeCache] = None, openapi_path: str = OPENAPI_PATH) -> Flask:
    """
    Create and configure Flask application.

    Args:
        readme_cache: README cache to serve from (defaults to README_PATH)
        openapi_path: Location of openapi.yaml

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    # Configuration
    app.config['ENV'] = FLASK_ENV
    app.config['DEBUG'] = FLASK_DEBUG
    app.config['SECRET_KEY'] = SECRET_KEY

    CORS(app, resources={
        r"/*": {
            "origins": "*",
            "methods": ["GET", "OPTIONS"],
            # Literal "*" rather than echoing the request Origin
            "send_wildcard": True,
        }
    })

    readme = readme_cache or ReadmeCache(README_PATH, refresh_seconds=README_REFRESH_SECONDS)

    @app.before_request
    def start_timer():
        g.request_started = time.time()

    @app.after_request
    def log_request(response):
        started = getattr(g, 'request_started', None)
        if started is not None:
            log_api_request(
                request.method, request.path, response.status_code,
                round((time.time() - started) * 1000, 2)
            )
        return response

    @app.route('/')
    def index():
        """README rendered as escaped HTML."""
        return Response(readme.get_html(), mimetype='text/html')

    @app.route('/readme')
    def readme_markdown():
        """Raw README markdown."""
        return Response(readme.get_markdown(), mimetype='text/markdown')

    @app.route('/openapi.yaml')
    def openapi_spec():
        if not os.path.exists(openapi_path):
            return Response('OpenAPI specification not found', status=404, mimetype='text/plain')
        try:
            with open(openapi_path, encoding='utf-8') as f:
                return Response(f.read(), mimetype='application/x-yaml')
        except OSError as e:
            logger.error(f"Error reading OpenAPI specification: {e}")
            return Response('Error reading OpenAPI specification', status=500, mimetype='text/plain')

    @app.route('/api/health')
    def health_check():
        """
        Health check endpoint.

        Response:
            200 OK: Database reachable
            503 Service Unavailable: Database connection failed
        """
        database_ok = test_database_connection()
        body = {
            "status": "healthy" if database_ok else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "database": {"status": "healthy" if database_ok else "unhealthy"}
            }
        }
        return jsonify(body), 200 if database_ok else 503

    logger.info(f"Flask app created (env={FLASK_ENV}, debug={FLASK_DEBUG})")
    return app


if __name__ == '__main__':
    # Development server
    create_app().run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', '3000')),
        debug=FLASK_DEBUG
    )
