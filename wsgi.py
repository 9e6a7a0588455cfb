#!/usr/bin/env python3
"""
WSGI entry point for the Park Fan Sync documentation app.

Usage:
    gunicorn --bind 127.0.0.1:5001 wsgi:application

For development, use the Flask development server instead:
    python -m parkfan.api.app
"""

import os

# Load environment variables from .env file
from dotenv import load_dotenv
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env')
if os.path.exists(env_path):
    load_dotenv(env_path)

# Import and create the Flask application
from parkfan.api.app import create_app

# Create the WSGI application
application = create_app()

# For local testing with: python wsgi.py
if __name__ == "__main__":
    application.run(host='0.0.0.0', port=5001, debug=False)
