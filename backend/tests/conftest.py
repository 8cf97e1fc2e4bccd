"""
Pytest configuration and shared fixtures.

Path Setup
----------
The backend modules (app, config, errors, routes, text, middleware) are flat
top-level modules. Adding the backend directory to sys.path lets tests import
them exactly as the app does (`from text import sanitize`) whether or not the
project has been installed with `pip install -e .`.
"""

import os
import sys

import pytest

_backend_dir = os.path.dirname(os.path.dirname(__file__))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

# Set test environment BEFORE importing app modules
os.environ['FLASK_ENV'] = 'testing'


@pytest.fixture
def app():
    """Create test Flask application."""
    # Import here after environment is set
    from app import create_app

    test_app = create_app()
    test_app.config['TESTING'] = True

    yield test_app


@pytest.fixture
def client(app):
    """Create test client for making requests."""
    return app.test_client()


@pytest.fixture
def stats():
    """Fresh Stats for exercising a single step."""
    from text.models import Stats

    return Stats()


@pytest.fixture
def diagnostics():
    from text.diagnostics import Diagnostics

    return Diagnostics()
