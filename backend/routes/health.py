"""
Health check and version endpoints for container orchestration.
"""

import logging
import os
import unicodedata
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from config import FLASK_ENV, LINTER_VERSION
from text import get_default_sanitizer

bp = Blueprint('health', __name__)
logger = logging.getLogger(__name__)

# Build time is set at container start (or use current time if not set)
BUILD_TIME = os.environ.get('BUILD_TIME', datetime.now(timezone.utc).isoformat())


@bp.route('/api/health', methods=['GET'])
def health_check():
    """
    Health check endpoint for container orchestration.
    Reports which optional Unicode capabilities are available.
    """
    try:
        capabilities = get_default_sanitizer().services.describe()
    except Exception as e:
        logger.error(f'[HEALTH] Error building sanitizer: {type(e).__name__}: {e}')
        return jsonify({'status': 'unhealthy', 'version': LINTER_VERSION}), 503

    return jsonify(
        {
            'status': 'healthy',
            'version': LINTER_VERSION,
            'capabilities': capabilities,
        }
    )


@bp.route('/api/version', methods=['GET'])
def version():
    """
    Version endpoint - check this in browser console to verify deployment.

    Usage in console:
        fetch('/api/version').then(r => r.json()).then(console.log)
    """
    return jsonify(
        {
            'version': LINTER_VERSION,
            'unicodeVersion': unicodedata.unidata_version,
            'buildTime': BUILD_TIME,
            'environment': FLASK_ENV,
        }
    )
