"""
Flask backend for the Unicode Text Linter API.
Provides endpoints that sanitize text against invisible-character, BiDi,
homoglyph and TAG-smuggling attacks, and explain what was removed.
"""

import traceback

from flask import Flask, jsonify
from flask_cors import CORS

from config import CORS_ORIGINS, IS_PRODUCTION, MAX_CONTENT_LENGTH, logger
from errors import UserError
from middleware.logging import setup_logging_middleware
from routes import clean_bp, health_bp


def create_app():
    """
    Flask application factory.
    Creates and configures the Flask app with CORS, body limits, and routes.
    """
    app = Flask(__name__)

    # Reject oversized bodies before the JSON parser sees them
    app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH
    # Keep non-ASCII characters readable in responses
    app.json.ensure_ascii = False

    # CORS configuration: restrict origins in production
    if IS_PRODUCTION:
        # CORS_ORIGINS is None when validation failed
        if not CORS_ORIGINS or CORS_ORIGINS == '*':
            error_msg = (
                'CORS_ORIGINS must be explicitly set in production. '
                'Set the CORS_ORIGINS environment variable to a comma-separated list of allowed origins.'
            )
            logger.error(f'[SECURITY] {error_msg}')
            raise ValueError(error_msg)

        cors_origins_list = [origin.strip() for origin in CORS_ORIGINS.split(',')]
        CORS(app, origins=cors_origins_list)
        logger.info(f'CORS restricted to origins: {CORS_ORIGINS}')
    else:
        CORS(app)
        logger.info('CORS enabled for all origins (development mode)')

    setup_logging_middleware(app)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': UserError.NOT_FOUND}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'error': UserError.METHOD_NOT_ALLOWED}), 405

    @app.errorhandler(413)
    def payload_too_large(e):
        logger.warning(f'[LIMIT] Request body rejected: {e.description}')
        return jsonify({'error': UserError.PAYLOAD_TOO_LARGE}), 413

    # SECURITY: Always register 500 handler to prevent information disclosure
    @app.errorhandler(500)
    def internal_error(e):
        if IS_PRODUCTION:
            logger.error(f'[INTERNAL ERROR] Uncaught exception: {e}')
        else:
            logger.error(f'[INTERNAL ERROR] Uncaught exception: {e}\n{traceback.format_exc()}')
        # Never expose stack traces to the user
        return jsonify({'error': UserError.INTERNAL_ERROR}), 500

    app.register_blueprint(clean_bp)
    app.register_blueprint(health_bp)

    return app


# Create the app instance
app = create_app()


if __name__ == '__main__':
    # Only used for local development
    debug_mode = not IS_PRODUCTION
    logger.info(f'Starting Flask app in {"production" if IS_PRODUCTION else "development"} mode')
    app.run(host='0.0.0.0', port=5000, debug=debug_mode)
