"""
Request/Response logging middleware for Flask.

Logs every HTTP request and response with:
- Request ID (from the X-Request-ID header, or generated), echoed back on the response
- Method, path, client IP and declared body size
- Status code, response size and duration

Request bodies are never logged: they carry the user's text.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'X-Request-ID'
MAX_REQUEST_ID_LENGTH = 128


def _resolve_request_id(raw: str | None) -> str:
    """Use the caller's request ID when it is usable, otherwise generate one."""
    if raw is None or not raw.strip():
        return str(uuid.uuid4())
    request_id = raw.strip()
    # Refuse IDs that could forge log lines or flood them
    if len(request_id) > MAX_REQUEST_ID_LENGTH or not request_id.isprintable():
        return str(uuid.uuid4())
    return request_id


def setup_logging_middleware(app: Flask):
    """
    Register request/response logging middleware with Flask app.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def log_request_start():
        g.request_id = _resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        g.start_time = time.perf_counter()

        content_length = request.content_length or 0
        client_ip = request.remote_addr or 'unknown'

        logger.info(
            f'[{g.request_id}] {request.method} {request.path} '
            f'from {client_ip} '
            f'Content-Length: {content_length} bytes'
        )

    @app.after_request
    def log_request_end(response):
        """
        Log response details and request duration.

        Args:
            response: Flask response object

        Returns:
            The response, with the request ID header set
        """
        # May be missing if before_request never ran
        request_id = getattr(g, 'request_id', 'unknown')
        start_time = getattr(g, 'start_time', None)

        if start_time is not None:
            duration = time.perf_counter() - start_time
        else:
            duration = 0.0
            logger.warning(f'[{request_id}] Request duration unavailable (before_request may have failed)')

        response_size = response.content_length or 0
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            f'[{request_id}] {request.method} {request.path} '
            f'- Status: {response.status_code} '
            f'- Duration: {duration:.3f}s '
            f'- Size: {response_size} bytes'
        )

        return response

    logger.info('Request/response logging middleware registered')
