"""
Error handling utilities.
Provides sanitized error messages for users while logging detailed info internally.

Security: User-facing error messages should be generic to avoid leaking
implementation details (stack traces, internal error messages, input text).
"""

import logging

logger = logging.getLogger(__name__)


# ============================================================================
# User-Facing Error Messages (Safe to expose)
# ============================================================================


class UserError:
    """Predefined user-safe error messages."""

    # Request validation errors
    INVALID_JSON = 'Invalid JSON payload'
    TEXT_MISSING = 'Missing required field: text'
    TEXT_INVALID = 'Text must be a string'
    TEXT_EMPTY = 'Input text cannot be empty'
    TEXT_ENCODING = 'Text must be valid UTF-8'
    MODE_INVALID = 'Invalid mode. Use safe, aggressive, or strict'
    PAYLOAD_TOO_LARGE = 'Input exceeds the maximum size'

    # General errors
    METHOD_NOT_ALLOWED = 'Method not allowed'
    NOT_FOUND = 'Not found'
    INTERNAL_ERROR = 'Internal processing error'


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================


class TextProcessingError(Exception):
    """
    Base exception for sanitization and analysis failures.

    Attributes:
        user_message: Safe message to return to users
        internal_message: Detailed message for internal logging (may contain sensitive info)
    """

    def __init__(self, user_message: str, internal_message: str = None):
        self.user_message = user_message
        self.internal_message = internal_message or user_message
        super().__init__(self.internal_message)


class InputTooLarge(TextProcessingError):
    """
    Raised by analyze() when the input exceeds its byte ceiling.

    Raised before any processing happens, so no partial result exists.
    Route handlers should return a 413 error.
    """

    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            user_message=UserError.PAYLOAD_TOO_LARGE,
            internal_message=f'Input is {size_bytes} bytes (limit: {limit_bytes} bytes)',
        )


class PipelineError(TextProcessingError):
    """
    Raised when a sanitization step fails on input it should always accept.

    Aborts the current call only. Route handlers should return a 500 error.
    """

    def __init__(self, step: str, internal_message: str = None):
        self.step = step
        super().__init__(
            user_message=UserError.INTERNAL_ERROR,
            internal_message=f'[{step}] {internal_message or "step failed"}',
        )


def log_and_sanitize(internal_message: str, user_message: str, level: str = 'error') -> str:
    """
    Log detailed error internally and return sanitized message for user.

    Args:
        internal_message: Detailed message for logs (may contain sensitive info)
        user_message: Safe message to return to user
        level: Log level ('debug', 'info', 'warning', 'error')

    Returns:
        The user-safe message
    """
    log_func = getattr(logger, level, logger.error)
    log_func(f'[INTERNAL] {internal_message}')
    return user_message
