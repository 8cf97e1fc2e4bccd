"""
Configuration, constants, and logging setup for the Unicode Text Linter API.
"""

import logging
import os
import re

# ============================================================================
# Environment Configuration
# ============================================================================

FLASK_ENV = os.environ.get('FLASK_ENV', 'development')
IS_PRODUCTION = FLASK_ENV == 'production'

LINTER_VERSION = '2.3.1'

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO if IS_PRODUCTION else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

# ============================================================================
# CORS Configuration
# ============================================================================

# In production, CORS_ORIGINS must be explicitly set (cannot be '*')
# Default to '*' only in development for convenience
#
# Example:
#   CORS_ORIGINS=https://textlinter.example.com
#   (or comma-separated: https://textlinter.example.com,https://www.textlinter.example.com)


def _validate_cors_origins(raw_origins: str | None, is_production: bool) -> str | None:
    """
    Validate CORS origins configuration.

    Args:
        raw_origins: Raw CORS origins string from environment
        is_production: Whether running in production mode

    Returns:
        Validated CORS origins string or None
    """
    if not raw_origins:
        if is_production:
            logger.error('[SECURITY] CORS_ORIGINS must be set in production')
            return None
        return '*'

    if not isinstance(raw_origins, str):
        logger.warning('[SECURITY] Invalid CORS_ORIGINS type')
        return '*' if not is_production else None

    # In production, '*' is not allowed
    if is_production and raw_origins.strip() == '*':
        logger.error('[SECURITY] CORS_ORIGINS cannot be "*" in production')
        return None

    origins_list = [origin.strip() for origin in raw_origins.split(',') if origin.strip()]
    validated_origins = []

    # SECURITY: CORS origins must NOT include paths - only protocol, domain, and optional port
    url_pattern = re.compile(
        r'^https?://'  # http:// or https://
        r'(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+'  # Domain
        r'[a-zA-Z]{2,}'  # TLD
        r'(?::\d+)?$'  # Optional port (NO PATH ALLOWED)
    )

    for origin in origins_list:
        # Allow localhost in development only
        if not is_production and ('localhost' in origin.lower() or origin.startswith('http://')):
            validated_origins.append(origin)
            continue

        if is_production:
            if 'localhost' in origin.lower() or origin.startswith('http://'):
                logger.warning(
                    f'[SECURITY] CORS origin contains localhost or HTTP-only: "{origin}". '
                    'This is unsafe for production.'
                )
                continue

            if not url_pattern.match(origin):
                logger.warning(f'[SECURITY] Invalid CORS origin format: "{origin}", skipping')
                continue

        validated_origins.append(origin)

    if is_production and not validated_origins:
        logger.error('[SECURITY] No valid CORS origins found in production')
        return None

    return (
        ','.join(validated_origins) if validated_origins else ('*' if not is_production else None)
    )


_raw_cors_origins = os.environ.get('CORS_ORIGINS', '*' if not IS_PRODUCTION else None)
CORS_ORIGINS = _validate_cors_origins(_raw_cors_origins, IS_PRODUCTION)

# ============================================================================
# Numeric Settings
# ============================================================================
# Every numeric setting is clamped to a sane range. Invalid values fall back to
# the default with a warning instead of failing startup.


def _read_int_setting(name: str, default: int, minimum: int, maximum: int) -> int:
    """
    Read an integer environment variable and clamp it to [minimum, maximum].

    Args:
        name: Environment variable name
        default: Value used when the variable is unset or invalid
        minimum: Lowest accepted value
        maximum: Highest accepted value

    Returns:
        Validated integer value
    """
    raw_value = os.environ.get(name, str(default))
    try:
        value = int(raw_value)
    except (ValueError, TypeError):
        logger.warning(f'[CONFIG] Invalid {name} value: {raw_value}, using default {default}')
        return default

    if value < minimum:
        logger.warning(f'[CONFIG] {name} cannot be less than {minimum}, using {minimum} instead of {value}')
        return minimum
    if value > maximum:
        logger.warning(f'[CONFIG] {name} too large ({value}), capping at {maximum}')
        return maximum
    return value


def _read_float_setting(name: str, default: float, minimum: float, maximum: float) -> float:
    """
    Read a float environment variable and clamp it to [minimum, maximum].

    Args:
        name: Environment variable name
        default: Value used when the variable is unset or invalid
        minimum: Lowest accepted value
        maximum: Highest accepted value

    Returns:
        Validated float value
    """
    raw_value = os.environ.get(name, str(default))
    try:
        value = float(raw_value)
    except (ValueError, TypeError):
        logger.warning(f'[CONFIG] Invalid {name} value: {raw_value}, using default {default}')
        return default

    # NaN compares false against everything
    if value != value:
        logger.warning(f'[CONFIG] Invalid {name} value: {raw_value}, using default {default}')
        return default
    if value < minimum:
        logger.warning(f'[CONFIG] {name} cannot be less than {minimum}, using {minimum} instead of {value}')
        return minimum
    if value > maximum:
        logger.warning(f'[CONFIG] {name} too large ({value}), capping at {maximum}')
        return maximum
    return value


# ============================================================================
# Text Input Validation
# ============================================================================

# Hard ceiling enforced by analyze() itself, independent of the HTTP setting
MAX_ANALYZE_BYTES = 1048576  # 1 MiB

# Request ceiling enforced by the HTTP layer (UTF-8 bytes)
MAX_INPUT_BYTES = _read_int_setting('MAX_INPUT_BYTES', 1048576, 1024, 16 * 1024 * 1024)

# Flask rejects bodies above this before the route runs (JSON quoting can expand text)
MAX_CONTENT_LENGTH = MAX_INPUT_BYTES * 6 + 1024

VALID_MODES = ('safe', 'aggressive', 'strict')


def _validate_default_mode(raw_mode: str | None, default: str) -> str:
    """
    Validate the default sanitization mode.

    Args:
        raw_mode: Raw mode string from environment
        default: Mode used when validation fails

    Returns:
        Validated mode name
    """
    if not raw_mode or not isinstance(raw_mode, str):
        return default

    mode = raw_mode.strip().lower()
    if mode not in VALID_MODES:
        logger.warning(f'[CONFIG] Invalid DEFAULT_MODE: "{raw_mode}", using default: {default}')
        return default
    return mode


DEFAULT_MODE = _validate_default_mode(os.environ.get('DEFAULT_MODE', 'safe'), 'safe')

# ============================================================================
# Normalization Budget
# ============================================================================

# Strict mode runs NFKC + casefold in grapheme chunks and gives up (falling back
# to plain NFKC + lowercase) once this wall-clock budget is spent.
NFKC_TIME_BUDGET_SECONDS = _read_float_setting('NFKC_TIME_BUDGET_SECONDS', 0.15, 0.01, 5.0)
NFKC_CHUNK_SIZE = _read_int_setting('NFKC_CHUNK_SIZE', 4096, 64, 65536)
