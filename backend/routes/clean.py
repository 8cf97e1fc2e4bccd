"""
Text cleaning and analysis endpoints.

Security: Error messages returned to users are sanitized. The submitted text is
never written to the logs; only sizes, counters and advisory names are.
"""

import logging
import time
import unicodedata

from flask import Blueprint, g, jsonify, request

from config import DEFAULT_MODE, LINTER_VERSION, MAX_INPUT_BYTES, VALID_MODES
from errors import InputTooLarge, TextProcessingError, UserError, log_and_sanitize
from text import get_default_sanitizer

bp = Blueprint('clean', __name__)
logger = logging.getLogger(__name__)


def _read_request():
    """
    Validate the JSON body shared by /api/clean and /api/analyze.

    Returns:
        tuple: (text, mode, None) on success, or (None, None, error_response).
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, None, (jsonify({'error': UserError.INVALID_JSON}), 400)

    if 'text' not in data:
        return None, None, (jsonify({'error': UserError.TEXT_MISSING}), 400)

    text = data['text']
    if not isinstance(text, str):
        return None, None, (jsonify({'error': UserError.TEXT_INVALID}), 400)
    if not text:
        return None, None, (jsonify({'error': UserError.TEXT_EMPTY}), 400)

    # Lone surrogates survive JSON decoding but cannot be encoded
    try:
        size = len(text.encode('utf-8'))
    except UnicodeEncodeError:
        return None, None, (jsonify({'error': UserError.TEXT_ENCODING}), 400)

    if size > MAX_INPUT_BYTES:
        logger.warning(f'[CLEAN] Text too large: {size} bytes (max: {MAX_INPUT_BYTES})')
        return None, None, (jsonify({'error': UserError.PAYLOAD_TOO_LARGE}), 413)

    mode = data.get('mode', DEFAULT_MODE)
    if not isinstance(mode, str) or mode not in VALID_MODES:
        return None, None, (jsonify({'error': UserError.MODE_INVALID}), 400)

    return text, mode, None


def _log_summary(tag: str, stats, started: float):
    request_id = getattr(g, 'request_id', 'unknown')
    advisories = stats.advisories.triggered()
    logger.info(
        f'[{tag}] [{request_id}] mode={stats.mode.value} '
        f'length={stats.original_length}->{stats.final_length} '
        f'invisibles={stats.invisibles_removed} homoglyphs={stats.homoglyphs_normalized} '
        f'digits={stats.digits_normalized} '
        f'advisories={",".join(advisories) if advisories else "none"} '
        f'duration={time.perf_counter() - started:.3f}s'
    )


@bp.route('/api/clean', methods=['POST'])
def clean():
    """
    Sanitize text.

    Request body: { "text": "string", "mode": "safe" | "aggressive" | "strict" }
    Response: { "text": "...", "stats": {...}, "server": {...} }
    """
    text, mode, error = _read_request()
    if error:
        return error

    started = time.perf_counter()
    sanitizer = get_default_sanitizer()
    try:
        cleaned, stats = sanitizer.sanitize(text, mode)
    except TextProcessingError as e:
        return jsonify({'error': log_and_sanitize(e.internal_message, e.user_message)}), 500

    _log_summary('CLEAN', stats, started)

    return jsonify(
        {
            'text': cleaned,
            'stats': stats.to_dict(),
            'server': {
                'version': LINTER_VERSION,
                'unicode_version': unicodedata.unidata_version,
                'capabilities': sanitizer.services.describe(),
            },
        }
    )


@bp.route('/api/analyze', methods=['POST'])
def analyze():
    """
    Sanitize text and report every security-relevant change.

    Request body: { "text": "string", "mode": "safe" | "aggressive" | "strict" }
    Response: { "originalText", "sanitizedText", "hits", "summary", "diffOps", "stats" }
    """
    text, mode, error = _read_request()
    if error:
        return error

    started = time.perf_counter()
    try:
        result = get_default_sanitizer().analyze(text, mode)
    except InputTooLarge as e:
        return jsonify({'error': log_and_sanitize(e.internal_message, e.user_message, 'warning')}), 413
    except TextProcessingError as e:
        return jsonify({'error': log_and_sanitize(e.internal_message, e.user_message)}), 500

    _log_summary('ANALYZE', result.stats, started)
    logger.debug(f'[ANALYZE] {result.summary.total_changes} hit(s): {result.summary.vector_counts}')

    return jsonify(result.to_dict())
