"""
Individual sanitization steps.

Each step takes the current text and the run's Stats, returns the new text, and
is idempotent: applying it to its own output changes nothing. Steps that only
apply to some modes return the text untouched for the others.

Steps only ever raise advisory flags; they never clear one.
"""

import html
import logging
import re
import time
import unicodedata

import regex

from .graphemes import CodepointSegmenter, iter_chunks
from .models import Mode, Stats
from .tables import (
    ASCII_CONTROL_RANGES,
    BIDI_MARK_RANGES,
    BIDI_OVERRIDE_RANGES,
    BULLETS,
    EMOJI_FLAG_BASE,
    EXTENDED_SELECTOR_RANGES,
    FALLBACK_DIGIT_RANGES,
    HOMOGLYPH_MAP,
    INVISIBLE_RANGES,
    JOINER_RANGES,
    NONCHARACTER_BLOCK,
    NONCHARACTER_PLANE_RANGES,
    PRIVATE_USE_RANGES,
    PUNCTUATION_MAP,
    SPACE_CHARS,
    TAG_CANCEL,
    TAG_RANGES,
    TAG_SPEC_RANGE,
    TEXT_VARIATION_SELECTOR_RANGES,
    compile_ranges,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Compiled Patterns
# ============================================================================

_ASCII_CONTROLS = compile_ranges(ASCII_CONTROL_RANGES, repeat=True)
_BIDI_OVERRIDES = compile_ranges(BIDI_OVERRIDE_RANGES, repeat=True)

_INVISIBLES_SAFE = compile_ranges(INVISIBLE_RANGES, TEXT_VARIATION_SELECTOR_RANGES)
_INVISIBLES_STRICTER = compile_ranges(
    INVISIBLE_RANGES,
    JOINER_RANGES,
    BIDI_MARK_RANGES,
    TEXT_VARIATION_SELECTOR_RANGES,
    EXTENDED_SELECTOR_RANGES,
)

_SPACE_TABLE = str.maketrans({ch: ' ' for ch in SPACE_CHARS})
_SPACE_RUN = re.compile(' +')
_EXCESS_NEWLINES = re.compile('\n{3,}')

_PUNCTUATION_TABLE = str.maketrans(PUNCTUATION_MAP)
_BULLET_TABLE = str.maketrans({ch: '-' for ch in BULLETS})
_HOMOGLYPH_TABLE = str.maketrans(HOMOGLYPH_MAP)

_LEADING_MARKS = regex.compile(r'^\p{M}+')
_MARKS_AFTER_SPACE = regex.compile(r'(\s)\p{M}+')
_MARK_PILEUP = regex.compile(r'(\P{M})(\p{M}{2})\p{M}+')

_HTML_TAG = re.compile(r'<[^\s<>][^<>]*>')
_EMPHASIS_STAR = re.compile(r'\*([^*\n]{1,50})\*')
_EMPHASIS_UNDERSCORE = re.compile(r'_([^_\n]{1,50})_')

_NONCHARACTERS = compile_ranges((NONCHARACTER_BLOCK,), NONCHARACTER_PLANE_RANGES, repeat=True)
_PRIVATE_USE = compile_ranges(PRIVATE_USE_RANGES, repeat=True)

_TAG_RUN = compile_ranges(TAG_RANGES, repeat=True)
_EMOJI_FLAG = re.compile(
    f'(\\U{EMOJI_FLAG_BASE:08X}[\\U{TAG_SPEC_RANGE[0]:08X}-\\U{TAG_SPEC_RANGE[1]:08X}]+'
    f'\\U{TAG_CANCEL:08X})'
)


# ============================================================================
# Steps 1-3: Entities, Controls, Direction Overrides
# ============================================================================


def decode_entities(text: str, stats: Stats) -> str:
    """
    Step 1: Decode HTML named and numeric entities.

    Decoding repeats until nothing changes, so "&amp;lt;" ends up as "<" in a
    single run. Every decode that changes the text makes it shorter, which
    bounds the loop.
    """
    decoded = text
    while '&' in decoded:
        candidate = html.unescape(decoded)
        if candidate == decoded:
            break
        decoded = candidate

    if decoded != text:
        stats.advisories.raise_flag('had_html_entities')
    return decoded


def strip_ascii_controls(text: str, stats: Stats) -> str:
    """Step 2: Remove C0/C1 controls and DEL, keeping TAB, LF and CR."""
    clean = _ASCII_CONTROLS.sub('', text)
    if clean != text:
        stats.advisories.raise_flag('had_ascii_controls')
    return clean


def strip_bidi_controls(text: str, stats: Stats) -> str:
    """Step 3: Remove embedding, override and isolate controls (Trojan Source)."""
    clean = _BIDI_OVERRIDES.sub('', text)
    if clean != text:
        stats.advisories.raise_flag('had_bidi_controls')
        logger.debug(f'[SANITIZATION] Removed {len(text) - len(clean)} BiDi control(s)')
    return clean


# ============================================================================
# Step 4: Normalization
# ============================================================================


def normalize_unicode(
    text: str,
    mode: Mode,
    transliterator=None,
    segmenter=None,
    diagnostics=None,
    time_budget: float = 0.15,
    chunk_size: int = 4096,
    clock=time.monotonic,
) -> str:
    """Step 4: NFC for safe/aggressive, NFKC + casefold for strict."""
    if mode is not Mode.STRICT:
        return unicodedata.normalize('NFC', text)
    return nfkc_casefold(
        text,
        transliterator=transliterator,
        segmenter=segmenter,
        diagnostics=diagnostics,
        time_budget=time_budget,
        chunk_size=chunk_size,
        clock=clock,
    )


def nfkc_casefold(
    text: str,
    transliterator=None,
    segmenter=None,
    diagnostics=None,
    time_budget: float = 0.15,
    chunk_size: int = 4096,
    clock=time.monotonic,
) -> str:
    """
    Transliterate text in grapheme-aligned chunks under a wall-clock budget.

    The budget is checked after every chunk, including the last. Running out of
    time, a failing chunk, or a missing transliterator all fall back to plain
    NFKC + lowercase over the whole text.
    """
    if transliterator is None:
        _warn(diagnostics, 'transliterator_missing', 'No transliterator available; using NFKC + lowercase.')
        return _plain_nfkc_lower(text)

    graphemes = (segmenter or CodepointSegmenter()).split(text)
    parts = []
    started = clock()

    for chunk in iter_chunks(graphemes, chunk_size):
        try:
            converted = transliterator.transliterate(chunk)
        except Exception as e:
            logger.debug(f'[SANITIZATION] Transliterator raised {type(e).__name__}: {e}')
            converted = None

        if converted is None:
            _warn(diagnostics, 'transliterator_failure', 'NFKC transliteration failed; falling back.')
            return _plain_nfkc_lower(text)

        if clock() - started > time_budget:
            _warn(diagnostics, 'transliterator_timeout', 'NFKC transliteration exceeded time budget; falling back.')
            return _plain_nfkc_lower(text)
        parts.append(converted)

    return ''.join(parts)


def _plain_nfkc_lower(text: str) -> str:
    return unicodedata.normalize('NFKC', text).lower()


# ============================================================================
# Steps 5-9: Invisibles, Whitespace, Digits, Punctuation, Combining Marks
# ============================================================================


def strip_invisibles(text: str, stats: Stats, mode: Mode) -> str:
    """
    Step 5 (and the second pass, step 17): Remove default-ignorable characters.

    Safe mode keeps ZWNJ/ZWJ, direction marks and emoji presentation selectors,
    which legitimate scripts and emoji sequences rely on.
    """
    pattern = _INVISIBLES_SAFE if mode is Mode.SAFE else _INVISIBLES_STRICTER
    clean = pattern.sub('', text)
    removed = len(text) - len(clean)
    if removed:
        stats.advisories.raise_flag('had_default_ignorables')
        stats.invisibles_removed += removed
        logger.debug(f'[SANITIZATION] Removed {removed} invisible character(s)')
    return clean


def normalize_whitespace(text: str) -> str:
    """Step 6: Fold Unicode spaces and tabs to ' ', line endings to LF, collapse runs."""
    clean = text.translate(_SPACE_TABLE)
    clean = clean.replace('\r\n', '\n').replace('\r', '\n')
    clean = _SPACE_RUN.sub(' ', clean)
    return _EXCESS_NEWLINES.sub('\n\n', clean)


def normalize_digits(text: str, stats: Stats, mode: Mode, digit_values=None) -> str:
    """Step 7: Map non-ASCII decimal digits to ASCII 0-9 (aggressive/strict)."""
    if mode is Mode.SAFE or text.isascii():
        return text

    out = []
    normalized = 0
    for ch in text:
        digit = _digit_for(ch, digit_values)
        if digit is None:
            out.append(ch)
        else:
            out.append(str(digit))
            normalized += 1

    if normalized:
        stats.digits_normalized += normalized
        stats.advisories.raise_flag('had_non_ascii_digits')
        return ''.join(out)
    return text


def _digit_for(ch: str, digit_values) -> int | None:
    """Digit value of a non-ASCII decimal digit, None for anything else."""
    if '0' <= ch <= '9':
        return None

    if digit_values is not None:
        value = digit_values.digit_value(ch)
        if value is not None and 0 <= value <= 9:
            return value

    cp = ord(ch)
    for first, last in FALLBACK_DIGIT_RANGES:
        if first <= cp <= last:
            return cp - first
    return None


def normalize_punctuation(text: str) -> str:
    """Step 8: Smart quotes, dashes, ellipsis, guillemets and primes to ASCII."""
    return text.translate(_PUNCTUATION_TABLE)


def clean_orphan_combining(text: str, stats: Stats) -> str:
    """
    Step 9: Remove combining marks with no base and cap Zalgo stacks.

    Marks at the start of the text or after whitespace are dropped; three or
    more marks on one base are cut back to two.
    """
    clean = _LEADING_MARKS.sub('', text)
    clean = _MARKS_AFTER_SPACE.sub(r'\1', clean)
    clean = _MARK_PILEUP.sub(r'\1\2', clean)
    if clean != text:
        stats.advisories.raise_flag('had_orphan_combining')
    return clean


# ============================================================================
# Step 10: Formatting
# ============================================================================


def strip_formatting(text: str, mode: Mode) -> str:
    """
    Step 10: Bullets to '-', HTML tags removed, markdown emphasis unwrapped.

    Emphasis is only unwrapped outside safe mode. Substitutions repeat until the
    text is stable so nested markup cannot survive a single pass.
    """
    while True:
        updated = _strip_formatting_once(text, mode)
        if updated == text:
            return text
        text = updated


def _strip_formatting_once(text: str, mode: Mode) -> str:
    text = text.translate(_BULLET_TABLE)
    text = _HTML_TAG.sub('', text)
    if mode is not Mode.SAFE:
        text = _EMPHASIS_STAR.sub(r'\1', text)
        text = _EMPHASIS_UNDERSCORE.sub(r'\1', text)
    return text


# ============================================================================
# Steps 11-14: Noncharacters, Private Use, Tags, Homoglyphs
# ============================================================================


def strip_noncharacters(text: str, stats: Stats, mode: Mode) -> str:
    """Step 11: Remove U+FDD0-FDEF and the two last codepoints of every plane."""
    if mode is Mode.SAFE:
        return text
    clean = _NONCHARACTERS.sub('', text)
    if clean != text:
        stats.advisories.raise_flag('had_noncharacters')
    return clean


def strip_private_use(text: str, stats: Stats, mode: Mode) -> str:
    """Step 12: Remove Private Use Area codepoints (strict only)."""
    if mode is not Mode.STRICT:
        return text
    clean = _PRIVATE_USE.sub('', text)
    if clean != text:
        stats.advisories.raise_flag('had_private_use')
    return clean


def strip_tag_block(text: str, stats: Stats, mode: Mode) -> str:
    """
    Step 13: Remove TAG characters (U+E0000-E007F).

    Outside aggressive mode, well-formed emoji subdivision flags (black flag +
    tag letters + cancel tag) are kept intact.
    """
    if mode is Mode.AGGRESSIVE:
        clean = _TAG_RUN.sub('', text)
    else:
        # re.split with a capturing group puts the flag sequences at odd indices
        parts = _EMOJI_FLAG.split(text)
        clean = ''.join(part if index % 2 else _TAG_RUN.sub('', part) for index, part in enumerate(parts))

    if clean != text:
        stats.advisories.raise_flag('had_tag_chars')
    return clean


def normalize_homoglyphs(text: str, stats: Stats, mode: Mode) -> str:
    """Step 14: Map Cyrillic, Greek and fullwidth lookalikes to Latin/ASCII."""
    if mode is Mode.SAFE or text.isascii():
        return text
    count = sum(1 for ch in text if ch in HOMOGLYPH_MAP)
    if not count:
        return text
    stats.homoglyphs_normalized += count
    return text.translate(_HOMOGLYPH_TABLE)


# ============================================================================
# Steps 15-16: Audits (advisory only, text unchanged)
# ============================================================================


def spoof_audit(text: str, stats: Stats, mode: Mode, detector=None, diagnostics=None) -> str:
    """Step 15: Ask the confusable detector whether the text looks like a spoof."""
    if detector is None:
        _warn(diagnostics, 'spoofchecker_missing', 'Confusable detector unavailable; spoof audit skipped.')
        return text

    try:
        suspicious = detector.is_suspicious(text)
    except Exception as e:
        _warn(diagnostics, 'spoofchecker_failure', f'Spoof audit failed ({type(e).__name__}); skipped.')
        return text

    if suspicious:
        stats.advisories.raise_flag('confusable_suspected')
        if mode is Mode.SAFE:
            stats.advisories.raise_flag('had_mixed_scripts')
    return text


def detect_mirrored_punctuation(text: str, stats: Stats, bidi_properties=None, diagnostics=None) -> str:
    """Step 16: Flag mirrored punctuation appearing in right-to-left context."""
    if bidi_properties is None:
        _warn(diagnostics, 'bidi_properties_missing', 'Bidi property lookup unavailable; mirrored check skipped.')
        return text

    has_rtl = False
    has_mirrored = False
    for ch in text:
        if not has_mirrored and bidi_properties.is_mirrored(ch):
            has_mirrored = True
        if not has_rtl and bidi_properties.is_rtl(ch):
            has_rtl = True
        if has_rtl and has_mirrored:
            stats.advisories.raise_flag('had_mirrored_punctuation')
            break
    return text


def _warn(diagnostics, event: str, message: str) -> None:
    if diagnostics is not None:
        diagnostics.warn_once(event, message)
    else:
        logger.warning(f'[SANITIZATION] {event}: {message}')
