"""
Static Unicode tables used by the sanitization steps and the classifier.

All ranges are inclusive (first, last) codepoint pairs.
"""

import re

# ============================================================================
# Direction Controls
# ============================================================================

# Embeddings, overrides (LRE, RLE, PDF, LRO, RLO) and isolates (LRI, RLI, FSI, PDI)
BIDI_OVERRIDE_RANGES = (
    (0x202A, 0x202E),
    (0x2066, 0x2069),
)

# LRM, RLM, ALM - implicit direction marks
BIDI_MARK_RANGES = (
    (0x200E, 0x200F),
    (0x061C, 0x061C),
)

BIDI_CONTROL_RANGES = BIDI_OVERRIDE_RANGES + BIDI_MARK_RANGES

# ============================================================================
# Default Ignorables
# ============================================================================

# Always removed by the invisibles step
INVISIBLE_RANGES = (
    (0x200B, 0x200B),  # Zero-width space
    (0x2028, 0x2029),  # Line / paragraph separator
    (0x2060, 0x2064),  # Word joiner, invisible math operators
    (0x206A, 0x206F),  # Deprecated Arabic shaping / digit controls
    (0xFEFF, 0xFEFF),  # BOM / zero-width no-break space
    (0xFFF9, 0xFFFB),  # Interlinear annotation controls
    (0x00AD, 0x00AD),  # Soft hyphen
    (0x180E, 0x180E),  # Mongolian vowel separator
)

# ZWNJ and ZWJ carry meaning in Indic/Arabic text and emoji sequences
JOINER_RANGES = ((0x200C, 0x200D),)

# VS1-VS15
TEXT_VARIATION_SELECTOR_RANGES = ((0xFE00, 0xFE0E),)

# VS16, Mongolian free variation selectors, variation selectors supplement
EXTENDED_SELECTOR_RANGES = (
    (0xFE0F, 0xFE0F),
    (0x180B, 0x180D),
    (0xE0100, 0xE01EF),
)

# Classifier view: every default-ignorable we strip, minus the BiDi marks
DEFAULT_IGNORABLE_RANGES = (
    INVISIBLE_RANGES + JOINER_RANGES + TEXT_VARIATION_SELECTOR_RANGES + EXTENDED_SELECTOR_RANGES
)

# ============================================================================
# Controls, Tags, Noncharacters, Private Use
# ============================================================================

# C0 minus TAB (09), LF (0A) and CR (0D); DEL; C1
ASCII_CONTROL_RANGES = (
    (0x0000, 0x0008),
    (0x000B, 0x000C),
    (0x000E, 0x001F),
    (0x007F, 0x009F),
)

TAG_RANGES = ((0xE0000, 0xE007F),)

# Subdivision flags: WAVING BLACK FLAG + tag letters/digits + CANCEL TAG
EMOJI_FLAG_BASE = 0x1F3F4
TAG_SPEC_RANGE = (0xE0020, 0xE007E)
TAG_CANCEL = 0xE007F

NONCHARACTER_BLOCK = (0xFDD0, 0xFDEF)

PRIVATE_USE_RANGES = (
    (0xE000, 0xF8FF),
    (0xF0000, 0xFFFFD),
    (0x100000, 0x10FFFD),
)

# ============================================================================
# Digits
# ============================================================================

# Used when no digit-value lookup is available
FALLBACK_DIGIT_RANGES = (
    (0x0660, 0x0669),  # Arabic-Indic
    (0x06F0, 0x06F9),  # Extended Arabic-Indic
)

# ============================================================================
# Whitespace, Punctuation, Bullets
# ============================================================================

# Space separators (Zs minus U+0020) plus TAB, all folded to a single space
SPACE_CHARS = (
    '\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a'
    '\u202f\u205f\u3000\t'
)

PUNCTUATION_MAP = {
    '\u201c': '"',  # left double quotation mark
    '\u201d': '"',  # right double quotation mark
    '\u201e': '"',  # double low-9
    '\u201f': '"',  # double high-reversed-9
    '\u2018': "'",  # left single quotation mark
    '\u2019': "'",  # right single quotation mark
    '\u201a': "'",  # single low-9
    '\u201b': "'",  # single high-reversed-9
    '\u2014': '-',  # em dash
    '\u2013': '-',  # en dash
    '\u2015': '-',  # horizontal bar
    '\u2010': '-',  # hyphen
    '\u2011': '-',  # non-breaking hyphen
    '\u2012': '-',  # figure dash
    '\u2212': '-',  # minus sign
    '\u2026': '...',  # horizontal ellipsis
    '\u00ab': '"',  # left guillemet
    '\u00bb': '"',  # right guillemet
    '\u2039': "'",  # single left guillemet
    '\u203a': "'",  # single right guillemet
    '\u2032': "'",  # prime
    '\u2033': '"',  # double prime
    '\u2034': "'''",  # triple prime
}

BULLETS = '•◦▪‣⁃⁌⁍∙○●◘◙'

# ============================================================================
# Homoglyphs
# ============================================================================

_CYRILLIC_HOMOGLYPHS = {
    'а': 'a', 'е': 'e', 'о': 'o', 'р': 'p', 'с': 'c', 'у': 'y', 'х': 'x', 'ѕ': 's',
    'і': 'i', 'ј': 'j', 'ԁ': 'd', 'ԛ': 'q', 'ѵ': 'v', 'һ': 'h', 'ҏ': 'p',
    'А': 'A', 'В': 'B', 'Е': 'E', 'К': 'K', 'М': 'M', 'Н': 'H', 'О': 'O', 'Р': 'P',
    'С': 'C', 'Т': 'T', 'Х': 'X', 'Ѕ': 'S', 'І': 'I', 'Ј': 'J',
}  # fmt: skip

_GREEK_HOMOGLYPHS = {
    'α': 'a', 'β': 'b', 'γ': 'y', 'ε': 'e', 'ι': 'i', 'ο': 'o', 'ρ': 'p', 'υ': 'u',
    'ω': 'w', 'ν': 'v', 'τ': 't',
    'Α': 'A', 'Β': 'B', 'Ε': 'E', 'Ζ': 'Z', 'Η': 'H', 'Ι': 'I', 'Κ': 'K', 'Μ': 'M',
    'Ν': 'N', 'Ο': 'O', 'Ρ': 'P', 'Τ': 'T', 'Υ': 'Y', 'Χ': 'X',
}  # fmt: skip

# Fullwidth Latin letters and digits (U+FF21-FF3A, U+FF41-FF5A, U+FF10-FF19)
_FULLWIDTH_HOMOGLYPHS = {
    **{chr(0xFF21 + i): chr(ord('A') + i) for i in range(26)},
    **{chr(0xFF41 + i): chr(ord('a') + i) for i in range(26)},
    **{chr(0xFF10 + i): chr(ord('0') + i) for i in range(10)},
}

HOMOGLYPH_MAP = {**_CYRILLIC_HOMOGLYPHS, **_GREEK_HOMOGLYPHS, **_FULLWIDTH_HOMOGLYPHS}


# ============================================================================
# Helpers
# ============================================================================


def in_ranges(cp: int, ranges) -> bool:
    """Return True if codepoint falls inside any inclusive range."""
    for first, last in ranges:
        if first <= cp <= last:
            return True
    return False


def is_noncharacter(cp: int) -> bool:
    """U+FDD0-FDEF or the last two codepoints of any plane."""
    return NONCHARACTER_BLOCK[0] <= cp <= NONCHARACTER_BLOCK[1] or (cp & 0xFFFE) == 0xFFFE


def char_class(ranges) -> str:
    """Build a regular-expression character class body from inclusive ranges."""
    parts = []
    for first, last in ranges:
        if first == last:
            parts.append(f'\\U{first:08X}')
        else:
            parts.append(f'\\U{first:08X}-\\U{last:08X}')
    return ''.join(parts)


def compile_ranges(*range_groups, repeat: bool = False) -> re.Pattern:
    """Compile a pattern matching any codepoint in the given range groups."""
    ranges = tuple(r for group in range_groups for r in group)
    return re.compile(f'[{char_class(ranges)}]' + ('+' if repeat else ''))


NONCHARACTER_PLANE_RANGES = tuple(
    ((plane << 16) | 0xFFFE, (plane << 16) | 0xFFFF) for plane in range(0x11)
)
