"""
Codepoint classifier: which attack vectors a codepoint of the original text belongs to.
"""

import unicodedata

from .models import Classification, VectorKind
from .tables import (
    BIDI_CONTROL_RANGES,
    DEFAULT_IGNORABLE_RANGES,
    FALLBACK_DIGIT_RANGES,
    PRIVATE_USE_RANGES,
    TAG_RANGES,
    in_ranges,
    is_noncharacter,
)

_COMBINING_CATEGORIES = frozenset({'Mn', 'Mc', 'Me'})


def detect_vector_kinds(char: str, digit_values=None) -> tuple[VectorKind, ...]:
    """
    Return the vector kinds of a single codepoint, in a fixed order.

    Direction marks (LRM, RLM, ALM) count as bidi controls only, never as
    default ignorables.
    """
    cp = ord(char)
    kinds = []

    if in_ranges(cp, BIDI_CONTROL_RANGES):
        kinds.append(VectorKind.BIDI_CONTROLS)
    elif in_ranges(cp, DEFAULT_IGNORABLE_RANGES):
        kinds.append(VectorKind.DEFAULT_IGNORABLES)

    if in_ranges(cp, TAG_RANGES):
        kinds.append(VectorKind.TAG_CHARACTERS)
    if is_noncharacter(cp):
        kinds.append(VectorKind.NONCHARACTERS)
    if in_ranges(cp, PRIVATE_USE_RANGES):
        kinds.append(VectorKind.PRIVATE_USE)
    if _is_non_ascii_digit(char, digit_values):
        kinds.append(VectorKind.NON_ASCII_DIGITS)
    if unicodedata.category(char) in _COMBINING_CATEGORIES:
        kinds.append(VectorKind.ORPHAN_COMBINING_MARKS)

    return tuple(kinds)


def _is_non_ascii_digit(char: str, digit_values) -> bool:
    if '0' <= char <= '9':
        return False
    if digit_values is not None and digit_values.digit_value(char) is not None:
        return True
    return in_ranges(ord(char), FALLBACK_DIGIT_RANGES)


def classify_graphemes(graphemes: list[str], digit_values=None) -> list[Classification]:
    """Scan every codepoint of every grapheme once; keep only codepoints with a kind."""
    classifications = []
    for index, grapheme in enumerate(graphemes):
        for char in grapheme:
            if char.isascii() and char.isprintable():
                continue
            kinds = detect_vector_kinds(char, digit_values)
            if kinds:
                classifications.append(Classification(index, ord(char), kinds))
    return classifications
