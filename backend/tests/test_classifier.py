"""
Tests for the codepoint classifier.
"""

import pytest

from text.classifier import classify_graphemes, detect_vector_kinds
from text.models import VectorKind
from text.services import UnicodedataDigitValues


@pytest.mark.parametrize(
    'char, expected',
    [
        ('\u202e', (VectorKind.BIDI_CONTROLS,)),
        ('\u2066', (VectorKind.BIDI_CONTROLS,)),
        ('\u200e', (VectorKind.BIDI_CONTROLS,)),
        ('\u061c', (VectorKind.BIDI_CONTROLS,)),
        ('\u200b', (VectorKind.DEFAULT_IGNORABLES,)),
        ('\u200d', (VectorKind.DEFAULT_IGNORABLES,)),
        ('\ufe0f', (VectorKind.DEFAULT_IGNORABLES,)),
        ('\U000e0041', (VectorKind.TAG_CHARACTERS,)),
        ('\ufdd0', (VectorKind.NONCHARACTERS,)),
        ('\U0010ffff', (VectorKind.NONCHARACTERS,)),
        ('\ue000', (VectorKind.PRIVATE_USE,)),
        ('\u0661', (VectorKind.NON_ASCII_DIGITS,)),
        ('\u0301', (VectorKind.ORPHAN_COMBINING_MARKS,)),
        ('a', ()),
        ('7', ()),
        ('\u00e9', ()),
        ('\u0430', ()),
    ],
)
def test_detect_vector_kinds(char, expected):
    assert detect_vector_kinds(char, UnicodedataDigitValues()) == expected


def test_direction_marks_are_never_default_ignorables():
    for mark in ('\u200e', '\u200f', '\u061c'):
        assert VectorKind.DEFAULT_IGNORABLES not in detect_vector_kinds(mark)


def test_plane_end_noncharacters_are_not_private_use():
    # PUA-B stops at U+10FFFD; the last two codepoints of the plane are noncharacters
    assert detect_vector_kinds('\U0010fffe') == (VectorKind.NONCHARACTERS,)
    assert detect_vector_kinds('\U000ffffd') == (VectorKind.PRIVATE_USE,)


def test_digit_detection_without_capability_uses_fixed_table():
    assert detect_vector_kinds('\u06f3') == (VectorKind.NON_ASCII_DIGITS,)
    assert detect_vector_kinds('\u0967') == ()
    assert detect_vector_kinds('\u0967', UnicodedataDigitValues()) == (VectorKind.NON_ASCII_DIGITS,)


def test_classify_graphemes_records_indices():
    graphemes = ['a', '\u202e', 'b\u0301', 'c']
    result = classify_graphemes(graphemes)

    assert [(c.grapheme_index, c.codepoint) for c in result] == [(1, 0x202E), (2, 0x301)]
    assert result[0].kinds == (VectorKind.BIDI_CONTROLS,)


def test_classify_graphemes_plain_text_is_empty():
    assert classify_graphemes(list('hello world')) == []
