"""
Grapheme cluster segmentation.

Grapheme indices are the unit of every diff op and VectorHit range, so the
original and sanitized texts must be split by the same segmenter.
"""

import regex

_GRAPHEME_PATTERN = regex.compile(r'\X')


class RegexGraphemeSegmenter:
    """Extended grapheme clusters (UAX #29) via the regex module's \\X."""

    name = 'regex'

    def split(self, text: str) -> list[str]:
        if not text:
            return []
        return _GRAPHEME_PATTERN.findall(text)


class CodepointSegmenter:
    """
    Fallback segmenter: one element per codepoint.

    Limitation: multi-codepoint clusters (emoji ZWJ sequences, flags, base +
    combining marks) are split apart, so indices no longer match what a user
    perceives as characters.
    """

    name = 'codepoint'

    def split(self, text: str) -> list[str]:
        return list(text)


def iter_chunks(graphemes: list[str], size: int):
    """Yield consecutive groups of at most size graphemes, joined back to strings."""
    for start in range(0, len(graphemes), size):
        yield ''.join(graphemes[start : start + size])
