"""
Unicode capability bundle.

Optional Unicode services (grapheme segmentation, transliteration, confusable
detection, bidi properties, digit values, diffing) are resolved once when a
Sanitizer is built. A member set to None means the capability is unavailable
and the step that needs it degrades:

    segmenter           -> per-codepoint splitting
    transliterator      -> plain NFKC + lowercase
    confusable_detector -> spoof audit skipped, no advisory
    bidi_properties     -> mirrored-punctuation check skipped, no advisory
    digit_values        -> fixed Arabic-Indic digit table
    diff_algorithm      -> built-in LCS diff
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Protocol

from .diff import DiffAlgorithm, SequenceMatcherDiff
from .graphemes import RegexGraphemeSegmenter
from .tables import HOMOGLYPH_MAP


class Segmenter(Protocol):
    name: str

    def split(self, text: str) -> list[str]: ...


class Transliterator(Protocol):
    def transliterate(self, chunk: str) -> str | None: ...


class ConfusableDetector(Protocol):
    def is_suspicious(self, text: str) -> bool: ...


class BidiProperties(Protocol):
    def is_mirrored(self, char: str) -> bool: ...

    def is_rtl(self, char: str) -> bool: ...


class DigitValues(Protocol):
    def digit_value(self, char: str) -> int | None: ...


# ============================================================================
# Default Implementations
# ============================================================================


class NfkcCasefoldTransliterator:
    """Compatibility-decompose, recompose and case-fold a chunk of text."""

    def transliterate(self, chunk: str) -> str | None:
        return unicodedata.normalize('NFKC', chunk).casefold()


class UnicodedataBidiProperties:
    """Bidi_Mirrored and bidi class lookups from the interpreter's Unicode database."""

    RTL_CLASSES = frozenset({'R', 'AL', 'AN'})

    def is_mirrored(self, char: str) -> bool:
        return unicodedata.mirrored(char) == 1

    def is_rtl(self, char: str) -> bool:
        return unicodedata.bidirectional(char) in self.RTL_CLASSES


class UnicodedataDigitValues:
    """Decimal digit values (general category Nd) for any script."""

    def digit_value(self, char: str) -> int | None:
        return unicodedata.decimal(char, None)


# Scripts whose letters are commonly mistaken for one another
_SCRIPT_ALIASES = {
    'HIRAGANA': 'HAN',
    'KATAKANA': 'HAN',
    'KATAKANA-HIRAGANA': 'HAN',
    'CJK': 'HAN',
    'IDEOGRAPHIC': 'HAN',
}
_WIDTH_PREFIXES = ('FULLWIDTH', 'HALFWIDTH')
_WORD_PATTERN = re.compile(r'\w+')


def _script_of(char: str) -> str | None:
    # Modifier letters (length marks, iteration marks) follow their neighbours' script
    if unicodedata.category(char) == 'Lm':
        return None
    name = unicodedata.name(char, '')
    if not name:
        return None
    words = name.split()
    if words[0] in _WIDTH_PREFIXES and len(words) > 1:
        words = words[1:]
    return _SCRIPT_ALIASES.get(words[0], words[0])


class ScriptMixingDetector:
    """
    Heuristic confusable detector.

    Text is suspicious when:
    - a single word mixes letters from more than one script ("pаypal" with a
      Cyrillic а),
    - a Cyrillic or Greek lookalike appears anywhere alongside Latin letters,
    - the same combining mark is stacked twice in a row.
    """

    def is_suspicious(self, text: str) -> bool:
        for word in _WORD_PATTERN.findall(text):
            scripts = {_script_of(ch) for ch in word if ch.isalpha()}
            scripts.discard(None)
            if len(scripts) > 1:
                return True

        has_latin = False
        has_foreign_lookalike = False
        previous = ''
        for ch in text:
            if ch.isalpha():
                script = _script_of(ch)
                if script == 'LATIN':
                    has_latin = True
                elif ch in HOMOGLYPH_MAP and script in ('CYRILLIC', 'GREEK'):
                    has_foreign_lookalike = True
            elif ch == previous and unicodedata.category(ch) == 'Mn':
                return True
            previous = ch

        return has_latin and has_foreign_lookalike


# ============================================================================
# Bundle
# ============================================================================


@dataclass(frozen=True)
class UnicodeServices:
    segmenter: Segmenter | None = None
    transliterator: Transliterator | None = None
    confusable_detector: ConfusableDetector | None = None
    bidi_properties: BidiProperties | None = None
    digit_values: DigitValues | None = None
    diff_algorithm: DiffAlgorithm | None = None

    @classmethod
    def default(cls) -> 'UnicodeServices':
        """Every capability available."""
        return cls(
            segmenter=RegexGraphemeSegmenter(),
            transliterator=NfkcCasefoldTransliterator(),
            confusable_detector=ScriptMixingDetector(),
            bidi_properties=UnicodedataBidiProperties(),
            digit_values=UnicodedataDigitValues(),
            diff_algorithm=SequenceMatcherDiff(),
        )

    @classmethod
    def minimal(cls) -> 'UnicodeServices':
        """No optional capability; every step runs on its fallback."""
        return cls()

    def describe(self) -> dict:
        """Capability availability map, as reported by the API."""
        return {
            'grapheme_segmentation': self.segmenter is not None,
            'transliterator': self.transliterator is not None,
            'spoofchecker': self.confusable_detector is not None,
            'bidi_properties': self.bidi_properties is not None,
            'digit_values': self.digit_values is not None,
            'diff_library': self.diff_algorithm is not None,
        }
