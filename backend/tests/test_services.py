"""
Tests for the Unicode capability bundle and its default implementations.
"""

from text.diff import SequenceMatcherDiff
from text.graphemes import RegexGraphemeSegmenter
from text.services import (
    NfkcCasefoldTransliterator,
    ScriptMixingDetector,
    UnicodedataBidiProperties,
    UnicodedataDigitValues,
    UnicodeServices,
)


class TestBundle:
    def test_default_bundle_has_every_capability(self):
        services = UnicodeServices.default()
        assert all(services.describe().values())
        assert isinstance(services.segmenter, RegexGraphemeSegmenter)
        assert isinstance(services.diff_algorithm, SequenceMatcherDiff)

    def test_minimal_bundle_has_none(self):
        assert not any(UnicodeServices.minimal().describe().values())

    def test_describe_keys(self):
        assert set(UnicodeServices.minimal().describe()) == {
            'grapheme_segmentation',
            'transliterator',
            'spoofchecker',
            'bidi_properties',
            'digit_values',
            'diff_library',
        }

    def test_partial_bundle(self):
        services = UnicodeServices(digit_values=UnicodedataDigitValues())
        capabilities = services.describe()
        assert capabilities['digit_values']
        assert not capabilities['spoofchecker']


class TestScriptMixingDetector:
    detector = ScriptMixingDetector()

    def test_mixed_word_is_suspicious(self):
        assert self.detector.is_suspicious('p\u0430ypal')

    def test_cyrillic_lookalike_next_to_latin_word(self):
        assert self.detector.is_suspicious('login \u0441')

    def test_single_script_text_is_not_suspicious(self):
        assert not self.detector.is_suspicious('hello world')
        assert not self.detector.is_suspicious('\u043f\u0440\u0438\u0432\u0435\u0442')
        assert not self.detector.is_suspicious('\u0395\u03bb\u03bb\u03ac\u03b4\u03b1')

    def test_fullwidth_latin_counts_as_latin(self):
        assert not self.detector.is_suspicious('\uff41bc')

    def test_japanese_mix_is_not_suspicious(self):
        assert not self.detector.is_suspicious('\u6771\u4eac\u3068\u30ab\u30bf\u30ab\u30ca')

    def test_katakana_prolonged_sound_mark_is_not_suspicious(self):
        # "coffee" in katakana; U+30FC is a modifier letter shared by both kana scripts
        assert not self.detector.is_suspicious('\u30b3\u30fc\u30d2\u30fc')

    def test_modifier_letter_inside_latin_word(self):
        assert not self.detector.is_suspicious('Hawai\u02bbi')

    def test_doubled_combining_mark(self):
        assert self.detector.is_suspicious('a\u0301\u0301')

    def test_empty_text(self):
        assert not self.detector.is_suspicious('')


def test_transliterator_folds_case_and_compatibility():
    assert NfkcCasefoldTransliterator().transliterate('\ufb01 \u2460 \u00df') == 'fi 1 ss'


def test_bidi_properties():
    bidi = UnicodedataBidiProperties()
    assert bidi.is_mirrored('(')
    assert not bidi.is_mirrored('a')
    assert bidi.is_rtl('\u05d0')
    assert bidi.is_rtl('\u0627')
    assert not bidi.is_rtl('a')


def test_digit_values():
    digits = UnicodedataDigitValues()
    assert digits.digit_value('\u0663') == 3
    assert digits.digit_value('\u096f') == 9
    assert digits.digit_value('x') is None
    # Superscripts are digits but not decimal digits
    assert digits.digit_value('\u00b2') is None
