"""
Tests for the sanitization pipeline.

Covers the documented scenarios, mode gating across the whole pipeline,
idempotence, BiDi leakage, digit closure and degraded capability bundles.
"""

import unicodedata

import pytest

from errors import PipelineError
from text import Diagnostics, Mode, Sanitizer, UnicodeServices, sanitize
from text import steps
from text.sanitization import MAX_PIPELINE_PASSES
from text.tables import BIDI_CONTROL_RANGES, BIDI_OVERRIDE_RANGES, in_ranges

ALL_MODES = [Mode.SAFE, Mode.AGGRESSIVE, Mode.STRICT]

SAMPLES = [
    'Hello\u200bworld',
    'Test\u202ereverse\u202ctext',
    '\u0430pple pie',
    '&amp;lt;b&amp;gt;bold&lt;/b&gt; text',
    'Zalgo x\u0301\u0302\u0303\u0304 here',
    'Digits \u0661\u0662\u0663 and \u0967',
    '\u201cQuoted\u201d \u2014 text\u2026',
    'first line\nsecond line.\nThird\n\n\n\n- item',
    'flag \U0001f3f4\U000e0067\U000e0062\U000e0073\U000e0063\U000e0074\U000e007f done',
    'tab\tseparated\u00a0text\r\nnext',
    '*emph* and _under_ words',
    'priv\ue000ate \ufdd0non\U000e0041char',
    '\u05d0 (mirrored) \u200f',
    '<\U000e0041script>x',
    '<\u0455cript>x',
    '&\u200blt;script&\u200bgt;',
    '&\x01lt;b&\x01gt;x',
    '*a\nb* and _c\nd_',
    'a\u200b\u0301\u0301\u0301',
    'e\u2060\u0301 caf\u200be\u0301',
    '\u30b3\u30fc\u30d2\u30fc',
]


class TestScenarios:
    def test_zero_width_space_removed_in_safe_mode(self):
        text, stats = sanitize('Hello\u200bworld', Mode.SAFE)
        assert text == 'Helloworld\n'
        assert stats.invisibles_removed == 1
        assert stats.advisories.had_default_ignorables

    def test_bidi_override_removed_in_safe_mode(self):
        text, stats = sanitize('Hello\u202eworld\u202c', Mode.SAFE)
        assert text == 'Helloworld\n'
        assert stats.advisories.had_bidi_controls

    def test_cyrillic_homoglyph_normalized_in_aggressive_mode(self):
        text, stats = sanitize('\u0430pple', Mode.AGGRESSIVE)
        assert text == 'apple\n'
        assert stats.homoglyphs_normalized == 1

    def test_empty_input(self):
        text, stats = sanitize('', Mode.SAFE)
        assert text == ''
        assert stats.advisories.triggered() == []
        assert stats.original_length == 0
        assert stats.final_length == 0


class TestStats:
    def test_lengths_are_counted_in_codepoints(self):
        text, stats = sanitize('caf\u00e9\u200b \U0001f600', Mode.SAFE)
        assert text == 'caf\u00e9 \U0001f600\n'
        assert stats.original_length == 7
        assert stats.final_length == 7
        assert stats.characters_removed == 0

    def test_characters_removed(self):
        text, stats = sanitize('  a\u200b\u200b  ', Mode.SAFE)
        assert text == 'a\n'
        assert stats.characters_removed == stats.original_length - stats.final_length == 5

    def test_mode_reported(self):
        _, stats = sanitize('x', Mode.STRICT)
        assert stats.mode is Mode.STRICT
        assert stats.to_dict()['mode'] == 'strict'

    def test_unknown_mode_coerces_to_safe(self):
        _, stats = sanitize('x', 'nonsense')
        assert stats.mode is Mode.SAFE

    def test_mode_name_accepted(self):
        _, stats = sanitize('x', 'aggressive')
        assert stats.mode is Mode.AGGRESSIVE

    @pytest.mark.parametrize('name', ['Aggressive', 'STRICT', ' strict'])
    def test_mode_name_must_match_exactly(self, name):
        _, stats = sanitize('x', name)
        assert stats.mode is Mode.SAFE

    def test_entities_and_controls_flagged(self):
        text, stats = sanitize('a&amp;b\x00c', Mode.SAFE)
        assert text == 'a&bc\n'
        assert stats.advisories.had_html_entities
        assert stats.advisories.had_ascii_controls


class TestModeGating:
    def test_safe_keeps_zwj_in_emoji_sequence(self):
        family = '\U0001f468\u200d\U0001f469\u200d\U0001f467'
        text, _ = sanitize(family, Mode.SAFE)
        assert text == family + '\n'

    def test_aggressive_breaks_zwj_sequence(self):
        family = '\U0001f468\u200d\U0001f469'
        text, stats = sanitize(family, Mode.AGGRESSIVE)
        assert text == '\U0001f468\U0001f469\n'
        assert stats.invisibles_removed == 1

    def test_strict_folds_compatibility_and_case(self):
        text, _ = sanitize('\uff28\uff25\uff2c\uff2c\uff2f \ufb01ne', Mode.STRICT)
        assert text == 'hello fine\n'

    def test_strict_strips_private_use(self):
        text, stats = sanitize('a\ue000b', Mode.STRICT)
        assert text == 'ab\n'
        assert stats.advisories.had_private_use

    def test_safe_keeps_private_use_and_noncharacters(self):
        text, stats = sanitize('a\ue000b\ufdd0', Mode.SAFE)
        assert text == 'a\ue000b\ufdd0\n'
        assert not stats.advisories.had_noncharacters

    def test_safe_flags_mixed_scripts_without_rewriting(self):
        text, stats = sanitize('p\u0430ypal', Mode.SAFE)
        assert text == 'p\u0430ypal\n'
        assert stats.advisories.confusable_suspected
        assert stats.advisories.had_mixed_scripts

    def test_mirrored_punctuation_advisory(self):
        _, stats = sanitize('\u05e9\u05dc\u05d5\u05dd (test)', Mode.SAFE)
        assert stats.advisories.had_mirrored_punctuation


class TestExposedPatterns:
    """A later removal must not leave behind markup or text a new run would change."""

    def test_tag_hidden_by_tag_character(self):
        text, _ = sanitize('<\U000e0041script>x', Mode.SAFE)
        assert text == 'x\n'

    def test_tag_hidden_by_homoglyph(self):
        text, _ = sanitize('<\u0455cript>x', Mode.AGGRESSIVE)
        assert text == 'x\n'

    @pytest.mark.parametrize('attack', ['&\u200blt;script&\u200bgt;x', '&\x01lt;script&\x01gt;x'])
    def test_entity_split_by_removed_character(self, attack):
        text, stats = sanitize(attack, Mode.SAFE)
        assert text == 'x\n'
        assert stats.advisories.had_html_entities

    def test_emphasis_across_joined_lines(self):
        text, _ = sanitize('*a\nb*', Mode.AGGRESSIVE)
        assert text == 'a b\n'

    def test_marks_recomposed_after_invisible_removed(self):
        text, stats = sanitize('a\u200b\u0301\u0301\u0301', Mode.SAFE)
        assert text == '\u00e1\u0301\n'
        assert stats.invisibles_removed == 1

    def test_japanese_word_is_not_a_spoof(self):
        text, stats = sanitize('\u30b3\u30fc\u30d2\u30fc', Mode.SAFE)
        assert text == '\u30b3\u30fc\u30d2\u30fc\n'
        assert not stats.advisories.confusable_suspected
        assert not stats.advisories.had_mixed_scripts

    def test_pass_limit_is_reported(self, monkeypatch):
        calls = []

        def ever_growing(text):
            calls.append(text)
            return text + '.'

        monkeypatch.setattr(steps, 'normalize_punctuation', ever_growing)
        diagnostics = Diagnostics()
        text, _ = Sanitizer(diagnostics=diagnostics).sanitize('x', Mode.SAFE)

        assert len(calls) == MAX_PIPELINE_PASSES
        assert diagnostics.seen('pipeline_not_converged')
        assert text.startswith('x.')


class TestProperties:
    @pytest.mark.parametrize('mode', ALL_MODES)
    @pytest.mark.parametrize('sample', SAMPLES)
    def test_idempotent(self, sample, mode):
        once, _ = sanitize(sample, mode)
        twice, _ = sanitize(once, mode)
        assert twice == once

    @pytest.mark.parametrize('mode', ALL_MODES)
    def test_no_bidi_override_survives(self, mode):
        attack = '\u202a\u202b\u202c\u202d\u202e&#x202E;\u2066\u2067\u2068\u2069 code &#8238;'
        text, stats = sanitize(attack, mode)
        assert not any(in_ranges(ord(ch), BIDI_OVERRIDE_RANGES) for ch in text)
        assert stats.advisories.had_bidi_controls

    @pytest.mark.parametrize('mode', [Mode.AGGRESSIVE, Mode.STRICT])
    def test_no_direction_mark_survives_outside_safe(self, mode):
        text, _ = sanitize('a\u200eb\u200fc\u061cd', mode)
        assert not any(in_ranges(ord(ch), BIDI_CONTROL_RANGES) for ch in text)

    @pytest.mark.parametrize('mode', [Mode.AGGRESSIVE, Mode.STRICT])
    def test_only_ascii_digits_survive(self, mode):
        text, stats = sanitize('Prices \u0661\u0662\u0663 \u06f4\u06f5 \u0967\u0968', mode)
        digits = [ch for ch in text if unicodedata.decimal(ch, None) is not None]
        assert digits
        assert all('0' <= ch <= '9' for ch in digits)
        assert stats.digits_normalized == 7


class TestDegradedServices:
    def test_minimal_bundle_still_sanitizes(self):
        diagnostics = Diagnostics()
        sanitizer = Sanitizer(UnicodeServices.minimal(), diagnostics)
        text, stats = sanitizer.sanitize('Hello\u200bworld', Mode.SAFE)
        assert text == 'Helloworld\n'
        assert not stats.advisories.confusable_suspected
        assert {'segmenter_missing', 'spoofchecker_missing', 'bidi_properties_missing'} <= diagnostics.events()

    def test_minimal_bundle_uses_fallback_digit_table(self):
        sanitizer = Sanitizer(UnicodeServices.minimal(), Diagnostics())
        text, _ = sanitizer.sanitize('\u0661\u0967', Mode.AGGRESSIVE)
        assert text == '1\u0967\n'

    def test_minimal_bundle_strict_falls_back_to_nfkc_lower(self):
        diagnostics = Diagnostics()
        sanitizer = Sanitizer(UnicodeServices.minimal(), diagnostics)
        text, _ = sanitizer.sanitize('\uff21BC', Mode.STRICT)
        assert text == 'abc\n'
        assert diagnostics.seen('transliterator_missing')

    def test_shared_diagnostics_logs_once(self, caplog):
        diagnostics = Diagnostics()
        sanitizer = Sanitizer(UnicodeServices.minimal(), diagnostics)
        with caplog.at_level('WARNING'):
            sanitizer.sanitize('one', Mode.SAFE)
            sanitizer.sanitize('two', Mode.SAFE)
        spoof_warnings = [r for r in caplog.records if 'spoofchecker_missing' in r.getMessage()]
        assert len(spoof_warnings) == 1


class TestFailures:
    def test_step_failure_raises_pipeline_error(self, monkeypatch):
        def broken(text):
            raise RuntimeError('pattern engine failure')

        monkeypatch.setattr(steps, 'normalize_punctuation', broken)
        with pytest.raises(PipelineError) as exc_info:
            sanitize('anything', Mode.SAFE)

        assert exc_info.value.step == 'normalize_punctuation'
        assert 'pattern engine failure' in exc_info.value.internal_message
        assert 'pattern engine' not in exc_info.value.user_message

    def test_non_string_input_rejected(self):
        with pytest.raises(TypeError):
            sanitize(None, Mode.SAFE)
