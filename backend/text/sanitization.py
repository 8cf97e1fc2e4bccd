"""
Unicode sanitization pipeline.

Security: Neutralizes text-borne attacks before the text is displayed, stored
or fed to downstream systems:
- Trojan Source (BiDi embeddings, overrides and isolates)
- Invisible and default-ignorable characters, TAG smuggling
- Homoglyph / confusable spoofing, non-ASCII digits
- Zalgo stacks, HTML and markdown formatting residue

A Sanitizer runs the steps in a fixed order for a given Mode and returns the
cleaned text plus Stats. analyze() additionally diffs the original against the
sanitized text at grapheme granularity and reports VectorHits.

Note: sanitize() never raises for a str input. analyze() refuses inputs above
MAX_ANALYZE_BYTES before doing any work.
"""

import functools
import logging
import time

from config import DEFAULT_MODE, MAX_ANALYZE_BYTES, NFKC_CHUNK_SIZE, NFKC_TIME_BUDGET_SECONDS
from errors import InputTooLarge, PipelineError

from . import steps
from .classifier import classify_graphemes
from .cleanup import final_cleanup
from .diagnostics import Diagnostics
from .diff import diff_graphemes
from .graphemes import CodepointSegmenter
from .models import AnalysisResult, Mode, Stats
from .services import UnicodeServices
from .vectorhits import build_vector_hits, summarize

logger = logging.getLogger(__name__)

# Upper bound on repeated pipeline passes per sanitize() call
MAX_PIPELINE_PASSES = 8


class Sanitizer:
    """
    Configured sanitization pipeline.

    Holds no per-call state; one instance can serve concurrent requests as
    long as its Diagnostics sink is shared safely (it is lock-guarded).
    """

    def __init__(
        self,
        services: UnicodeServices | None = None,
        diagnostics: Diagnostics | None = None,
        default_mode=DEFAULT_MODE,
        time_budget: float = NFKC_TIME_BUDGET_SECONDS,
        chunk_size: int = NFKC_CHUNK_SIZE,
        clock=time.monotonic,
    ):
        self.services = services if services is not None else UnicodeServices.default()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.default_mode = Mode.coerce(default_mode)
        self.time_budget = time_budget
        self.chunk_size = chunk_size
        self.clock = clock

        if self.services.segmenter is None:
            self.diagnostics.warn_once(
                'segmenter_missing', 'Grapheme segmentation unavailable; splitting per codepoint.'
            )
        self.segmenter = self.services.segmenter or CodepointSegmenter()

    def _pipeline(self, mode: Mode):
        """Ordered (name, step) pairs; every step is called as step(text, stats)."""
        services = self.services
        diagnostics = self.diagnostics

        def normalize(text, stats):
            return steps.normalize_unicode(
                text,
                mode,
                transliterator=services.transliterator,
                segmenter=services.segmenter,
                diagnostics=diagnostics,
                time_budget=self.time_budget,
                chunk_size=self.chunk_size,
                clock=self.clock,
            )

        def without_stats(step):
            return lambda text, stats: step(text)

        return (
            ('decode_entities', steps.decode_entities),
            ('strip_ascii_controls', steps.strip_ascii_controls),
            ('strip_bidi_controls', steps.strip_bidi_controls),
            ('normalize_unicode', normalize),
            ('strip_invisibles', functools.partial(steps.strip_invisibles, mode=mode)),
            ('normalize_whitespace', without_stats(steps.normalize_whitespace)),
            (
                'normalize_digits',
                functools.partial(steps.normalize_digits, mode=mode, digit_values=services.digit_values),
            ),
            ('normalize_punctuation', without_stats(steps.normalize_punctuation)),
            ('clean_orphan_combining', steps.clean_orphan_combining),
            ('strip_formatting', lambda text, stats: steps.strip_formatting(text, mode)),
            ('strip_noncharacters', functools.partial(steps.strip_noncharacters, mode=mode)),
            ('strip_private_use', functools.partial(steps.strip_private_use, mode=mode)),
            ('strip_tag_block', functools.partial(steps.strip_tag_block, mode=mode)),
            ('normalize_homoglyphs', functools.partial(steps.normalize_homoglyphs, mode=mode)),
            (
                'spoof_audit',
                functools.partial(
                    steps.spoof_audit,
                    mode=mode,
                    detector=services.confusable_detector,
                    diagnostics=diagnostics,
                ),
            ),
            (
                'detect_mirrored_punctuation',
                functools.partial(
                    steps.detect_mirrored_punctuation,
                    bidi_properties=services.bidi_properties,
                    diagnostics=diagnostics,
                ),
            ),
            ('strip_invisibles_final', functools.partial(steps.strip_invisibles, mode=mode)),
            ('final_cleanup', without_stats(final_cleanup)),
        )

    def sanitize(self, text: str, mode=None) -> tuple[str, Stats]:
        """
        Sanitize text.

        Args:
            text: Input text
            mode: Mode or mode name; unknown values fall back to safe

        Returns:
            tuple[str, Stats]: Sanitized text and the statistics of this run.
        """
        if not isinstance(text, str):
            raise TypeError(f'text must be str, not {type(text).__name__}')

        mode = Mode.coerce(self.default_mode if mode is None else mode)
        stats = Stats(original_length=len(text), mode=mode)
        pipeline = self._pipeline(mode)

        # A removal can expose markup or an entity an earlier step already
        # passed over, so the pipeline repeats until its output is stable.
        for _ in range(MAX_PIPELINE_PASSES):
            cleaned = self._run_once(pipeline, text, stats)
            if cleaned == text:
                break
            text = cleaned
        else:
            self.diagnostics.warn_once(
                'pipeline_not_converged',
                f'Output still changing after {MAX_PIPELINE_PASSES} passes; returning the last one.',
            )

        stats.final_length = len(text)
        stats.characters_removed = stats.original_length - stats.final_length
        return text, stats

    @staticmethod
    def _run_once(pipeline, text: str, stats: Stats) -> str:
        for name, step in pipeline:
            try:
                text = step(text, stats)
            except PipelineError:
                raise
            except Exception as e:
                raise PipelineError(name, f'{type(e).__name__}: {e}') from e
        return text

    def analyze(self, text: str, mode=None) -> AnalysisResult:
        """
        Sanitize text and explain every change as VectorHits.

        Raises:
            InputTooLarge: If the UTF-8 encoding of text exceeds MAX_ANALYZE_BYTES.
        """
        if not isinstance(text, str):
            raise TypeError(f'text must be str, not {type(text).__name__}')

        size = len(text.encode('utf-8', 'surrogatepass'))
        if size > MAX_ANALYZE_BYTES:
            logger.warning(f'[ANALYZE] Rejected input of {size} bytes (limit: {MAX_ANALYZE_BYTES})')
            raise InputTooLarge(size, MAX_ANALYZE_BYTES)

        mode = Mode.coerce(self.default_mode if mode is None else mode)
        sanitized, stats = self.sanitize(text, mode)

        original_graphemes = self.segmenter.split(text)
        sanitized_graphemes = self.segmenter.split(sanitized)

        classifications = classify_graphemes(original_graphemes, self.services.digit_values)
        diff_ops = diff_graphemes(
            original_graphemes,
            sanitized_graphemes,
            algorithm=self.services.diff_algorithm,
            diagnostics=self.diagnostics,
        )
        hits = build_vector_hits(diff_ops, classifications, original_graphemes, sanitized_graphemes, mode)

        logger.debug(
            f'[ANALYZE] {len(original_graphemes)} -> {len(sanitized_graphemes)} graphemes, '
            f'{len(diff_ops)} diff op(s), {len(hits)} hit(s)'
        )

        return AnalysisResult(
            original_text=text,
            sanitized_text=sanitized,
            hits=hits,
            summary=summarize(hits),
            diff_ops=diff_ops,
            stats=stats,
        )


@functools.lru_cache(maxsize=1)
def get_default_sanitizer() -> Sanitizer:
    """Shared Sanitizer with every capability available."""
    return Sanitizer()


def sanitize(text: str, mode=None) -> tuple[str, Stats]:
    return get_default_sanitizer().sanitize(text, mode)


def analyze(text: str, mode=None) -> AnalysisResult:
    return get_default_sanitizer().analyze(text, mode)
