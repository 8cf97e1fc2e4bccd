"""
VectorHit builder.

Joins the grapheme diff with the classifier output: every changed run that
covers classified codepoints becomes one hit per vector kind found in it.
"""

import uuid
from collections import Counter

from .models import (
    AnalysisSummary,
    Classification,
    DiffOp,
    DiffOpType,
    Mode,
    Severity,
    VectorHit,
    VectorKind,
)

_BLOCKING_KINDS = frozenset({
    VectorKind.BIDI_CONTROLS,
    VectorKind.TAG_CHARACTERS,
    VectorKind.NONCHARACTERS,
})

_WARNING_KINDS = frozenset({
    VectorKind.DEFAULT_IGNORABLES,
    VectorKind.PRIVATE_USE,
    VectorKind.NON_ASCII_DIGITS,
})

_NOTES = {
    VectorKind.BIDI_CONTROLS: 'BiDi control characters detected; potential text direction spoofing.',
    VectorKind.MIXED_SCRIPTS: 'Mixed script usage detected; potential confusable attack.',
    VectorKind.DEFAULT_IGNORABLES: 'Invisible or default-ignorable characters detected.',
    VectorKind.TAG_CHARACTERS: 'TAG block characters detected; potential hidden data.',
    VectorKind.ORPHAN_COMBINING_MARKS: 'Orphan combining marks detected; potential rendering issues.',
    VectorKind.CONFUSABLES: 'Confusable characters detected; potential visual spoofing.',
    VectorKind.NONCHARACTERS: 'Unicode noncharacters detected; invalid for interchange.',
    VectorKind.PRIVATE_USE: 'Private Use Area characters detected; undefined semantics.',
    VectorKind.NON_ASCII_DIGITS: 'Non-ASCII digits detected; normalized to ASCII.',
}
_DEFAULT_NOTE = 'Security-relevant character detected.'


def severity_for_kind(kind: VectorKind, mode: Mode) -> Severity:
    """Severity depends only on (kind, mode)."""
    if kind in _BLOCKING_KINDS:
        return Severity.BLOCK
    if kind in _WARNING_KINDS:
        return Severity.WARN
    return Severity.INFO if mode is Mode.SAFE else Severity.WARN


def note_for_kind(kind: VectorKind) -> str:
    return _NOTES.get(kind, _DEFAULT_NOTE)


def format_code_point(cp: int) -> str:
    return f'U+{cp:05X}'


def build_vector_hits(
    diff_ops: list[DiffOp],
    classifications: list[Classification],
    original: list[str],
    sanitized: list[str],
    mode: Mode,
) -> list[VectorHit]:
    """
    Build hits for every non-equal diff run.

    Args:
        diff_ops: Merged grapheme diff of original vs sanitized
        classifications: Classifier output for the original graphemes
        original: Original grapheme array
        sanitized: Sanitized grapheme array
        mode: Mode used for the sanitize pass (drives severity)

    Returns:
        list[VectorHit]: Hits in diff order, kinds in first-seen order per run.
    """
    by_index: dict[int, list[Classification]] = {}
    for classification in classifications:
        by_index.setdefault(classification.grapheme_index, []).append(classification)

    hits = []
    for op in diff_ops:
        if op.type is DiffOpType.EQUAL or op.a_len == 0:
            continue

        kinds: list[VectorKind] = []
        code_points: list[str] = []
        for index in range(op.a_start, op.a_end):
            for classification in by_index.get(index, ()):
                formatted = format_code_point(classification.codepoint)
                if formatted not in code_points:
                    code_points.append(formatted)
                for kind in classification.kinds:
                    if kind not in kinds:
                        kinds.append(kind)

        if not kinds:
            continue

        original_slice = ''.join(original[op.a_start : op.a_end])
        sanitized_slice = ''.join(sanitized[op.b_start : op.b_end])
        for kind in kinds:
            hits.append(VectorHit(
                id=f'{kind.value}_{uuid.uuid4().hex}',
                kind=kind,
                severity=severity_for_kind(kind, mode),
                original_range=(op.a_start, op.a_end),
                sanitized_range=(op.b_start, op.b_end),
                original_slice=original_slice,
                sanitized_slice=sanitized_slice,
                code_points=list(code_points),
                note=note_for_kind(kind),
            ))

    return hits


def summarize(hits: list[VectorHit]) -> AnalysisSummary:
    counts = Counter(hit.kind.value for hit in hits)
    return AnalysisSummary(
        total_changes=len(hits),
        vector_counts=dict(counts),
        notes=[f'{count} occurrence(s) of {kind}' for kind, count in counts.items()],
    )
