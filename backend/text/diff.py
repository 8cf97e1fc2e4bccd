"""
Grapheme-level diff engine.

Two interchangeable strategies produce equal/insert/delete runs over grapheme
arrays:

- SequenceMatcherDiff: library-backed (difflib), preferred.
- LcsDiff: built-in O(m*n) longest-common-subsequence table with backtrace.

diff_graphemes() trims the common prefix and suffix, runs the strategy on the
changed middle only, and merges contiguous runs of the same type.
"""

import difflib
import logging
from typing import Protocol

from .models import DiffOp, DiffOpType

logger = logging.getLogger(__name__)


class DiffAlgorithm(Protocol):
    name: str

    def diff(self, a: list[str], b: list[str]) -> list[DiffOp]: ...


class SequenceMatcherDiff:
    """Diff backed by difflib.SequenceMatcher; replace blocks become delete + insert."""

    name = 'difflib'

    def diff(self, a: list[str], b: list[str]) -> list[DiffOp]:
        matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)
        ops = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'equal':
                ops.append(DiffOp(DiffOpType.EQUAL, i1, i2 - i1, j1, j2 - j1))
            elif tag == 'delete':
                ops.append(DiffOp(DiffOpType.DELETE, i1, i2 - i1, j1, 0))
            elif tag == 'insert':
                ops.append(DiffOp(DiffOpType.INSERT, i1, 0, j1, j2 - j1))
            else:
                ops.append(DiffOp(DiffOpType.DELETE, i1, i2 - i1, j1, 0))
                ops.append(DiffOp(DiffOpType.INSERT, i2, 0, j1, j2 - j1))
        return ops


class LcsDiff:
    """
    Classic LCS dynamic-programming diff.

    Backtracking prefers insertions on ties, so inside a replaced region the
    deletions come first, as with SequenceMatcherDiff.
    """

    name = 'lcs'

    def diff(self, a: list[str], b: list[str]) -> list[DiffOp]:
        m = len(a)
        n = len(b)

        table = [[0] * (n + 1) for _ in range(m + 1)]
        for i in range(1, m + 1):
            row = table[i]
            previous_row = table[i - 1]
            a_item = a[i - 1]
            for j in range(1, n + 1):
                if a_item == b[j - 1]:
                    row[j] = previous_row[j - 1] + 1
                else:
                    row[j] = max(previous_row[j], row[j - 1])

        ops = []
        i = m
        j = n
        while i > 0 or j > 0:
            if i > 0 and j > 0 and a[i - 1] == b[j - 1]:
                ops.append(DiffOp(DiffOpType.EQUAL, i - 1, 1, j - 1, 1))
                i -= 1
                j -= 1
            elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
                ops.append(DiffOp(DiffOpType.INSERT, i, 0, j - 1, 1))
                j -= 1
            else:
                ops.append(DiffOp(DiffOpType.DELETE, i - 1, 1, j, 0))
                i -= 1

        ops.reverse()
        return merge_ops(ops)


def merge_ops(ops: list[DiffOp]) -> list[DiffOp]:
    """Merge neighbouring ops of the same type whose ranges touch on both sides."""
    if not ops:
        return []

    merged = []
    current = DiffOp(ops[0].type, ops[0].a_start, ops[0].a_len, ops[0].b_start, ops[0].b_len)
    for op in ops[1:]:
        if op.type == current.type and op.a_start == current.a_end and op.b_start == current.b_end:
            current.a_len += op.a_len
            current.b_len += op.b_len
        else:
            merged.append(current)
            current = DiffOp(op.type, op.a_start, op.a_len, op.b_start, op.b_len)
    merged.append(current)
    return merged


def diff_graphemes(
    a: list[str],
    b: list[str],
    algorithm: DiffAlgorithm | None = None,
    diagnostics=None,
) -> list[DiffOp]:
    """
    Diff two grapheme arrays.

    Args:
        a: Original graphemes
        b: Sanitized graphemes
        algorithm: Strategy for the changed middle; LcsDiff when None
        diagnostics: Optional Diagnostics sink for strategy failures

    Returns:
        list[DiffOp]: Merged ops covering both arrays end to end.
    """
    shortest = min(len(a), len(b))

    prefix = 0
    while prefix < shortest and a[prefix] == b[prefix]:
        prefix += 1

    suffix = 0
    while suffix < shortest - prefix and a[len(a) - 1 - suffix] == b[len(b) - 1 - suffix]:
        suffix += 1

    ops = []
    if prefix:
        ops.append(DiffOp(DiffOpType.EQUAL, 0, prefix, 0, prefix))

    middle_a = a[prefix : len(a) - suffix]
    middle_b = b[prefix : len(b) - suffix]
    if middle_a or middle_b:
        for op in _diff_middle(middle_a, middle_b, algorithm, diagnostics):
            op.a_start += prefix
            op.b_start += prefix
            ops.append(op)

    if suffix:
        ops.append(DiffOp(DiffOpType.EQUAL, len(a) - suffix, suffix, len(b) - suffix, suffix))

    return merge_ops(ops)


def _diff_middle(a, b, algorithm, diagnostics) -> list[DiffOp]:
    if algorithm is None:
        return LcsDiff().diff(a, b)

    try:
        return algorithm.diff(a, b)
    except Exception as e:
        message = f'{algorithm.name} diff failed ({type(e).__name__}: {e}); falling back to LCS diff'
        if diagnostics is not None:
            diagnostics.warn_once('diff_library_failure', message)
        else:
            logger.warning(f'[DIFF] {message}')
        return LcsDiff().diff(a, b)
