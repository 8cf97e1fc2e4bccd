"""
Final cleanup: trim, rebuild paragraphs, tidy spacing before punctuation.

Soft-wrapped lines are joined into one paragraph line. A paragraph ends at a
blank line, before a list item, or when the previous line ends a sentence and
the next one starts a new one. The result always ends with exactly one newline
(or is empty).
"""

import re

_WHITESPACE_RUN = re.compile(r'\s+')
_LIST_ITEM = re.compile(r'^(?:\d+\.|[-*•])\s')
_SENTENCE_END = re.compile(r'[.?!:]["\')\]]?$')
_SENTENCE_START = re.compile(r'^["\'(\[]?[A-Z0-9]')
_SPACE_BEFORE_PUNCTUATION = re.compile(r' ([.,!?;:])')


def final_cleanup(text: str) -> str:
    text = text.strip()
    if not text:
        return ''

    paragraphs = []
    buffer: list[str] = []

    def flush():
        if buffer:
            paragraphs.append(_WHITESPACE_RUN.sub(' ', ' '.join(buffer)).strip())
            buffer.clear()

    for raw_line in text.split('\n'):
        line = _WHITESPACE_RUN.sub(' ', raw_line.strip())
        if not line:
            flush()
            continue

        if buffer and _starts_new_paragraph(buffer[-1], line):
            flush()
        buffer.append(line)
    flush()

    joined = '\n\n'.join(p for p in paragraphs if p)
    joined = _SPACE_BEFORE_PUNCTUATION.sub(r'\1', joined)
    return joined.rstrip('\n') + '\n'


def _starts_new_paragraph(previous: str, line: str) -> bool:
    if _LIST_ITEM.match(line):
        return True
    return bool(_SENTENCE_END.search(previous) and _SENTENCE_START.match(line))
