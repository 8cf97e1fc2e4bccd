"""
Value types shared by the sanitization pipeline and the analysis layer.

Everything here is constructed fresh per call. to_dict() methods produce the
JSON shapes returned by the HTTP layer.
"""

from dataclasses import dataclass, field, fields
from enum import Enum


class Mode(str, Enum):
    """Security profile driving which steps run and how hard they cut."""

    SAFE = 'safe'
    AGGRESSIVE = 'aggressive'
    STRICT = 'strict'

    @classmethod
    def coerce(cls, value) -> 'Mode':
        """Map any input to a Mode; anything but an exact mode name becomes SAFE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.SAFE


class VectorKind(str, Enum):
    BIDI_CONTROLS = 'bidi_controls'
    MIXED_SCRIPTS = 'mixed_scripts'
    DEFAULT_IGNORABLES = 'default_ignorables'
    TAG_CHARACTERS = 'tag_characters'
    ORPHAN_COMBINING_MARKS = 'orphan_combining_marks'
    CONFUSABLES = 'confusables'
    NONCHARACTERS = 'noncharacters'
    PRIVATE_USE = 'private_use'
    NON_ASCII_DIGITS = 'non_ascii_digits'


class Severity(str, Enum):
    INFO = 'info'
    WARN = 'warn'
    BLOCK = 'block'


class DiffOpType(str, Enum):
    EQUAL = 'equal'
    INSERT = 'insert'
    DELETE = 'delete'


@dataclass
class Advisories:
    """
    Security advisory flags raised while sanitizing.

    Flags are only ever raised within a run; nothing resets them.
    """

    had_bidi_controls: bool = False
    had_mixed_scripts: bool = False
    had_default_ignorables: bool = False
    had_tag_chars: bool = False
    had_orphan_combining: bool = False
    confusable_suspected: bool = False
    had_html_entities: bool = False
    had_ascii_controls: bool = False
    had_noncharacters: bool = False
    had_private_use: bool = False
    had_mirrored_punctuation: bool = False
    had_non_ascii_digits: bool = False

    def raise_flag(self, name: str) -> None:
        if not hasattr(self, name):
            raise AttributeError(f'Unknown advisory: {name}')
        setattr(self, name, True)

    def triggered(self) -> list[str]:
        """Names of the advisories that were raised, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name)]

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class Stats:
    """Counters and advisories accumulated over one pipeline run."""

    original_length: int = 0
    final_length: int | None = None
    characters_removed: int = 0
    mode: Mode = Mode.SAFE
    invisibles_removed: int = 0
    homoglyphs_normalized: int = 0
    digits_normalized: int = 0
    advisories: Advisories = field(default_factory=Advisories)

    def to_dict(self) -> dict:
        return {
            'original_length': self.original_length,
            'final_length': self.final_length,
            'characters_removed': self.characters_removed,
            'mode': self.mode.value,
            'invisibles_removed': self.invisibles_removed,
            'homoglyphs_normalized': self.homoglyphs_normalized,
            'digits_normalized': self.digits_normalized,
            'advisories': self.advisories.to_dict(),
        }


@dataclass(frozen=True)
class Classification:
    """A codepoint of the original text that belongs to one or more vector kinds."""

    grapheme_index: int
    codepoint: int
    kinds: tuple[VectorKind, ...]


@dataclass
class DiffOp:
    """One run of a grapheme diff; ranges are half-open [start, start + len)."""

    type: DiffOpType
    a_start: int
    a_len: int
    b_start: int
    b_len: int

    @property
    def a_end(self) -> int:
        return self.a_start + self.a_len

    @property
    def b_end(self) -> int:
        return self.b_start + self.b_len

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'aStart': self.a_start,
            'aLen': self.a_len,
            'bStart': self.b_start,
            'bLen': self.b_len,
        }


@dataclass
class VectorHit:
    """An auditable finding: one vector kind observed in one changed diff run."""

    id: str
    kind: VectorKind
    severity: Severity
    original_range: tuple[int, int]
    sanitized_range: tuple[int, int]
    original_slice: str
    sanitized_slice: str
    code_points: list[str]
    note: str

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'kind': self.kind.value,
            'severity': self.severity.value,
            'originalRange': {
                'startGrapheme': self.original_range[0],
                'endGrapheme': self.original_range[1],
            },
            'sanitizedRange': {
                'startGrapheme': self.sanitized_range[0],
                'endGrapheme': self.sanitized_range[1],
            },
            'originalSlice': self.original_slice,
            'sanitizedSlice': self.sanitized_slice,
            'codePoints': list(self.code_points),
            'note': self.note,
        }


@dataclass
class AnalysisSummary:
    total_changes: int = 0
    vector_counts: dict[str, int] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'totalChanges': self.total_changes,
            'vectorCounts': dict(self.vector_counts),
            'notes': list(self.notes),
        }


@dataclass
class AnalysisResult:
    original_text: str
    sanitized_text: str
    hits: list[VectorHit]
    summary: AnalysisSummary
    diff_ops: list[DiffOp]
    stats: Stats

    def to_dict(self) -> dict:
        return {
            'originalText': self.original_text,
            'sanitizedText': self.sanitized_text,
            'hits': [hit.to_dict() for hit in self.hits],
            'summary': self.summary.to_dict(),
            'diffOps': [op.to_dict() for op in self.diff_ops],
            'stats': self.stats.to_dict(),
        }
