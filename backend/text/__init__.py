"""
Unicode text sanitization and attack-vector analysis.
"""

from .diagnostics import Diagnostics
from .models import AnalysisResult, Mode, Severity, Stats, VectorHit, VectorKind
from .sanitization import Sanitizer, analyze, get_default_sanitizer, sanitize
from .services import UnicodeServices

__all__ = [
    'AnalysisResult',
    'Diagnostics',
    'Mode',
    'Sanitizer',
    'Severity',
    'Stats',
    'UnicodeServices',
    'VectorHit',
    'VectorKind',
    'analyze',
    'get_default_sanitizer',
    'sanitize',
]
