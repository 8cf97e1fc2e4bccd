"""
Routes package for the Unicode Text Linter API.
Contains Flask Blueprints for each endpoint group.
"""

from .clean import bp as clean_bp
from .health import bp as health_bp

__all__ = ['clean_bp', 'health_bp']
