"""
Context layer - domain-specific implementations.
"""

from loggrok.context.library import PatternLibrary, load_builtin_patterns
from loggrok.context.compilation import GrokResolver
from loggrok.context.extraction import TimeParser, convert_value, extract_fields

__all__ = [
    'PatternLibrary',
    'load_builtin_patterns',
    'GrokResolver',
    'TimeParser',
    'convert_value',
    'extract_fields',
]
