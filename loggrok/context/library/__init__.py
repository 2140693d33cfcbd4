"""
Pattern library context.
"""

from loggrok.context.library.pattern_library import (
    PatternLibrary,
    load_builtin_patterns,
    read_pattern_file,
    read_pattern_lines,
)

__all__ = ['PatternLibrary', 'load_builtin_patterns', 'read_pattern_file', 'read_pattern_lines']
