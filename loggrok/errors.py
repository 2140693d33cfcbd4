"""
Exception taxonomy for grok compilation and parser configuration.

Compile errors are fatal for a single grok definition only; the definition set
catches them, logs them and drops the failing entry. ConfigurationError is
fatal for the whole parser instance.
"""

__all__ = [
    'GrokError',
    'GrokCompileError',
    'PatternNotFoundError',
    'CyclicOrTooDeepExpansionError',
    'UnknownConversionTypeError',
    'DuplicateCaptureNameError',
    'PatternCompileError',
    'ConfigurationError',
    'MalformedPatternLineError',
]


class GrokError(Exception):
    """Base class for every error raised by loggrok."""


class GrokCompileError(GrokError):
    """A single grok definition could not be compiled."""

    def __init__(self, message: str, pattern: str = None):
        super().__init__(message)
        self.pattern = pattern


class PatternNotFoundError(GrokCompileError):
    """A macro references a name absent from the pattern library."""

    def __init__(self, name: str, pattern: str = None):
        super().__init__(f"grok pattern not found: {name}", pattern)
        self.name = name


class CyclicOrTooDeepExpansionError(GrokCompileError):
    """A macro chain refers back to itself or nests beyond the depth limit."""


class UnknownConversionTypeError(GrokCompileError):
    """A field declares a type token outside the recognized set."""

    def __init__(self, key: str, type_name: str, pattern: str = None):
        super().__init__(
            f"unknown value conversion for key:'{key}', type:'{type_name}'",
            pattern,
        )
        self.key = key
        self.type_name = type_name


class DuplicateCaptureNameError(GrokCompileError):
    """Two captures of one definition share a field name."""

    def __init__(self, field_name: str, pattern: str = None):
        super().__init__(f"duplicate capture name: '{field_name}'", pattern)
        self.field_name = field_name


class PatternCompileError(GrokCompileError):
    """The fully expanded expression is not a valid regular expression."""


class ConfigurationError(GrokError):
    """The parser configuration cannot produce a usable parser."""


class MalformedPatternLineError(ConfigurationError):
    """A pattern file line has a name but no template."""

    def __init__(self, source: str, line_number: int, line: str):
        super().__init__(
            f"malformed pattern definition at {source}:{line_number}: {line!r}"
        )
        self.source = source
        self.line_number = line_number
        self.line = line
