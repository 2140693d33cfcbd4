"""
loggrok - Grok pattern parsing for unstructured log lines

Named, composable sub-patterns (%{NAME:field:type:format}) are expanded into a
single matcher and the captured text is converted into typed values.

MCP Architecture:
- Models: Pure data structures (FieldSpec, CompiledGrok, ParseResult)
- Context: Domain implementations (Library, Compilation, Extraction)
- Services: Application orchestration (GrokDefinitionSet, GrokParser)
- CLI: User interface (parse, patterns commands)
"""

__version__ = "1.0.0"
__license__ = "MIT"

from loggrok import models, errors
from loggrok.context import PatternLibrary, load_builtin_patterns, GrokResolver, TimeParser
from loggrok.services import GrokParser, GrokParserConfig, GrokSection, GrokDefinitionSet

__all__ = [
    'models',
    'errors',
    'PatternLibrary',
    'load_builtin_patterns',
    'GrokResolver',
    'TimeParser',
    'GrokParser',
    'GrokParserConfig',
    'GrokSection',
    'GrokDefinitionSet',
]
