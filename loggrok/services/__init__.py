"""
Services layer - application orchestration.
"""

from loggrok.services.config import GrokParserConfig, GrokSection
from loggrok.services.grok_parser import (
    FAILURE_MESSAGE,
    GrokDefinitionSet,
    GrokParser,
    build_definition_set,
)

__all__ = [
    'GrokParserConfig',
    'GrokSection',
    'GrokDefinitionSet',
    'GrokParser',
    'build_definition_set',
    'FAILURE_MESSAGE',
]
