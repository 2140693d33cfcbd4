"""
Field extraction context.
"""

from loggrok.context.extraction.field_extractor import convert_value, extract_fields
from loggrok.context.extraction.time_parser import TimeParser, resolve_timezone

__all__ = ['convert_value', 'extract_fields', 'TimeParser', 'resolve_timezone']
