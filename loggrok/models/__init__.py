"""
Data models for loggrok.

This module contains pure data structures with no business logic.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from enum import Enum

__all__ = [
    'PatternDefinition',
    'ConversionType',
    'FieldSpec',
    'CompiledGrok',
    'ParseResult',
    'DEFAULT_ARRAY_DELIMITER',
]

DEFAULT_ARRAY_DELIMITER = ','


@dataclass(frozen=True)
class PatternDefinition:
    """A named grok template."""
    name: str
    template: str


class ConversionType(Enum):
    """Closed set of value conversions a field may declare."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    TIME = "time"
    ARRAY = "array"


@dataclass(frozen=True)
class FieldSpec:
    """Declared name and conversion for one capture group."""
    group_name: str
    field_name: str
    type: ConversionType = ConversionType.STRING
    format: Optional[str] = None  # strptime format or array delimiter

    @property
    def delimiter(self) -> str:
        return self.format or DEFAULT_ARRAY_DELIMITER


@dataclass(frozen=True)
class CompiledGrok:
    """A grok template expanded and compiled into a single matcher."""
    source_pattern: str
    matcher: Any  # regex.Pattern
    field_specs: Tuple[FieldSpec, ...]
    name: Optional[str] = None
    time_key: Optional[str] = None
    time_format: Optional[str] = None

    @property
    def expanded_pattern(self) -> str:
        return self.matcher.pattern

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.field_name for spec in self.field_specs)

    def spec_for(self, field_name: str) -> Optional[FieldSpec]:
        for spec in self.field_specs:
            if spec.field_name == field_name:
                return spec
        return None


@dataclass
class ParseResult:
    """Outcome of parsing one line of text."""
    matched: bool
    time: Optional[datetime]
    record: Dict[str, Any] = dataclass_field(default_factory=dict)
    definition: Optional[CompiledGrok] = None

    def __iter__(self):
        # Unpacks as (matched, time, record)
        return iter((self.matched, self.time, self.record))
