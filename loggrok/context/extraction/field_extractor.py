"""
Field Extractor: typed values from captured substrings

convert_value() is total over ConversionType: every tag has a branch and none
of them raises, so a successful match always yields a record.

    string   raw text, unchanged (quotes and other literals preserved)
    integer  leading signed base-10 integer, 0 when there is none, None when
             the digit run is too long to convert
    float    leading decimal number, 0.0 when there is none
    bool     true/yes -> True, false/no -> False, anything else -> None
    time     explicit strptime format or free-form; None when unparseable
    array    split on the delimiter (',' by default), elements stay strings
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

from loggrok.models import ConversionType, FieldSpec
from loggrok.context.extraction.time_parser import TimeParser

logger = logging.getLogger(__name__)

__all__ = ['convert_value', 'extract_fields', 'TRUE_VALUES', 'FALSE_VALUES']

INTEGER_PREFIX = re.compile(r'\s*([+-]?\d+)')
FLOAT_PREFIX = re.compile(r'\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)')

TRUE_VALUES = frozenset({'true', 'yes'})
FALSE_VALUES = frozenset({'false', 'no'})


def _to_integer(raw: str) -> Optional[int]:
    match = INTEGER_PREFIX.match(raw)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # digit run beyond the interpreter's int conversion limit
        logger.warning("Integer value too long to convert (%d digits)", len(match.group(1)))
        return None


def _to_float(raw: str) -> float:
    match = FLOAT_PREFIX.match(raw)
    return float(match.group(1)) if match else 0.0


def _to_bool(raw: str) -> Optional[bool]:
    lowered = raw.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return None


def convert_value(raw: str, spec: FieldSpec, time_parser: TimeParser) -> Any:
    """
    Convert one captured substring according to its field spec

    Args:
        raw: Captured text
        spec: Field spec carrying the conversion type and format
        time_parser: Parser used for time fields

    Returns:
        The converted value
    """
    conversion = spec.type
    if conversion is ConversionType.STRING:
        return raw
    if conversion is ConversionType.INTEGER:
        return _to_integer(raw)
    if conversion is ConversionType.FLOAT:
        return _to_float(raw)
    if conversion is ConversionType.BOOL:
        return _to_bool(raw)
    if conversion is ConversionType.TIME:
        return time_parser.try_parse(raw, spec.format)
    if conversion is ConversionType.ARRAY:
        return raw.split(spec.delimiter)
    raise AssertionError(f"unhandled conversion type: {conversion}")


def extract_fields(match, field_specs: Iterable[FieldSpec], time_parser: TimeParser) -> Dict[str, Any]:
    """
    Build a record from a successful match

    Fields come out in declaration order. Groups that did not take part in
    the match (an untaken alternative, an optional part) are left out.
    """
    record: Dict[str, Any] = {}
    for spec in field_specs:
        raw = match.group(spec.group_name)
        if raw is None:
            continue
        record[spec.field_name] = convert_value(raw, spec, time_parser)
    return record
