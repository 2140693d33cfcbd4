"""
Parser configuration

The host pipeline owns its configuration syntax; loggrok receives the parsed
values as a plain mapping. Key names follow the grok parser plugin options:

    {
      "grok_failure_key": "grokfailure",
      "custom_pattern_path": "/etc/loggrok/patterns",
      "time_key": "timestamp",
      "time_format": "%d/%b/%Y:%H:%M:%S %z",
      "grok": [
        {"name": "apache", "pattern": "%{COMBINEDAPACHELOG}"},
        {"name": "ip", "pattern": "%{IP:ip_address}"}
      ]
    }
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from loggrok.errors import ConfigurationError
from loggrok.context.compilation import DEFAULT_MAX_DEPTH

__all__ = ['GrokSection', 'GrokParserConfig', 'DEFAULT_TIME_KEY', 'DEFAULT_MATCH_TIMEOUT']

DEFAULT_TIME_KEY = 'time'
DEFAULT_MATCH_TIMEOUT = 1.0


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class GrokSection:
    """One declared grok pattern entry."""
    pattern: str
    name: Optional[str] = None
    time_key: Optional[str] = None
    time_format: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'GrokSection':
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"grok section must be a mapping, got {type(data).__name__}")
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(f"unknown grok section keys: {', '.join(sorted(unknown))}")
        pattern = _optional_str(data, 'pattern')
        if not pattern:
            raise ConfigurationError("grok section requires a 'pattern'")
        return cls(
            pattern=pattern,
            name=_optional_str(data, 'name'),
            time_key=_optional_str(data, 'time_key'),
            time_format=_optional_str(data, 'time_format'),
        )


@dataclass(frozen=True)
class GrokParserConfig:
    """Validated parser settings."""
    grok_pattern: Optional[str] = None
    grok: Tuple[GrokSection, ...] = ()
    grok_failure_key: Optional[str] = None
    custom_pattern_path: Optional[str] = None
    time_key: str = DEFAULT_TIME_KEY
    time_format: Optional[str] = None
    keep_time_key: bool = False
    estimate_current_event: bool = True
    grok_name_key: Optional[str] = None
    timezone: Optional[str] = None
    match_timeout: Optional[float] = DEFAULT_MATCH_TIMEOUT
    max_expansion_depth: int = DEFAULT_MAX_DEPTH

    @property
    def sections(self) -> Tuple[GrokSection, ...]:
        """Declared pattern entries in order; the shorthand comes first."""
        if self.grok_pattern:
            return (GrokSection(pattern=self.grok_pattern),) + tuple(self.grok)
        return tuple(self.grok)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'GrokParserConfig':
        """
        Build a config from a plain mapping

        Raises:
            ConfigurationError: unknown keys or values of the wrong type
        """
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_sections = data.pop('grok', ()) or ()
        if isinstance(raw_sections, Mapping):
            raw_sections = [raw_sections]
        sections = tuple(GrokSection.from_dict(s) for s in raw_sections)

        kwargs: Dict[str, Any] = {'grok': sections}
        for key in ('grok_pattern', 'grok_failure_key', 'custom_pattern_path',
                    'time_format', 'grok_name_key', 'timezone'):
            kwargs[key] = _optional_str(data, key)
        kwargs['time_key'] = _optional_str(data, 'time_key') or DEFAULT_TIME_KEY

        for key in ('keep_time_key', 'estimate_current_event'):
            if key in data:
                if not isinstance(data[key], bool):
                    raise ConfigurationError(f"'{key}' must be a boolean")
                kwargs[key] = data[key]

        if 'match_timeout' in data:
            timeout = data['match_timeout']
            if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
                raise ConfigurationError("'match_timeout' must be a positive number or null")
            kwargs['match_timeout'] = timeout

        if 'max_expansion_depth' in data:
            depth = data['max_expansion_depth']
            if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
                raise ConfigurationError("'max_expansion_depth' must be a positive integer")
            kwargs['max_expansion_depth'] = depth

        return cls(**kwargs)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'GrokParserConfig':
        """Load a config from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"invalid JSON in {path}: {e}") from e
        return cls.from_dict(data)
