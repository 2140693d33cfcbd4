"""
Grok Parser: ordered multi-pattern matching with typed field extraction

A GrokDefinitionSet holds compiled definitions in declaration order and tries
them one after another; the first match wins. When nothing matches, the line
comes back as a failure record instead of an exception:

    {"message": "<the line>"}                                  # no failure key
    {"grokfailure": "No grok pattern matched", "message": ...} # with one

Building a set compiles every declared entry on its own. An entry that fails
to compile is logged and dropped; the set is only rejected when no entry
survives.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from loggrok.errors import ConfigurationError, GrokCompileError, UnknownConversionTypeError
from loggrok.models import CompiledGrok, ParseResult
from loggrok.context.library import PatternLibrary, load_builtin_patterns
from loggrok.context.compilation import GrokResolver
from loggrok.context.extraction import TimeParser, extract_fields
from loggrok.services.config import DEFAULT_MATCH_TIMEOUT, GrokParserConfig, GrokSection
from loggrok.utils.logging import log_event

logger = logging.getLogger(__name__)

__all__ = [
    'GrokDefinitionSet',
    'GrokParser',
    'build_definition_set',
    'FAILURE_MESSAGE',
    'NO_PATTERNS_MESSAGE',
]

FAILURE_MESSAGE = "No grok pattern matched"
NO_PATTERNS_MESSAGE = "no grok patterns"

RecordCallback = Callable[[Optional[datetime], Dict[str, Any]], None]


class GrokDefinitionSet:
    """
    Ordered, immutable collection of compiled grok definitions

    Dispatch is a short-circuit linear scan in declaration order.
    """

    def __init__(self, definitions: Iterable[CompiledGrok],
                 failure_key: Optional[str] = None,
                 match_timeout: Optional[float] = DEFAULT_MATCH_TIMEOUT):
        """
        Args:
            definitions: Compiled definitions, in declaration order
            failure_key: Record key flagging unmatched lines (omitted when None)
            match_timeout: Per-definition matching budget in seconds (None: unbounded)

        Raises:
            ConfigurationError: no definitions
        """
        self.definitions: Tuple[CompiledGrok, ...] = tuple(definitions)
        if not self.definitions:
            raise ConfigurationError(NO_PATTERNS_MESSAGE)
        self.failure_key = failure_key
        self.match_timeout = match_timeout

    def match(self, text: str) -> Optional[Tuple[CompiledGrok, Any]]:
        """
        Find the first definition matching text

        Returns:
            (definition, match object) or None when nothing matches. A
            definition exceeding the time budget counts as a non-match.
        """
        for definition in self.definitions:
            try:
                match = definition.matcher.search(text, timeout=self.match_timeout)
            except TimeoutError:
                log_event(
                    logger, 'grok_match_timeout', level=logging.WARNING,
                    message=f"Grok pattern {definition.source_pattern!r} exceeded "
                            f"{self.match_timeout}s, treated as no match",
                    pattern=definition.source_pattern,
                    timeout=self.match_timeout,
                )
                continue
            if match is not None:
                return definition, match
        return None

    def failure_record(self, text: str) -> Dict[str, Any]:
        """Record produced for a line no definition matched."""
        record: Dict[str, Any] = {}
        if self.failure_key:
            record[self.failure_key] = FAILURE_MESSAGE
        record['message'] = text
        return record

    def __iter__(self) -> Iterator[CompiledGrok]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def __repr__(self):
        return f"GrokDefinitionSet({len(self)} definitions, failure_key={self.failure_key!r})"


def build_definition_set(sections: Sequence[GrokSection], resolver: GrokResolver,
                         failure_key: Optional[str] = None,
                         match_timeout: Optional[float] = DEFAULT_MATCH_TIMEOUT) -> GrokDefinitionSet:
    """
    Compile declared entries into a definition set, dropping failures

    Each failure is logged once as a structured 'grok_compile_failed' event
    carrying error_class, error and pattern (plus key/type for conversion
    errors).

    Raises:
        ConfigurationError: no entries declared, or none compiled
    """
    if not sections:
        raise ConfigurationError(NO_PATTERNS_MESSAGE)

    compiled = []
    last_error = None
    for section in sections:
        try:
            compiled.append(resolver.compile(
                section.pattern,
                name=section.name,
                time_key=section.time_key,
                time_format=section.time_format,
            ))
        except GrokCompileError as e:
            last_error = e
            details = {
                'error_class': type(e).__name__,
                'error': str(e),
                'pattern': section.pattern,
            }
            if isinstance(e, UnknownConversionTypeError):
                details['key'] = e.key
                details['type'] = e.type_name
            log_event(
                logger, 'grok_compile_failed', level=logging.ERROR,
                message=f"error_class={type(e).__name__} error=\"{e}\" pattern={section.pattern!r}",
                **details,
            )

    if not compiled:
        raise ConfigurationError(NO_PATTERNS_MESSAGE) from last_error

    logger.debug("Compiled %d of %d grok patterns", len(compiled), len(sections))
    return GrokDefinitionSet(compiled, failure_key=failure_key, match_timeout=match_timeout)


class GrokParser:
    """
    Configured grok parser: the surface a host pipeline drives

    Built once at configure time; parse() is pure and may be called from
    several threads at once.

    Example:
        parser = GrokParser.from_dict({'grok_pattern': '%{INT:n:integer}'})
        result = parser.parse('42')
        result.record  # {'n': 42}
    """

    def __init__(self, config: GrokParserConfig, library: Optional[PatternLibrary] = None):
        """
        Args:
            config: Validated parser settings
            library: Base pattern library (builtin patterns when None)

        Raises:
            ConfigurationError: unreadable pattern files, bad timezone or no usable patterns
        """
        self.config = config

        library = library if library is not None else load_builtin_patterns()
        if config.custom_pattern_path:
            try:
                library = library.with_custom_patterns(config.custom_pattern_path)
            except OSError as e:
                raise ConfigurationError(
                    f"cannot read custom pattern path {config.custom_pattern_path!r}: {e}"
                ) from e
        self.library = library

        self.resolver = GrokResolver(library, max_depth=config.max_expansion_depth)
        self.time_parser = TimeParser(config.timezone)
        self.definition_set = build_definition_set(
            config.sections,
            self.resolver,
            failure_key=config.grok_failure_key,
            match_timeout=config.match_timeout,
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], library: Optional[PatternLibrary] = None) -> 'GrokParser':
        return cls(GrokParserConfig.from_dict(data), library=library)

    @property
    def definitions(self) -> Tuple[CompiledGrok, ...]:
        return self.definition_set.definitions

    def parse(self, text: str, callback: Optional[RecordCallback] = None) -> ParseResult:
        """
        Parse one line

        Args:
            text: Input line
            callback: Optional sink called with (time, record)

        Returns:
            ParseResult; unmatched lines carry the failure record
        """
        found = self.definition_set.match(text)
        if found is None:
            result = ParseResult(
                matched=False,
                time=self._fallback_time(),
                record=self.definition_set.failure_record(text),
            )
        else:
            definition, match = found
            record = extract_fields(match, definition.field_specs, self.time_parser)
            event_time = self._event_time(definition, record)
            if self.config.grok_name_key and definition.name is not None:
                record[self.config.grok_name_key] = definition.name
            result = ParseResult(matched=True, time=event_time, record=record, definition=definition)

        if callback is not None:
            callback(result.time, result.record)
        return result

    def parse_lines(self, lines: Iterable[str]) -> Iterator[ParseResult]:
        """Parse lines one by one, dropping trailing newlines."""
        for line in lines:
            yield self.parse(line.rstrip('\r\n'))

    def _event_time(self, definition: CompiledGrok, record: Dict[str, Any]) -> Optional[datetime]:
        """Take the event time from the record's time key field."""
        time_key = definition.time_key or self.config.time_key
        time_format = definition.time_format or self.config.time_format
        if time_key not in record:
            return self._fallback_time()

        value = record[time_key]
        if isinstance(value, datetime):
            parsed = value
        elif value is None:
            parsed = None
        else:
            parsed = self.time_parser.try_parse(str(value), time_format)

        if parsed is None:
            return self._fallback_time()
        if not self.config.keep_time_key:
            del record[time_key]
        return parsed

    def _fallback_time(self) -> Optional[datetime]:
        if self.config.estimate_current_event:
            return datetime.now(timezone.utc)
        return None
