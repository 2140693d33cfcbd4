"""
Grok Resolver: macro expansion and compilation into a single matcher

Expands %{NAME[:field[:type[:format]]]} references depth-first against a
pattern library, turns every named reference into a capture group with a
FieldSpec, and compiles the fully expanded text with the `regex` library.

Example:
    Template:  %{INT:user_id:integer} paid %{NUMBER:paid_amount:float}
    Expanded:  (?P<_grok_0>(?:[+-]?(?:[0-9]+))) paid (?P<_grok_1>(?:(?:...)))
    Fields:    user_id (integer), paid_amount (float)

Capture groups get generated names so that field names are free to contain
characters regex group names cannot (dots, brackets, '@').
"""

import logging
from dataclasses import dataclass, field as dataclass_field
from typing import List, Optional, Set, Tuple

import regex

from loggrok.errors import (
    CyclicOrTooDeepExpansionError,
    DuplicateCaptureNameError,
    GrokCompileError,
    PatternCompileError,
    UnknownConversionTypeError,
)
from loggrok.models import CompiledGrok, ConversionType, FieldSpec
from loggrok.context.library import PatternLibrary

logger = logging.getLogger(__name__)

__all__ = ['GrokResolver', 'ExpansionState', 'MACRO_PATTERN', 'DEFAULT_MAX_DEPTH']

DEFAULT_MAX_DEPTH = 50

GROUP_NAME_PREFIX = '_grok_'

# %{NAME}, %{NAME:field}, %{NAME:field:type}, %{NAME:field:type:format}
# The format runs to the closing brace and may itself contain ':'.
MACRO_PATTERN = regex.compile(
    r'%\{(?P<name>\w+)'
    r'(?::(?P<field>[^:}]+)'
    r'(?::(?P<type>[^:}]*)'
    r'(?::(?P<format>[^}]*))?)?)?\}'
)

# Named groups written directly in a template: (?<name>...) or (?P<name>...)
RAW_NAMED_GROUP = regex.compile(r'(?<!\\)\(\?P?<(?P<name>[A-Za-z_]\w*)>')


@dataclass
class ExpansionState:
    """Traversal state carried through one expansion."""
    max_depth: int = DEFAULT_MAX_DEPTH
    path: List[str] = dataclass_field(default_factory=list)
    specs: List[FieldSpec] = dataclass_field(default_factory=list)
    field_names: Set[str] = dataclass_field(default_factory=set)
    group_count: int = 0

    @property
    def depth(self) -> int:
        return len(self.path)

    def enter(self, name: str):
        if name in self.path:
            chain = ' -> '.join(self.path + [name])
            raise CyclicOrTooDeepExpansionError(f"cyclic grok pattern reference: {chain}")
        if self.depth >= self.max_depth:
            raise CyclicOrTooDeepExpansionError(
                f"grok pattern expansion deeper than {self.max_depth} levels at {name}"
            )
        self.path.append(name)

    def leave(self):
        self.path.pop()

    def next_group_name(self) -> str:
        group_name = f"{GROUP_NAME_PREFIX}{self.group_count}"
        self.group_count += 1
        return group_name

    def add_spec(self, spec: FieldSpec, position: Optional[int] = None):
        if spec.field_name in self.field_names:
            raise DuplicateCaptureNameError(spec.field_name)
        self.field_names.add(spec.field_name)
        if position is None:
            self.specs.append(spec)
        else:
            self.specs.insert(position, spec)

    def replace_spec(self, old: FieldSpec, new: FieldSpec):
        self.specs[self.specs.index(old)] = new


def parse_conversion(field_name: str, type_token: Optional[str]) -> ConversionType:
    """
    Map a type token to a ConversionType

    Raises:
        UnknownConversionTypeError: token is not a recognized type
    """
    if type_token is None:
        return ConversionType.STRING
    try:
        return ConversionType(type_token)
    except ValueError:
        raise UnknownConversionTypeError(field_name, type_token) from None


class GrokResolver:
    """
    Compile grok templates against a pattern library

    Process:
    1. Scan the template left to right for macro references
    2. Look each name up in the library and expand its body recursively
    3. Wrap named references in capture groups, record their FieldSpecs
    4. Compile the expanded text into one matcher
    """

    def __init__(self, library: PatternLibrary, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Args:
            library: Pattern library used to resolve macro names
            max_depth: Maximum nesting of macro references
        """
        self.library = library
        self.max_depth = max_depth

    def compile(self, template: str, name: Optional[str] = None,
                time_key: Optional[str] = None,
                time_format: Optional[str] = None) -> CompiledGrok:
        """
        Expand and compile a grok template

        Args:
            template: Grok template, e.g. '%{IP:client} %{WORD:verb}'
            name: Optional label for the definition
            time_key: Optional per-definition time key override
            time_format: Optional per-definition time format override

        Returns:
            CompiledGrok with its matcher and ordered field specs

        Raises:
            PatternNotFoundError, CyclicOrTooDeepExpansionError,
            UnknownConversionTypeError, DuplicateCaptureNameError,
            PatternCompileError
        """
        state = ExpansionState(max_depth=self.max_depth)
        try:
            expanded, _ = self._expand(template, state)
            try:
                matcher = regex.compile(expanded)
            except regex.error as e:
                raise PatternCompileError(f"invalid expanded grok pattern: {e}") from e
        except GrokCompileError as e:
            if e.pattern is None:
                e.pattern = template
            raise

        logger.debug("Compiled grok pattern %r into %d fields", template, len(state.specs))
        return CompiledGrok(
            source_pattern=template,
            matcher=matcher,
            field_specs=tuple(state.specs),
            name=name,
            time_key=time_key,
            time_format=time_format,
        )

    def expand(self, template: str) -> Tuple[str, Tuple[FieldSpec, ...]]:
        """Expand a template without compiling it."""
        state = ExpansionState(max_depth=self.max_depth)
        expanded, _ = self._expand(template, state)
        return expanded, tuple(state.specs)

    def _expand(self, template: str, state: ExpansionState) -> Tuple[str, Optional[FieldSpec]]:
        """
        Expand every macro in a template

        Returns the expanded text and, when the template is nothing but one
        capturing reference, that reference's FieldSpec.
        """
        pieces = []
        last_end = 0
        sole_spec = None

        for macro in MACRO_PATTERN.finditer(template):
            self._register_raw_groups(template[last_end:macro.start()], state)
            pieces.append(template[last_end:macro.start()])
            text, spec = self._expand_reference(macro, state)
            pieces.append(text)
            last_end = macro.end()
            if macro.start() == 0 and macro.end() == len(template):
                sole_spec = spec

        self._register_raw_groups(template[last_end:], state)
        pieces.append(template[last_end:])
        return ''.join(pieces), sole_spec

    def _expand_reference(self, macro, state: ExpansionState) -> Tuple[str, Optional[FieldSpec]]:
        name = macro.group('name')
        field_name = macro.group('field')
        type_token = macro.group('type')
        fmt = macro.group('format')

        conversion = None
        if field_name is not None:
            conversion = parse_conversion(field_name, type_token)

        body = self.library.lookup(name)

        position = len(state.specs)
        state.enter(name)
        expanded, inner_spec = self._expand(body, state)
        state.leave()

        if field_name is None:
            return f"(?:{expanded})", None

        if conversion not in (ConversionType.TIME, ConversionType.ARRAY):
            fmt = None

        # %{ALIAS:f} where ALIAS is exactly %{OTHER:f}: one capture, outer type wins
        if inner_spec is not None and inner_spec.field_name == field_name:
            if type_token is None:
                return expanded, inner_spec
            spec = FieldSpec(inner_spec.group_name, field_name, conversion, fmt)
            state.replace_spec(inner_spec, spec)
            return expanded, spec

        spec = FieldSpec(state.next_group_name(), field_name, conversion, fmt)
        state.add_spec(spec, position)
        return f"(?P<{spec.group_name}>{expanded})", spec

    def _register_raw_groups(self, literal: str, state: ExpansionState):
        for group in RAW_NAMED_GROUP.finditer(literal):
            group_name = group.group('name')
            state.add_spec(FieldSpec(group_name, group_name))
