"""
Pattern Library: named grok templates, builtin plus custom overrides

The library is an immutable snapshot. The builtin table is built by an
explicit call to load_builtin_patterns(); layering custom pattern files on
top returns a new snapshot and leaves the original untouched.

Pattern file format (builtin table and custom files alike):

    # comment
    NAME template text with %{OTHER} references

Blank lines and lines starting with '#' are ignored. The first run of
whitespace separates the name from the template; trailing whitespace is
dropped.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from loggrok.errors import ConfigurationError, MalformedPatternLineError, PatternNotFoundError
from loggrok.models import PatternDefinition
from loggrok.context.library.builtin_patterns import BUILTIN_PATTERNS, BUILTIN_PATTERNS_SOURCE

logger = logging.getLogger(__name__)

__all__ = [
    'PatternLibrary',
    'load_builtin_patterns',
    'read_pattern_lines',
    'read_pattern_file',
]


def read_pattern_lines(lines: Iterable[str], source: str) -> Iterator[PatternDefinition]:
    """
    Parse ``NAME template`` lines into pattern definitions

    Args:
        lines: Raw lines (trailing newlines allowed)
        source: Label used in error messages (file path or '<builtin>')

    Yields:
        PatternDefinition for every non-blank, non-comment line

    Raises:
        MalformedPatternLineError: a line names a pattern but has no template
    """
    for line_number, raw_line in enumerate(lines, 1):
        line = raw_line.rstrip('\r\n')
        stripped = line.lstrip()
        if not stripped or stripped.startswith('#'):
            continue

        parts = stripped.rstrip().split(None, 1)
        if len(parts) != 2:
            raise MalformedPatternLineError(source, line_number, line)

        yield PatternDefinition(name=parts[0], template=parts[1])


def read_pattern_file(path: Union[str, Path]) -> List[PatternDefinition]:
    """
    Read one pattern file; the handle is closed on every exit path.

    Raises:
        ConfigurationError: the file is not valid UTF-8 or has a malformed line
        OSError: the file cannot be read
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            return list(read_pattern_lines(f, str(path)))
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"pattern file {path} is not valid UTF-8: {e}") from e


def _pattern_files(path: Path) -> List[Path]:
    if path.is_dir():
        return sorted(p for p in path.iterdir() if p.is_file())
    return [path]


class PatternLibrary:
    """
    Read-only mapping of pattern names to their definitions

    Use load_builtin_patterns() for the stock table, then merge() or
    with_custom_patterns() to layer overrides on top.
    """

    def __init__(self, definitions: Optional[Mapping[str, PatternDefinition]] = None):
        self._definitions = MappingProxyType(dict(definitions or {}))

    def lookup(self, name: str) -> str:
        """
        Resolve a pattern name to its template text

        Raises:
            PatternNotFoundError: name is not defined
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise PatternNotFoundError(name)
        return definition.template

    def get(self, name: str) -> Optional[PatternDefinition]:
        return self._definitions.get(name)

    def merge(self, definitions: Iterable[PatternDefinition]) -> 'PatternLibrary':
        """
        Layer definitions on top of this library

        Later definitions win over earlier ones and over existing entries of
        the same name. Returns a new library.
        """
        merged: Dict[str, PatternDefinition] = dict(self._definitions)
        for definition in definitions:
            merged[definition.name] = definition
        return PatternLibrary(merged)

    def with_custom_patterns(self, path: Union[str, Path]) -> 'PatternLibrary':
        """
        Layer a custom pattern file (or every file of a directory) on top

        Raises:
            MalformedPatternLineError: a line has a name but no template
            ConfigurationError: a file is not valid UTF-8
            OSError: the path cannot be read
        """
        path = Path(path)
        definitions: List[PatternDefinition] = []
        for pattern_file in _pattern_files(path):
            loaded = read_pattern_file(pattern_file)
            logger.debug("Loaded %d custom grok patterns from %s", len(loaded), pattern_file)
            definitions.extend(loaded)
        return self.merge(definitions)

    def names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._definitions))

    def items(self) -> Iterator[Tuple[str, str]]:
        for name in self.names():
            yield name, self._definitions[name].template

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self):
        return f"PatternLibrary({len(self)} patterns)"


def load_builtin_patterns() -> PatternLibrary:
    """Build the builtin pattern library."""
    definitions = read_pattern_lines(BUILTIN_PATTERNS.splitlines(), BUILTIN_PATTERNS_SOURCE)
    return PatternLibrary().merge(definitions)
