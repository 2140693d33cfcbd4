"""
Pytest configuration and shared fixtures for loggrok tests
"""

import logging
import pytest
from pathlib import Path
from typing import Callable, Dict, List

from loggrok.context.library import load_builtin_patterns, PatternLibrary
from loggrok.context.compilation import GrokResolver
from loggrok.context.extraction import TimeParser
from loggrok.services import GrokParser


@pytest.fixture(scope="session")
def builtin_library() -> PatternLibrary:
    """Builtin pattern library, built once per session"""
    return load_builtin_patterns()


@pytest.fixture
def resolver(builtin_library) -> GrokResolver:
    """Resolver over the builtin patterns"""
    return GrokResolver(builtin_library)


@pytest.fixture
def utc_time_parser() -> TimeParser:
    """Time parser placing naive times in UTC"""
    return TimeParser("UTC")


@pytest.fixture
def make_parser() -> Callable[..., GrokParser]:
    """Build a parser from config keys; naive times default to UTC"""
    def _make(**config) -> GrokParser:
        config.setdefault("timezone", "UTC")
        return GrokParser.from_dict(config)
    return _make


@pytest.fixture
def pattern_file(tmp_path) -> Callable[[str, str], Path]:
    """Write a custom pattern file and return its path"""
    def _write(content: str, name: str = "my_pattern") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_logs() -> List[str]:
    """Sample log lines for testing"""
    return [
        '127.0.0.1 192.168.0.1 - [28/Feb/2013:12:00:00 +0900] "GET / HTTP/1.1" 200 777 "-" "Opera/12.0"',
        '10.0.0.5 - frank [10/Oct/2000:13:55:36 -0700] "POST /login HTTP/1.0" 302 - "http://example.com/" "curl/7.1"',
        "Aug  1 00:00:00 web01 sshd[2931]: Accepted publickey for deploy",
        "12345 paid 6789.10",
        "no such pattern",
    ]


@pytest.fixture(autouse=True)
def reset_loggrok_handlers():
    """Drop handlers the CLI attaches to the package logger"""
    yield
    package_logger = logging.getLogger("loggrok")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
