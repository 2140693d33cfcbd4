"""
Time parsing for grok fields and event timestamps

Two paths, one result: an explicit strptime format or the dateutil free-form
parser. Both return timezone-aware datetimes normalized to UTC, so equal
instants compare equal whichever path produced them. Naive results are
placed in the configured default timezone (local time when unset).
"""

import logging
import re
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Optional

from dateutil import parser as date_parser
from dateutil import tz

from loggrok.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ['TimeParser', 'resolve_timezone', 'TZINFOS']

HOUR = 3600

# Abbreviations dateutil does not know on its own (UTC/GMT/Z it does)
TZINFOS = {
    'UTC': 0,
    'GMT': 0,
    'EST': -5 * HOUR,
    'EDT': -4 * HOUR,
    'CST': -6 * HOUR,
    'CDT': -5 * HOUR,
    'MST': -7 * HOUR,
    'MDT': -6 * HOUR,
    'PST': -8 * HOUR,
    'PDT': -7 * HOUR,
    'AST': -4 * HOUR,
    'ADT': -3 * HOUR,
    'CET': 1 * HOUR,
    'CEST': 2 * HOUR,
    'EET': 2 * HOUR,
    'EEST': 3 * HOUR,
    'BST': 1 * HOUR,
    'IST': 5 * HOUR + 1800,
    'JST': 9 * HOUR,
    'KST': 9 * HOUR,
}

OFFSET_PATTERN = re.compile(r'^([+-])(\d{2}):?(\d{2})$')


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """
    Resolve a timezone setting to a tzinfo

    Accepts numeric offsets ('+09:00', '-0500'), IANA names ('Asia/Tokyo'),
    'UTC' / 'localtime'. None means the local timezone.

    Raises:
        ConfigurationError: the name cannot be resolved
    """
    if name is None or name == 'localtime':
        return tz.tzlocal()

    offset = OFFSET_PATTERN.match(name)
    if offset:
        sign, hours, minutes = offset.groups()
        seconds = int(hours) * HOUR + int(minutes) * 60
        return tz.tzoffset(name, -seconds if sign == '-' else seconds)

    resolved = tz.gettz(name)
    if resolved is None:
        raise ConfigurationError(f"invalid timezone: {name!r}")
    return resolved


class TimeParser:
    """
    Convert captured text into UTC datetimes

    Stateless apart from the default timezone, safe to share across threads.
    """

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = timezone
        self.default_tz = resolve_timezone(timezone)

    def parse(self, value: str, time_format: Optional[str] = None) -> datetime:
        """
        Parse a time string

        Args:
            value: Captured text, e.g. '28/Feb/2013:12:00:00 +0900'
            time_format: strptime format; free-form parsing when None

        Returns:
            Timezone-aware datetime in UTC

        Raises:
            ValueError: the text does not parse
        """
        try:
            if time_format:
                parsed = datetime.strptime(value, time_format)
            else:
                parsed = date_parser.parse(value, tzinfos=TZINFOS)
            return self.normalize(parsed)
        except OverflowError as e:
            # also raised by the UTC shift of times at the edge of datetime's range
            raise ValueError(f"time out of range: {value!r}") from e

    def try_parse(self, value: str, time_format: Optional[str] = None) -> Optional[datetime]:
        """Like parse() but returns None (and logs) for unparseable text."""
        try:
            return self.parse(value, time_format)
        except ValueError as e:
            logger.warning("Cannot parse time %r (format=%r): %s", value, time_format, e)
            return None

    def normalize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.default_tz)
        return value.astimezone(dt_timezone.utc)
