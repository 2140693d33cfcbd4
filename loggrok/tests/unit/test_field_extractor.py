"""
Unit tests for typed field conversion
"""

from datetime import datetime, timezone

import pytest
import regex

from loggrok.models import ConversionType, FieldSpec
from loggrok.context.extraction import convert_value, extract_fields


def _spec(conversion: ConversionType, fmt: str = None) -> FieldSpec:
    return FieldSpec("_grok_0", "value", conversion, fmt)


class TestConvertValue:
    """Test each conversion type"""

    def test_string_is_unchanged(self, utc_time_parser):
        """Test that strings keep quotes and spacing"""
        raw = '"Opera/12.0"  '

        assert convert_value(raw, _spec(ConversionType.STRING), utc_time_parser) == raw

    @pytest.mark.parametrize("raw,expected", [
        ("42", 42),
        ("-7", -7),
        ("+15", 15),
        ("12abc", 12),
        ("3.9", 3),
        ("abc", 0),
        ("", 0),
    ])
    def test_integer(self, utc_time_parser, raw, expected):
        """Test lenient integer conversion"""
        assert convert_value(raw, _spec(ConversionType.INTEGER), utc_time_parser) == expected

    def test_integer_too_long_is_none(self, utc_time_parser, caplog):
        """Test that a digit run past the int conversion limit yields None"""
        value = convert_value("9" * 5000, _spec(ConversionType.INTEGER), utc_time_parser)

        assert value is None
        assert any("too long" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("raw,expected", [
        ("6789.10", 6789.10),
        ("-0.5", -0.5),
        (".25", 0.25),
        ("1e3", 1000.0),
        ("7", 7.0),
        ("2.5kg", 2.5),
        ("n/a", 0.0),
    ])
    def test_float(self, utc_time_parser, raw, expected):
        """Test lenient float conversion"""
        value = convert_value(raw, _spec(ConversionType.FLOAT), utc_time_parser)

        assert isinstance(value, float)
        assert value == pytest.approx(expected)

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("TRUE", True),
        ("yes", True),
        ("false", False),
        ("No", False),
        ("1", None),
        ("maybe", None),
    ])
    def test_bool(self, utc_time_parser, raw, expected):
        """Test the boolean vocabulary"""
        assert convert_value(raw, _spec(ConversionType.BOOL), utc_time_parser) is expected

    def test_time_free_form(self, utc_time_parser):
        """Test time conversion without a format"""
        value = convert_value("2013-12-31T15:00:00+00:00", _spec(ConversionType.TIME), utc_time_parser)

        assert value == datetime(2013, 12, 31, 15, 0, tzinfo=timezone.utc)

    def test_time_with_format(self, utc_time_parser):
        """Test time conversion with an explicit format"""
        spec = _spec(ConversionType.TIME, "%Y-%m-%d %H%M")

        value = convert_value("2014-01-01 1000", spec, utc_time_parser)

        assert value == datetime(2014, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_unparseable_time_is_none(self, utc_time_parser, caplog):
        """Test that bad time text yields None and a warning"""
        value = convert_value("not a time", _spec(ConversionType.TIME, "%Y"), utc_time_parser)

        assert value is None
        assert any("Cannot parse time" in r.getMessage() for r in caplog.records)

    def test_array_default_delimiter(self, utc_time_parser):
        """Test that arrays split on commas by default"""
        value = convert_value("a,b,,c", _spec(ConversionType.ARRAY), utc_time_parser)

        assert value == ["a", "b", "", "c"]

    def test_array_custom_delimiter(self, utc_time_parser):
        """Test arrays with an explicit delimiter"""
        value = convert_value("a|b|c", _spec(ConversionType.ARRAY, "|"), utc_time_parser)

        assert value == ["a", "b", "c"]

    def test_array_single_element(self, utc_time_parser):
        """Test that text without delimiters becomes a one-element list"""
        assert convert_value("solo", _spec(ConversionType.ARRAY), utc_time_parser) == ["solo"]

    def test_every_type_is_handled(self, utc_time_parser):
        """Test that no conversion type is left without a branch"""
        for conversion in ConversionType:
            convert_value("1", _spec(conversion), utc_time_parser)


class TestExtractFields:
    """Test record building from a match"""

    def test_fields_in_declaration_order(self, utc_time_parser):
        """Test that the record follows field spec order"""
        matcher = regex.compile(r"(?P<_grok_0>\d+) paid (?P<_grok_1>[\d.]+)")
        specs = (
            FieldSpec("_grok_0", "user_id", ConversionType.INTEGER),
            FieldSpec("_grok_1", "paid_amount", ConversionType.FLOAT),
        )

        record = extract_fields(matcher.search("12345 paid 6789.10"), specs, utc_time_parser)

        assert list(record) == ["user_id", "paid_amount"]
        assert record == {"user_id": 12345, "paid_amount": 6789.10}

    def test_non_participating_groups_are_omitted(self, utc_time_parser):
        """Test that untaken alternatives leave no key behind"""
        matcher = regex.compile(r"(?:(?P<_grok_0>\d+)|(?P<_grok_1>[a-z]+))")
        specs = (
            FieldSpec("_grok_0", "number", ConversionType.INTEGER),
            FieldSpec("_grok_1", "word"),
        )

        record = extract_fields(matcher.search("hello"), specs, utc_time_parser)

        assert record == {"word": "hello"}

    def test_empty_capture_is_kept(self, utc_time_parser):
        """Test that a group matching the empty string is still a field"""
        matcher = regex.compile(r"x(?P<_grok_0>\d*)y")
        specs = (FieldSpec("_grok_0", "digits"),)

        record = extract_fields(matcher.search("xy"), specs, utc_time_parser)

        assert record == {"digits": ""}
