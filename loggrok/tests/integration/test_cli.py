"""
Integration tests for the command line interface
"""

import json

import pytest
from click.testing import CliRunner

from loggrok.__main__ import cli


def json_lines(output: str):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def log_file(tmp_path, sample_logs):
    path = tmp_path / "input.log"
    path.write_text("\n".join(sample_logs) + "\n", encoding="utf-8")
    return path


class TestParseCommand:
    """Test the parse command"""

    def test_parse_with_patterns(self, runner, log_file, tmp_path):
        """Test parsing with patterns given on the command line"""
        result = runner.invoke(cli, [
            "parse", "-i", str(log_file),
            "-p", "%{COMBINEDAPACHELOG}",
            "-p", "%{INT:user_id:integer} paid %{NUMBER:paid_amount:float}",
            "--time-key", "timestamp",
            "--time-format", "%d/%b/%Y:%H:%M:%S %z",
            "--failure-key", "grokfailure",
            "--timezone", "UTC",
            "--log-file", str(tmp_path / "loggrok.jsonl"),
        ])

        assert result.exit_code == 0, result.output
        records = json_lines(result.output)
        assert len(records) == 5
        assert records[0]["matched"] is True
        assert records[0]["time"] == "2013-02-28T03:00:00+00:00"
        assert records[0]["record"]["clientip"] == "127.0.0.1"
        assert records[3]["record"] == {"user_id": 12345, "paid_amount": 6789.1}
        assert records[4]["record"] == {"grokfailure": "No grok pattern matched",
                                        "message": "no such pattern"}
        assert "Parsed 5 lines: 3 matched, 2 unmatched" in result.output

    def test_no_unmatched(self, runner, log_file, tmp_path):
        """Test that --no-unmatched drops failure records"""
        result = runner.invoke(cli, [
            "parse", "-i", str(log_file),
            "-p", "%{INT:user_id:integer} paid %{NUMBER:paid_amount:float}",
            "--no-unmatched",
            "--log-file", str(tmp_path / "loggrok.jsonl"),
        ])

        assert result.exit_code == 0, result.output
        records = json_lines(result.output)
        assert [r["record"] for r in records] == [{"user_id": 12345, "paid_amount": 6789.1}]

    def test_config_file(self, runner, log_file, tmp_path, pattern_file):
        """Test parsing with a JSON configuration file"""
        patterns = pattern_file("PAYMENT %{INT:user_id:integer} paid %{NUMBER:paid_amount:float}\n")
        config_path = tmp_path / "grok.json"
        config_path.write_text(json.dumps({
            "custom_pattern_path": str(patterns),
            "estimate_current_event": False,
            "grok_name_key": "grok_name",
            "grok": [{"name": "payment", "pattern": "%{PAYMENT}"}],
        }))

        result = runner.invoke(cli, [
            "parse", "-i", str(log_file), "-c", str(config_path), "--no-unmatched",
            "--log-file", str(tmp_path / "loggrok.jsonl"),
        ])

        assert result.exit_code == 0, result.output
        assert json_lines(result.output) == [{
            "time": None,
            "matched": True,
            "record": {"user_id": 12345, "paid_amount": 6789.1, "grok_name": "payment"},
        }]

    def test_compile_failures_are_logged(self, runner, log_file, tmp_path):
        """Test that a dropped pattern shows up in the JSON log"""
        log_path = tmp_path / "loggrok.jsonl"

        result = runner.invoke(cli, [
            "parse", "-i", str(log_file),
            "-p", "%{PATH:path:foo}",
            "-p", "%{IP:ip_address}",
            "--log-file", str(log_path),
        ])

        assert result.exit_code == 0, result.output
        entries = [json.loads(line) for line in log_path.read_text().splitlines()]
        failures = [e for e in entries if e.get("event") == "grok_compile_failed"]
        assert len(failures) == 1
        assert failures[0]["level"] == "error"
        assert failures[0]["error"] == "unknown value conversion for key:'path', type:'foo'"

    def test_no_patterns_fails(self, runner, log_file, tmp_path):
        """Test that running without patterns exits with an error"""
        result = runner.invoke(cli, [
            "parse", "-i", str(log_file), "--log-file", str(tmp_path / "loggrok.jsonl"),
        ])

        assert result.exit_code == 1
        assert "no grok patterns" in result.output

    def test_undecodable_pattern_file(self, runner, log_file, tmp_path):
        """Test that parse reports a non UTF-8 pattern file and exits"""
        patterns = tmp_path / "my_pattern"
        patterns.write_bytes(b"FOO \xff\xfe\n")

        result = runner.invoke(cli, [
            "parse", "-i", str(log_file), "-p", "%{FOO:foo}",
            "--custom-pattern-path", str(patterns),
            "--log-file", str(tmp_path / "loggrok.jsonl"),
        ])

        assert result.exit_code == 1
        assert "not valid UTF-8" in result.output

    def test_missing_input(self, runner, tmp_path):
        """Test that a missing input file exits with an error"""
        result = runner.invoke(cli, ["parse", "-i", str(tmp_path / "nope.log"), "-p", "%{WORD:w}"])

        assert result.exit_code == 1
        assert "Input file not found" in result.output


class TestPatternsCommand:
    """Test the patterns command"""

    def test_filter(self, runner):
        """Test listing patterns whose name contains a filter"""
        result = runner.invoke(cli, ["patterns", "--filter", "apache"])

        assert result.exit_code == 0, result.output
        assert "COMBINEDAPACHELOG" in result.output
        assert "COMMONAPACHELOG" in result.output
        assert "GREEDYDATA" not in result.output

    def test_custom_patterns_listed(self, runner, pattern_file):
        """Test that custom patterns appear next to builtin ones"""
        path = pattern_file("MY_AWESOME_PATTERN %{GREEDYDATA:message}\n")

        result = runner.invoke(cli, ["patterns", "--custom-pattern-path", str(path),
                                     "--filter", "AWESOME"])

        assert result.exit_code == 0, result.output
        assert "MY_AWESOME_PATTERN" in result.output

    def test_undecodable_pattern_file(self, runner, tmp_path):
        """Test that a non UTF-8 pattern file is reported, not a traceback"""
        path = tmp_path / "my_pattern"
        path.write_bytes(b"FOO \xff\xfe\n")

        result = runner.invoke(cli, ["patterns", "--custom-pattern-path", str(path)])

        assert result.exit_code == 1
        assert "not valid UTF-8" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_version(self, runner):
        """Test the version option"""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output
