"""
CLI commands for loggrok.
"""

import dataclasses
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from loggrok.errors import GrokError
from loggrok.context.library import load_builtin_patterns
from loggrok.services import GrokParser, GrokParserConfig, GrokSection
from loggrok.utils.logging import configure_json_logger


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _build_config(config_path, patterns, custom_pattern_path, failure_key,
                  time_key, time_format, timezone) -> GrokParserConfig:
    config = GrokParserConfig.from_json_file(config_path) if config_path else GrokParserConfig()
    overrides = {}
    if patterns:
        overrides['grok'] = tuple(config.grok) + tuple(GrokSection(pattern=p) for p in patterns)
    if custom_pattern_path:
        overrides['custom_pattern_path'] = custom_pattern_path
    if failure_key:
        overrides['grok_failure_key'] = failure_key
    if time_key:
        overrides['time_key'] = time_key
    if time_format:
        overrides['time_format'] = time_format
    if timezone:
        overrides['timezone'] = timezone
    return dataclasses.replace(config, **overrides)


@click.command()
@click.option('--input', '-i', required=True, help='Input log file path')
@click.option('--pattern', '-p', 'patterns', multiple=True, help='Grok pattern (repeatable, tried in order)')
@click.option('--config', '-c', 'config_path', help='JSON parser configuration file')
@click.option('--custom-pattern-path', help='Custom pattern file or directory')
@click.option('--failure-key', help='Record key flagging unmatched lines')
@click.option('--time-key', help='Field used as the event time (default: time)')
@click.option('--time-format', help='strptime format for the time key field')
@click.option('--timezone', help='Timezone for times without one (default: local)')
@click.option('--log-file', help='Write JSON Lines logs to this file instead of stderr')
@click.option('--unmatched/--no-unmatched', default=True, help='Print failure records for unmatched lines')
def parse(input, patterns, config_path, custom_pattern_path, failure_key,
          time_key, time_format, timezone, log_file, unmatched):
    """
    Parse a log file with grok patterns, one JSON record per line.

    Example:
        loggrok parse -i access.log -p '%{COMBINEDAPACHELOG}' --time-key timestamp
    """
    input_path = Path(input)
    if not input_path.exists():
        click.echo(f"Error: Input file not found: {input}", err=True)
        sys.exit(1)

    configure_json_logger(Path(log_file) if log_file else None, level=logging.WARNING)

    try:
        config = _build_config(config_path, patterns, custom_pattern_path, failure_key,
                               time_key, time_format, timezone)
        parser = GrokParser(config)
    except (GrokError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    matched = 0
    total = 0
    with open(input_path, 'r', encoding='utf-8', errors='replace') as f:
        for result in parser.parse_lines(f):
            total += 1
            if result.matched:
                matched += 1
            elif not unmatched:
                continue
            click.echo(json.dumps({
                'time': result.time,
                'matched': result.matched,
                'record': result.record,
            }, ensure_ascii=False, default=_json_default))

    click.echo(f"Parsed {total} lines: {matched} matched, {total - matched} unmatched", err=True)


@click.command()
@click.option('--custom-pattern-path', help='Custom pattern file or directory to layer on top')
@click.option('--filter', 'name_filter', help='Only show pattern names containing this text')
def patterns(custom_pattern_path, name_filter):
    """
    List the grok patterns available for %{NAME} references.

    Example:
        loggrok patterns --filter APACHE
    """
    library = load_builtin_patterns()
    if custom_pattern_path:
        try:
            library = library.with_custom_patterns(custom_pattern_path)
        except (GrokError, OSError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    table = Table(title=f"Grok patterns ({len(library)})")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Template", overflow="fold")

    for name, template in library.items():
        if name_filter and name_filter.upper() not in name.upper():
            continue
        table.add_row(name, template)

    Console().print(table)
