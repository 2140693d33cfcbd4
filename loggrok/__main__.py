"""
Entry point for python -m loggrok
"""

import click
from loggrok.cli import parse, patterns

@click.group()
@click.version_option(version='1.0.0')
def cli():
    """loggrok - Grok pattern log parser"""
    pass

cli.add_command(parse)
cli.add_command(patterns)

if __name__ == '__main__':
    cli()
