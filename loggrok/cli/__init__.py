"""
Command line interface.
"""

from loggrok.cli.commands import parse, patterns

__all__ = ['parse', 'patterns']
