"""
Grok compilation context.
"""

from loggrok.context.compilation.resolver import DEFAULT_MAX_DEPTH, ExpansionState, GrokResolver

__all__ = ['GrokResolver', 'ExpansionState', 'DEFAULT_MAX_DEPTH']
