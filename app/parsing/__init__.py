"""
app/parsing package marker.
"""

from app.parsing.tabular_parser import ParseResult, TabularParseError, parse_tabular

__all__ = [
    "ParseResult",
    "TabularParseError",
    "parse_tabular",
]
