"""Tag and source parsing for vgen."""

from .source import SourceStructProvider, classify_annotation
from .tag import as_int, as_list, format_rules, parse_tag

__all__ = [
    "SourceStructProvider",
    "classify_annotation",
    "parse_tag",
    "format_rules",
    "as_int",
    "as_list",
]
