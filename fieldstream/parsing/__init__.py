"""Text-level collaborators used by the extraction engine."""

from .dates import parse_llm_date, parse_llm_datetime
from .markdown import parse_markdown_list
from .matching import MatchKind, PrefixMatch, locate

__all__ = [
    "MatchKind",
    "PrefixMatch",
    "locate",
    "parse_markdown_list",
    "parse_llm_date",
    "parse_llm_datetime",
]
