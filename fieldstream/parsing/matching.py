"""Locate field-prefix markers in partially streamed text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

__all__ = ["MatchKind", "PrefixMatch", "locate"]


class MatchKind(str, Enum):
    """Outcome of a prefix search."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    # The text ends with the beginning of the prefix and may still grow into it.
    PARTIAL = "partial"
    WHITESPACE = "whitespace"
    FENCE = "fence"


@dataclass(frozen=True)
class PrefixMatch:
    """Where a prefix was found, or why the search was inconclusive."""

    kind: MatchKind
    index: int | None = None

    @property
    def found(self) -> bool:
        return self.kind is MatchKind.FOUND

    @property
    def inconclusive(self) -> bool:
        return self.kind in (MatchKind.PARTIAL, MatchKind.WHITESPACE, MatchKind.FENCE)


_NOT_FOUND = PrefixMatch(MatchKind.NOT_FOUND)
_PARTIAL = PrefixMatch(MatchKind.PARTIAL)
_WHITESPACE = PrefixMatch(MatchKind.WHITESPACE)
_FENCE = PrefixMatch(MatchKind.FENCE)

_FENCE_ONLY_RE = re.compile(r"^\s*```[a-zA-Z]*\s*$")
_BLANK_RE = re.compile(r"^[\s`]*$")


@lru_cache(maxsize=256)
def _partial_prefixes(prefix: str) -> tuple[str, ...]:
    """Proper leading substrings of *prefix* that count as a partial match."""
    return tuple(
        prefix[:i]
        for i in range(1, len(prefix))
        if prefix[:i] not in ("\n", ":")
    )


def locate(content: str, prefix: str, from_offset: int = 0) -> PrefixMatch:
    """Find *prefix* in *content* at or after *from_offset*.

    Returns a ``FOUND`` match carrying the index where the prefix starts, or
    one of the other kinds:

    - ``FENCE``: the remaining text is only a code fence opener.
    - ``WHITESPACE``: the remaining text is only whitespace (or backticks).
    - ``PARTIAL``: the text ends with the beginning of *prefix*.
    - ``NOT_FOUND``: none of the above.
    """
    from_offset = max(from_offset, 0)
    tail = content[from_offset:]

    if _FENCE_ONLY_RE.match(tail):
        return _FENCE
    if _BLANK_RE.match(tail):
        return _WHITESPACE

    index = content.find(prefix, from_offset)
    if index != -1:
        return PrefixMatch(MatchKind.FOUND, index)

    content_end = content[max(from_offset, len(content) - len(prefix)):]
    for partial in _partial_prefixes(prefix):
        if content_end.endswith(partial):
            return _PARTIAL

    return _NOT_FOUND
