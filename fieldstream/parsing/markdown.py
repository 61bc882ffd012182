"""Markdown bullet-list parsing for array-typed fields."""

from __future__ import annotations

import re

__all__ = ["parse_markdown_list"]

_BULLETS = ("-", "*", "+")
_NUMBERED_RE = re.compile(r"^\d+\s*[.)\]]\s*")


def parse_markdown_list(text: str) -> list[str]:
    """Parse a markdown bullet or numbered list into its item texts.

    Accepts ``-``, ``*`` and ``+`` bullets and ``1.``, ``1)`` or ``1]``
    numbering.  A single leading line that is not a list item is taken as the
    first item (models often answer a one-element list without a bullet).
    Any other non-item line raises :class:`ValueError`.
    """
    items: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(_BULLETS):
            items.append(stripped[1:].strip())
        elif _NUMBERED_RE.match(stripped):
            items.append(_NUMBERED_RE.sub("", stripped, count=1).strip())
        elif not items:
            items.append(stripped)
        else:
            raise ValueError("Could not parse markdown list: mixed content detected")
    return items
