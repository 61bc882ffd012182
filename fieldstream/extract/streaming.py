# fieldstream/extract/streaming.py
"""Incremental deltas for live display of a response being extracted.

:func:`stream_deltas` is a generator: each call yields only what became
visible since the previous call, then stops.  Text fields (``string`` and
``code``) are streamed as they are written; every other field is emitted
once, whole, after it has been validated.  List values are streamed element
by element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from ..schema import FieldSpec, FieldType, Signature
from .state import ExtractionState

__all__ = ["DeltaUpdate", "stream_deltas", "merge_deltas"]

_TEXT_TYPES = frozenset({FieldType.STRING, FieldType.CODE})
# Fences arrive a backtick at a time; partial ones are held back too.
_TRAILING_FENCE_RE = re.compile(r"(?:\s*```|\n[ ]*`{1,2})\s*$")
_LEADING_FENCE_RE = re.compile(r"^[ ]*```[a-zA-Z0-9]*\n\s*")
_UNFINISHED_FENCE_RE = re.compile(r"^[ ]*(?:`{1,2}|```[a-zA-Z0-9]*)$")


@dataclass(frozen=True)
class DeltaUpdate:
    """A partial update for one field of sample *index*."""

    index: int
    delta: dict[str, Any]


def _text_delta(
    content: str,
    field: FieldSpec,
    start: int,
    end: int,
    state: ExtractionState,
    index: int,
) -> Iterator[DeltaUpdate]:
    if field.is_internal or field.is_array or field.type not in _TEXT_TYPES:
        return

    pos = state.stream_cursor.get(field.name, 0)
    is_first = pos == 0
    is_code = field.type is FieldType.CODE

    chunk = content[start + pos:end]
    if not chunk:
        return

    # Trailing whitespace is re-read on the next call, so it is never lost
    # between chunks; only the very first chunk drops leading whitespace.
    trimmed = chunk.rstrip()
    if is_code:
        trimmed = _TRAILING_FENCE_RE.sub("", trimmed)

    text = trimmed.lstrip() if is_first else trimmed
    if is_code and is_first:
        if _UNFINISHED_FENCE_RE.match(text):
            return
        text = _LEADING_FENCE_RE.sub("", text, count=1)

    if text:
        state.stream_cursor[field.name] = pos + len(trimmed)
        yield DeltaUpdate(index, {field.name: text})


def stream_deltas(
    signature: Signature,
    content: str,
    values: dict[str, Any],
    state: ExtractionState,
    index: int = 0,
) -> Iterator[DeltaUpdate]:
    """Yield the updates made visible since the last call.

    Order: tails of fields closed since the last call, new text of the field
    being written, then validated values not yet streamed.

    Call it after a ``scan`` that returned ``ScanStatus.DONE`` and once after
    ``finalize``.  After ``NEED_MORE`` the end of the text may be the start
    of the next field's prefix and must not be shown yet.
    """
    for span in state.drain_completed_spans():
        yield from _text_delta(content, span.field, span.start, span.end, state, index)

    current = state.current_field
    if current is not None and not current.is_internal:
        yield from _text_delta(content, current, state.cursor, len(content), state, index)

    fields = {f.name: f for f in signature.get_output_fields()}
    for name, value in list(values.items()):
        field = fields.get(name)
        if field is None or field.is_internal:
            continue

        if isinstance(value, list):
            sent = state.stream_cursor.get(name, 0)
            fresh = value[sent:]
            if fresh:
                state.stream_cursor[name] = sent + len(fresh)
                yield DeltaUpdate(index, {name: fresh})
            continue

        if not state.stream_cursor.get(name):
            state.stream_cursor[name] = 1
            yield DeltaUpdate(index, {name: value})


def merge_deltas(
    deltas: Iterable[DeltaUpdate],
    into: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Fold updates into a dict: text concatenates, lists extend, others replace."""
    merged: dict[str, Any] = {} if into is None else into
    for update in deltas:
        for name, value in update.delta.items():
            previous = merged.get(name)
            if isinstance(value, str) and isinstance(previous, str):
                merged[name] = previous + value
            elif isinstance(value, list) and isinstance(previous, list):
                merged[name] = previous + value
            else:
                merged[name] = value
    return merged
