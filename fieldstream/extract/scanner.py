# fieldstream/extract/scanner.py
"""Incremental field scanner.

Model responses announce each field with its title and a colon::

    Name: Bob
    Age: 42

:func:`scan` is called with the *cumulative* response text every time more
of it is available.  It walks the signature in order, looks for the next
field prefix after the cursor, and closes the previous field once the next
prefix shows up.  The last field stays open until :func:`finalize` is called
at end-of-stream.

Convenience functions:
    - extract_values(): scan + finalize over a complete response.
    - strip_internal_fields(): drop internal fields from an output dict.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..errors import FieldValidationError
from ..parsing.matching import MatchKind, locate
from ..schema import FieldSpec, Signature
from ..utils.logging import log_field_closed, log_scan_waiting
from .coercion import convert_and_validate
from .state import CompletedSpan, ExtractionState

logger = logging.getLogger(__name__)

__all__ = [
    "ScanStatus",
    "scan",
    "finalize",
    "extract_values",
    "strip_internal_fields",
]


class ScanStatus(str, Enum):
    """Result of one :func:`scan` call."""

    DONE = "done"
    # An ambiguous tail was seen; call again once more text has arrived.
    NEED_MORE = "need_more"


def _close_current_field(
    current: FieldSpec,
    values: dict[str, Any],
    state: ExtractionState,
    content: str,
    end: int | None,
) -> None:
    """Validate *current*'s text from the cursor up to *end* and store the result."""
    raw = content[state.cursor:end].strip()
    parsed = convert_and_validate(current, raw)
    if parsed is not None:
        values[current.name] = parsed
    log_field_closed(logger, current, state.cursor, len(content) if end is None else end, parsed)


def _later_field_between(
    fields: list[FieldSpec],
    index: int,
    values: dict[str, Any],
    state: ExtractionState,
    content: str,
    end: int,
) -> FieldSpec | None:
    """A later, not yet matched field whose prefix sits between the cursor and *end*.

    Streamed text catches such out-of-order prefixes as they arrive; this
    makes a single call over the complete text fail the same way.
    """
    window = content[state.cursor:end]
    for later in fields[index + 1:]:
        if later.name in values or state.has_extracted(later.name):
            continue
        marker = later.title + ":"
        if "\n" + marker in window or (not state.extracted_fields and window.startswith(marker)):
            return later
    return None


def scan(
    signature: Signature,
    values: dict[str, Any],
    state: ExtractionState,
    content: str,
    *,
    strict_mode: bool = False,
    skip_early_fail: bool = False,
) -> ScanStatus:
    """Advance *state* over *content* and record fields that were closed.

    Parameters
    ----------
    signature:
        The expected output fields, in order.
    values:
        Output dict, updated in place as fields close.
    state:
        Extraction state for this session, updated in place.
    content:
        All text received so far.  Must only ever grow between calls.
    strict_mode:
        Require the field prefix even when the signature has a single field.
    skip_early_fail:
        Do not fail when a required field has not appeared yet.

    Returns
    -------
    ScanStatus
        ``NEED_MORE`` when the scan stopped on an inconclusive tail (a
        partially written prefix, whitespace, or a bare code fence).

    Raises
    ------
    FieldValidationError
        A required field was skipped or a closed field failed conversion.
    """
    fields = signature.get_output_fields()
    expected: FieldSpec | None = None

    for index, field in enumerate(fields):
        is_current = index == state.current_field_index
        if is_current and not state.in_assumed_field:
            continue
        if field.name in values and not (is_current and state.in_assumed_field):
            continue

        prefix = ("\n" if state.extracted_fields else "") + field.title + ":"
        match = locate(content, prefix, state.cursor)
        # Only FOUND carries an index; an assumed field starts at 0.
        start = match.index if match.index is not None else 0
        prefix_len = len(prefix)

        if match.kind is MatchKind.NOT_FOUND:
            if skip_early_fail:
                continue

            if not strict_mode and len(fields) == 1 and not state.started:
                # Single-field signature: attribute everything to the field.
                logger.debug("No '%s' prefix, assuming all content belongs to it", field.title)
                state.in_assumed_field = True
                expected = field
                prefix_len = 0
            elif not state.started and not field.is_optional:
                raise FieldValidationError("Expected (Required) field not found", fields=[field])
            else:
                expected = None if field.is_optional else field
                continue

        elif match.inconclusive:
            if match.kind is MatchKind.FENCE:
                state.in_block = True
            log_scan_waiting(logger, field, match.kind.value, state.cursor)
            return ScanStatus.NEED_MORE

        if expected is not None and expected.name != field.name:
            raise FieldValidationError("Expected (Required) field not found", fields=[expected])

        if match.found and not field.is_optional:
            jumped_to = _later_field_between(fields, index, values, state, content, start)
            if jumped_to is not None:
                logger.debug("'%s' appeared before required field '%s'", jumped_to.title, field.title)
                raise FieldValidationError("Expected (Required) field not found", fields=[field])

        if state.current_field is not None and state.in_assumed_field:
            # The real prefix turned up after all; restart the field there.
            state.in_assumed_field = False
            state.stream_cursor[state.current_field.name] = 0
            state.current_field = None

        if state.current_field is not None:
            _close_current_field(state.current_field, values, state, content, start)
            state.completed_spans.append(CompletedSpan(state.current_field, state.cursor, start))

        state.cursor = start + prefix_len
        state.current_field = field
        state.current_field_index = index

        if not state.has_extracted(field.name):
            state.extracted_fields.append(field)

        state.stream_cursor.setdefault(field.name, 0)

    return ScanStatus.DONE


def finalize(
    signature: Signature,
    values: dict[str, Any],
    state: ExtractionState,
    content: str,
) -> None:
    """Close the last open field and check that every required field is present.

    Raises
    ------
    FieldValidationError
        Listing *all* required fields that have no value.
    """
    if state.current_field is not None:
        _close_current_field(state.current_field, values, state, content, None)

    missing = [
        f for f in signature.get_output_fields()
        if not f.is_optional and values.get(f.name) is None
    ]
    if missing:
        noun = "field" if len(missing) == 1 else "fields"
        raise FieldValidationError(f"Required {noun} not found", fields=missing)


def strip_internal_fields(signature: Signature, values: dict[str, Any]) -> dict[str, Any]:
    """Remove internal fields from *values* in place and return it."""
    for f in signature.get_output_fields():
        if f.is_internal:
            values.pop(f.name, None)
    return values


def extract_values(
    signature: Signature,
    content: str,
    *,
    strict_mode: bool | None = None,
) -> dict[str, Any]:
    """Extract all fields from a complete response in one call."""
    if strict_mode is None:
        from ..config import get_config

        strict_mode = get_config().strict_mode

    values: dict[str, Any] = {}
    state = ExtractionState()
    scan(signature, values, state, content, strict_mode=strict_mode)
    finalize(signature, values, state, content)
    return strip_internal_fields(signature, values)
