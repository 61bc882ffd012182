"""Per-session bookkeeping threaded through every extraction call."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..schema import FieldSpec

__all__ = ["CompletedSpan", "ExtractionState"]


@dataclass(frozen=True)
class CompletedSpan:
    """A closed field's raw span, waiting to be flushed to the delta stream."""

    field: FieldSpec
    start: int
    end: int


@dataclass
class ExtractionState:
    """Mutable cursor state for one in-progress extraction.

    Owned by exactly one caller and passed explicitly to ``scan``,
    ``finalize`` and ``stream_deltas``; concurrent extractions each use
    their own instance.
    """

    # Start of the current field's text in the cumulative content.
    cursor: int = 0
    current_field: FieldSpec | None = None
    current_field_index: int | None = None
    in_assumed_field: bool = False
    in_block: bool = False
    extracted_fields: list[FieldSpec] = field(default_factory=list)
    completed_spans: list[CompletedSpan] = field(default_factory=list)
    # Field name -> characters (or list elements) already streamed.
    stream_cursor: dict[str, int] = field(default_factory=dict)

    @property
    def started(self) -> bool:
        return self.current_field is not None

    def has_extracted(self, name: str) -> bool:
        return any(f.name == name for f in self.extracted_fields)

    def drain_completed_spans(self) -> list[CompletedSpan]:
        spans, self.completed_spans = self.completed_spans, []
        return spans
