"""Incremental extraction engine: scan, finalize, validate and stream."""

from .coercion import convert_and_validate, extract_block, validate_and_convert
from .scanner import ScanStatus, extract_values, finalize, scan, strip_internal_fields
from .session import StreamingExtractor
from .state import CompletedSpan, ExtractionState
from .streaming import DeltaUpdate, merge_deltas, stream_deltas

__all__ = [
    "CompletedSpan",
    "DeltaUpdate",
    "ExtractionState",
    "ScanStatus",
    "StreamingExtractor",
    "convert_and_validate",
    "extract_block",
    "extract_values",
    "finalize",
    "merge_deltas",
    "scan",
    "stream_deltas",
    "strip_internal_fields",
    "validate_and_convert",
]
