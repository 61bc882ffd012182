"""
fieldstream - typed field extraction from streamed language-model output.

A response such as::

    Name: Bob
    Age: 42

is scanned incrementally against a :class:`Signature` while it streams in.
Each field is validated as soon as its text is complete, and text fields can
be shown live through small deltas.

Main Components:
    - fieldstream.schema: FieldSpec / Signature definitions and loaders
    - fieldstream.extract: scanner, finalizer, validator and delta streamer
    - fieldstream.parsing: prefix matching, markdown lists, dates
    - fieldstream.cli: ``fieldstream`` command line interface
"""

from .errors import FieldValidationError
from .extract import (
    DeltaUpdate,
    ExtractionState,
    ScanStatus,
    StreamingExtractor,
    convert_and_validate,
    extract_values,
    finalize,
    merge_deltas,
    scan,
    stream_deltas,
)
from .schema import FieldSpec, FieldType, Signature

__version__ = "0.1.0"

__all__ = [
    "DeltaUpdate",
    "ExtractionState",
    "FieldSpec",
    "FieldType",
    "FieldValidationError",
    "ScanStatus",
    "Signature",
    "StreamingExtractor",
    "convert_and_validate",
    "extract_values",
    "finalize",
    "merge_deltas",
    "scan",
    "stream_deltas",
]
