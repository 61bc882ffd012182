# fieldstream/extract/coercion.py
"""Convert raw field text into typed values.

Every value captured by the scanner goes through :func:`convert_and_validate`
once its span is fully known.  Conversion is strict for required fields and
forgiving for optional ones: text that cannot be read as the declared type
makes an optional field absent (``None``) instead of failing the response.

Array elements are always treated as required so that list items cannot
silently disappear.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable

from ..errors import FieldValidationError
from ..parsing.dates import parse_llm_date, parse_llm_datetime
from ..parsing.markdown import parse_markdown_list
from ..schema import FieldSpec, FieldType

__all__ = [
    "convert_and_validate",
    "validate_and_convert",
    "extract_block",
]

_NULLISH_RE = re.compile(r"^(null|undefined)\s*$", re.IGNORECASE)
_FENCED_BLOCK_RE = re.compile(r"```([A-Za-z]*)\n([\s\S]*?)\n```")
# Plain decimal literals only: no "1_000", "inf" or "nan".
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?P<exp>[eE][+-]?\d+)?$")


def extract_block(text: str) -> str:
    """Return the body of the first fenced code block, or *text* unchanged."""
    m = _FENCED_BLOCK_RE.search(text)
    if not m:
        return text
    return m.group(2)


# ---------------------------------------------------------------------------
# Scalar converters
# ---------------------------------------------------------------------------


def _allow_absent(field: FieldSpec, required: bool) -> bool:
    return field.is_optional and not required


def _to_code(field: FieldSpec, value: Any, required: bool) -> Any:
    return extract_block(value) if isinstance(value, str) else value


def _to_string(field: FieldSpec, value: Any, required: bool) -> Any:
    return value


def _to_number(field: FieldSpec, value: Any, required: bool) -> int | float | None:
    number: int | float | None = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = value
    else:
        text = str(value).strip()
        m = _NUMBER_RE.match(text)
        if m:
            number = float(text) if "." in text or m.group("exp") else int(text)
    if number is None or (isinstance(number, float) and not math.isfinite(number)):
        if _allow_absent(field, required):
            return None
        raise ValueError("Invalid number")
    return number


def _to_boolean(field: FieldSpec, value: Any, required: bool) -> bool | None:
    if isinstance(value, bool):
        return value
    probe = str(value).strip().lower()
    if probe == "true":
        return True
    if probe == "false":
        return False
    if _allow_absent(field, required):
        return None
    raise ValueError("Invalid boolean")


def _to_date(field: FieldSpec, value: Any, required: bool) -> Any:
    return parse_llm_date(field, str(value), required)


def _to_datetime(field: FieldSpec, value: Any, required: bool) -> Any:
    return parse_llm_datetime(field, str(value), required)


def _to_class(field: FieldSpec, value: Any, required: bool) -> str | None:
    options = field.options or []
    if options and value not in options:
        if _allow_absent(field, required):
            return None
        raise ValueError(
            f"Invalid class '{value}', expected one of the following: {', '.join(options)}"
        )
    return value


_Converter = Callable[[FieldSpec, Any, bool], Any]

# JSON fields are parsed whole before scalar dispatch, so they have no entry.
_SCALAR_CONVERTERS: dict[FieldType, _Converter] = {
    FieldType.CODE: _to_code,
    FieldType.STRING: _to_string,
    FieldType.NUMBER: _to_number,
    FieldType.BOOLEAN: _to_boolean,
    FieldType.DATE: _to_date,
    FieldType.DATETIME: _to_datetime,
    FieldType.CLASS: _to_class,
}


def _convert_scalar(field: FieldSpec, value: Any, required: bool = False) -> Any:
    converter = _SCALAR_CONVERTERS.get(field.type, _to_string)
    return converter(field, value, required)


# ---------------------------------------------------------------------------
# Whole-value parsing
# ---------------------------------------------------------------------------


def _parse_json(field: FieldSpec, raw: str) -> Any:
    try:
        return json.loads(extract_block(raw))
    except json.JSONDecodeError as exc:
        raise FieldValidationError(f"Invalid JSON: {exc}", fields=[field], value=raw) from exc


def _parse_array(field: FieldSpec, raw: str) -> list[Any]:
    try:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = parse_markdown_list(raw)
        if not isinstance(parsed, list):
            raise ValueError("Expected an array")
    except ValueError as exc:
        raise FieldValidationError(f"Invalid Array: {exc}", fields=[field], value=raw) from exc
    return parsed


def convert_and_validate(field: FieldSpec, raw: str | None) -> Any:
    """Convert the raw text captured for *field* into its typed value.

    Returns ``None`` when the field is optional and the text is empty,
    null-like or unreadable as the declared type.  Raises
    :class:`FieldValidationError` otherwise.
    """
    if not raw or _NULLISH_RE.match(raw):
        if field.is_optional:
            return None
        raise FieldValidationError("Required field is missing", fields=[field], value=raw)

    if field.type is FieldType.JSON:
        return _parse_json(field, raw)

    try:
        if field.is_array:
            value: Any = [
                _convert_scalar(field, item.strip() if isinstance(item, str) else item, required=True)
                if item is not None
                else None
                for item in _parse_array(field, raw)
            ]
        else:
            value = _convert_scalar(field, raw)
    except FieldValidationError:
        raise
    except ValueError as exc:
        raise FieldValidationError(str(exc), fields=[field], value=raw) from exc

    if value == "":
        return None
    return value


validate_and_convert = convert_and_validate
