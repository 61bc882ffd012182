# fieldstream/schema.py
"""Declarative output signatures.

A :class:`Signature` is the ordered list of fields a model response is
expected to contain.  Each field is announced in the text by its title
followed by a colon (``Answer: 42``), so the order of ``fields`` is both the
expected appearance order and the tie-break priority during extraction.

Signatures can be written inline, loaded from YAML, or derived from an
existing DSPy signature:

.. code-block:: yaml

    name: PatientSummary
    fields:
      - name: diagnosis
      - name: age
        type: number
        required: false
      - name: findings
        type: list[string]
      - name: severity
        type: enum
        values: [mild, moderate, severe]
"""

from __future__ import annotations

import datetime as dt
import re
import types
from enum import Enum
from pathlib import Path
from typing import Any, List, Literal, Optional, Union, get_args, get_origin

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

__all__ = [
    "FieldType",
    "FieldSpec",
    "Signature",
    "to_field_title",
]


class FieldType(str, Enum):
    """Value types a field can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    CLASS = "class"
    JSON = "json"
    CODE = "code"


# ---------------------------------------------------------------------------
# Type string resolution
# ---------------------------------------------------------------------------

_TYPE_ALIASES: dict[str, str] = {
    "str": "string",
    "text": "string",
    "int": "number",
    "integer": "number",
    "float": "number",
    "double": "number",
    "bool": "boolean",
    "enum": "class",
    "object": "json",
    "dict": "json",
}

_LIST_RE = re.compile(r"^(?:list|array)\[(\w+)\]$", re.IGNORECASE)
_TITLE_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def to_field_title(name: str) -> str:
    """Derive the display title used as a field's text prefix.

    ``user_name`` -> ``User Name``, ``reasoningSteps`` -> ``Reasoning Steps``,
    acronyms are kept (``patientID`` -> ``Patient ID``).
    """
    words = _TITLE_WORD_RE.findall(name)
    if not words:
        return name
    return " ".join(w if w.isupper() else w.capitalize() for w in words)


def _resolve_type_string(raw: str) -> tuple[str, bool]:
    """Return ``(type_name, is_array)`` for a loader type string."""
    type_str = raw.strip().lower()
    is_array = False

    m = _LIST_RE.match(type_str)
    if m:
        type_str, is_array = m.group(1), True
    elif type_str.endswith("[]"):
        type_str, is_array = type_str[:-2], True
    elif type_str in {"list", "array"}:
        type_str, is_array = "string", True

    return _TYPE_ALIASES.get(type_str, type_str), is_array


# ---------------------------------------------------------------------------
# Field and signature models
# ---------------------------------------------------------------------------


class FieldSpec(BaseModel):
    """Specification for a single output field."""

    name: str = Field(..., description="Stable key (valid Python identifier)")
    title: str = Field("", description="Text prefix label; derived from name when empty")
    type: FieldType = Field(FieldType.STRING, description="Value type")
    is_array: bool = Field(False, description="Whether the value is a list of `type`")
    options: Optional[List[str]] = Field(
        None,
        description="Allowed values when type is 'class'",
    )
    description: str = Field("", description="Human-readable field description")
    is_optional: bool = Field(False, description="Whether the field may be absent")
    is_internal: bool = Field(
        False,
        description="Internal fields are never streamed and never returned",
    )

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        # Accept the template-style keys used in YAML signatures.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "required" in data:
            required = data.pop("required")
            data.setdefault("is_optional", not required)
        if "optional" in data:
            data.setdefault("is_optional", data.pop("optional"))
        if "internal" in data:
            data.setdefault("is_internal", data.pop("internal"))
        if "values" in data:
            data.setdefault("options", data.pop("values"))
        raw_type = data.get("type")
        if isinstance(raw_type, str):
            type_name, is_array = _resolve_type_string(raw_type)
            data["type"] = type_name
            if is_array:
                data["is_array"] = True
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> "FieldSpec":
        if not self.name.isidentifier():
            raise ValueError(f"Field name {self.name!r} is not a valid identifier")
        if not self.title:
            self.title = to_field_title(self.name)
        if self.type is FieldType.CLASS and not self.options:
            raise ValueError(f"Field {self.name!r} has type 'class' but no options")
        return self


class Signature(BaseModel):
    """Ordered output fields for one extraction session."""

    name: str = Field("Signature", description="Name of the signature")
    description: str = Field("", description="What the response contains")
    fields: List[FieldSpec] = Field(
        default_factory=list,
        description="Output fields in expected appearance order",
    )

    @field_validator("fields")
    @classmethod
    def _unique_names(cls, fields: List[FieldSpec]) -> List[FieldSpec]:
        seen: set[str] = set()
        dupes: list[str] = []
        for f in fields:
            if f.name in seen:
                dupes.append(f.name)
            seen.add(f.name)
        if dupes:
            raise ValueError(f"Duplicate field names: {', '.join(dupes)}")
        return fields

    def get_output_fields(self) -> list[FieldSpec]:
        return list(self.fields)

    def get_field(self, name: str) -> FieldSpec | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    # -- loaders -------------------------------------------------------------

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "Signature":
        """Parse a YAML signature definition."""
        data = yaml.safe_load(yaml_content)
        if not isinstance(data, dict):
            raise ValueError("Signature YAML must be a mapping with a 'fields' list")
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> "Signature":
        path = Path(path)
        return cls.from_yaml(path.read_text(encoding="utf-8"))

    @classmethod
    def from_dspy(cls, signature: Any) -> "Signature":
        """Build a signature from the output fields of a DSPy signature.

        Accepts a ``dspy.Signature`` subclass or a string such as
        ``"question -> answer, confidence: float"``.  Titles come from the
        DSPy field prefixes, types from the annotations.
        """
        import dspy

        if isinstance(signature, str):
            signature = dspy.Signature(signature)

        specs: list[FieldSpec] = []
        for name, info in signature.output_fields.items():
            extra = info.json_schema_extra or {}
            prefix = str(extra.get("prefix") or "").strip().rstrip(":").strip()
            desc = str(extra.get("desc") or "")
            if desc.startswith("${"):
                desc = ""
            specs.append(
                FieldSpec(
                    name=name,
                    title=prefix,
                    description=desc,
                    **_field_kwargs_for_annotation(info.annotation),
                )
            )

        return cls(
            name=signature.__name__,
            description=getattr(signature, "instructions", "") or "",
            fields=specs,
        )


def _field_kwargs_for_annotation(annotation: Any) -> dict[str, Any]:
    """Map a Python type annotation onto FieldSpec keyword arguments."""
    kwargs: dict[str, Any] = {}
    origin = get_origin(annotation)

    if origin in (Union, types.UnionType):
        args = get_args(annotation)
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) < len(args):
            kwargs["is_optional"] = True
        if len(non_none) != 1:
            kwargs["type"] = FieldType.JSON
            return kwargs
        annotation = non_none[0]
        origin = get_origin(annotation)

    if origin in (list, tuple, set):
        kwargs["is_array"] = True
        args = get_args(annotation)
        annotation = args[0] if args else str
        origin = get_origin(annotation)

    if origin is Literal:
        kwargs["type"] = FieldType.CLASS
        kwargs["options"] = [str(o) for o in get_args(annotation)]
    elif isinstance(annotation, type) and issubclass(annotation, Enum):
        kwargs["type"] = FieldType.CLASS
        kwargs["options"] = [str(m.value) for m in annotation]
    elif annotation is bool:
        kwargs["type"] = FieldType.BOOLEAN
    elif annotation in (int, float):
        kwargs["type"] = FieldType.NUMBER
    elif annotation is dt.datetime:
        kwargs["type"] = FieldType.DATETIME
    elif annotation is dt.date:
        kwargs["type"] = FieldType.DATE
    elif annotation is str:
        kwargs["type"] = FieldType.STRING
    else:
        kwargs["type"] = FieldType.JSON
    return kwargs
