# fieldstream/errors.py
"""Structured failures raised while extracting fields from model output.

A single exception type covers every way a response can fail to satisfy its
signature: missing required fields, fields presented out of order, and raw
text that cannot be converted to the declared type.  The offending fields
travel with the exception so callers can build a complete diagnostic (or a
correction prompt) without re-parsing the message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schema import FieldSpec

__all__ = ["FieldValidationError"]


class FieldValidationError(Exception):
    """Raised when model output does not satisfy its signature.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    fields:
        The field(s) at fault.  Finalization lists every missing required
        field at once.
    value:
        The raw text that failed conversion, when there is one.
    """

    def __init__(
        self,
        message: str,
        fields: list[FieldSpec],
        value: str | None = None,
    ) -> None:
        self.message = message
        self.fields = list(fields)
        self.value = value
        super().__init__(self._render())

    def _render(self) -> str:
        titles = ", ".join(f.title for f in self.fields)
        return f"{self.message}: {titles}" if titles else self.message

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def fixing_instructions(self) -> list[str]:
        """One correction line per field, phrased for a follow-up prompt."""
        lowered = self.message[:1].lower() + self.message[1:]
        lines: list[str] = []
        for f in self.fields:
            line = f"The section labeled '{f.title}' is invalid ({lowered})."
            if f.description:
                line += f" {f.description}"
            lines.append(line)
        return lines

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict for JSON serialization."""
        return {
            "message": self.message,
            "fields": self.field_names,
            "value": self.value,
        }
