# tests/test_errors.py
"""Tests for FieldValidationError."""

import json


def _fields():
    from fieldstream.schema import FieldSpec

    return [
        FieldSpec(name="age", description="Age in years."),
        FieldSpec(name="city"),
    ]


class TestFieldValidationError:

    def test_message_lists_titles(self):
        from fieldstream.errors import FieldValidationError

        exc = FieldValidationError("Required fields not found", fields=_fields())
        assert str(exc) == "Required fields not found: Age, City"
        assert exc.field_names == ["age", "city"]
        assert exc.value is None

    def test_fixing_instructions(self):
        from fieldstream.errors import FieldValidationError

        exc = FieldValidationError("Required fields not found", fields=_fields())
        assert exc.fixing_instructions() == [
            "The section labeled 'Age' is invalid (required fields not found). Age in years.",
            "The section labeled 'City' is invalid (required fields not found).",
        ]

    def test_to_dict_is_json_serializable(self):
        from fieldstream.errors import FieldValidationError

        exc = FieldValidationError("Invalid number", fields=_fields()[:1], value="thirty")
        data = exc.to_dict()
        assert data == {"message": "Invalid number", "fields": ["age"], "value": "thirty"}
        assert json.loads(json.dumps(data)) == data

    def test_is_exception(self):
        import pytest

        from fieldstream.errors import FieldValidationError

        with pytest.raises(Exception):
            raise FieldValidationError("boom", fields=[])
