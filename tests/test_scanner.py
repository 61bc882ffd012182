# tests/test_scanner.py
"""Tests for the incremental field scanner and finalizer."""

import pytest


def _sig(*fields):
    from fieldstream.schema import FieldSpec, Signature

    return Signature(fields=[FieldSpec.model_validate(f) for f in fields])


class TestExtractValues:
    """One-shot extraction over complete responses."""

    def test_single_field(self):
        from fieldstream.extract import extract_values

        sig = _sig({"name": "answer"})
        assert extract_values(sig, "Answer: 42", strict_mode=False) == {"answer": "42"}

    def test_invalid_optional_number_omitted(self):
        """An unparsable optional number is dropped rather than raised."""
        from fieldstream.extract import extract_values

        sig = _sig({"name": "name"}, {"name": "age", "type": "number", "required": False})
        assert extract_values(sig, "Name: Bob\nAge: thirty", strict_mode=False) == {"name": "Bob"}

    def test_typed_fields(self):
        from fieldstream.extract import extract_values

        sig = _sig(
            {"name": "name"},
            {"name": "age", "type": "number"},
            {"name": "active", "type": "boolean"},
        )
        text = "Name: Bob Smith\nAge: 42\nActive: true"
        assert extract_values(sig, text, strict_mode=False) == {
            "name": "Bob Smith",
            "age": 42,
            "active": True,
        }

    def test_multiline_values(self):
        from fieldstream.extract import extract_values

        sig = _sig({"name": "reasoning"}, {"name": "answer"})
        text = "Reasoning: first line\nsecond line\n\nAnswer: done"
        assert extract_values(sig, text, strict_mode=False) == {
            "reasoning": "first line\nsecond line",
            "answer": "done",
        }

    def test_invalid_class(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import extract_values

        sig = _sig({"name": "category", "type": "class", "options": ["a", "b"]})
        with pytest.raises(FieldValidationError, match="expected one of the following: a, b") as exc_info:
            extract_values(sig, "Category: c", strict_mode=False)
        assert exc_info.value.field_names == ["category"]

    def test_array_field(self):
        from fieldstream.extract import extract_values

        sig = _sig({"name": "tags", "type": "list[string]"})
        assert extract_values(sig, 'Tags: ["a","b","c"]', strict_mode=False) == {"tags": ["a", "b", "c"]}

    def test_json_and_markdown_arrays_agree(self):
        """JSON and markdown list forms yield the same array."""
        from fieldstream.extract import extract_values

        sig = _sig({"name": "tags", "type": "list[string]"}, {"name": "summary"})
        as_json = extract_values(sig, 'Tags: ["x", "y"]\nSummary: s', strict_mode=False)
        as_markdown = extract_values(sig, "Tags:\n- x\n- y\nSummary: s", strict_mode=False)
        assert as_json == as_markdown

    def test_optional_field_skipped(self):
        from fieldstream.extract import extract_values

        sig = _sig({"name": "name"}, {"name": "nickname", "required": False}, {"name": "age", "type": "int"})
        assert extract_values(sig, "Name: Robert\nAge: 40", strict_mode=False) == {"name": "Robert", "age": 40}

    def test_internal_field_removed(self):
        from fieldstream.extract import extract_values

        sig = _sig({"name": "thoughts", "internal": True}, {"name": "answer"})
        result = extract_values(sig, "Thoughts: hmm\nAnswer: yes", strict_mode=False)
        assert result == {"answer": "yes"}

    def test_strict_mode_from_config(self, monkeypatch):
        from fieldstream.config import get_config
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import extract_values

        monkeypatch.setenv("FIELDSTREAM_STRICT_MODE", "true")
        get_config.cache_clear()
        try:
            with pytest.raises(FieldValidationError):
                extract_values(_sig({"name": "answer"}), "just prose")
        finally:
            get_config.cache_clear()


class TestSingleFieldAssumption:

    def test_unprefixed_content_assigned(self):
        from fieldstream.extract import extract_values

        sig = _sig({"name": "answer"})
        assert extract_values(sig, "The answer is 42", strict_mode=False) == {"answer": "The answer is 42"}

    def test_strict_mode_requires_prefix(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import extract_values

        with pytest.raises(FieldValidationError, match="Expected \\(Required\\) field not found: Answer"):
            extract_values(_sig({"name": "answer"}), "The answer is 42", strict_mode=True)

    def test_prefix_arriving_later_restarts_field(self):
        """A late prefix discards the assumed text and restarts the field."""
        from fieldstream.extract import ExtractionState, finalize, scan

        sig = _sig({"name": "answer"})
        values, state = {}, ExtractionState()

        scan(sig, values, state, "Let me think.")
        assert state.in_assumed_field is True

        content = "Let me think.\nAnswer: 42"
        scan(sig, values, state, content)
        assert state.in_assumed_field is False
        finalize(sig, values, state, content)
        assert values == {"answer": "42"}

    def test_not_assumed_for_multiple_fields(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import extract_values

        sig = _sig({"name": "name"}, {"name": "age"})
        with pytest.raises(FieldValidationError, match="Expected \\(Required\\) field not found: Name"):
            extract_values(sig, "Bob is 42", strict_mode=False)


class TestPrefixOrdering:

    def test_later_field_first_fails_naming_skipped_field(self):
        """The error names the required field that was skipped."""
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import extract_values

        sig = _sig({"name": "b"}, {"name": "a"})
        with pytest.raises(FieldValidationError) as exc_info:
            extract_values(sig, "A: 1\nB: 2", strict_mode=False)
        assert exc_info.value.field_names == ["b"]
        assert "Expected (Required) field not found" in str(exc_info.value)

    def test_streamed_out_of_order_fails(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import ExtractionState, scan

        sig = _sig({"name": "name"}, {"name": "city"}, {"name": "country"})
        values, state = {}, ExtractionState()
        scan(sig, values, state, "Name: Ada")
        with pytest.raises(FieldValidationError) as exc_info:
            scan(sig, values, state, "Name: Ada\nCountry: UK")
        assert exc_info.value.field_names == ["city"]
        assert "country" not in values

    def test_skipped_required_in_middle(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import extract_values

        sig = _sig({"name": "name"}, {"name": "city"}, {"name": "country"})
        with pytest.raises(FieldValidationError) as exc_info:
            extract_values(sig, "Name: Ada\nCountry: UK", strict_mode=False)
        assert exc_info.value.field_names == ["city"]


class TestIncrementalScan:

    def test_partial_prefix_needs_more(self):
        """A tail that may still become a prefix asks for more content."""
        from fieldstream.extract import ExtractionState, ScanStatus, scan

        sig = _sig({"name": "name"}, {"name": "age", "type": "number"})
        values, state = {}, ExtractionState()
        assert scan(sig, values, state, "Name: Bob\nAg") is ScanStatus.NEED_MORE
        assert values == {}
        assert state.current_field.name == "name"

    def test_whitespace_tail_needs_more(self):
        from fieldstream.extract import ExtractionState, ScanStatus, scan

        sig = _sig({"name": "name"}, {"name": "age"})
        values, state = {}, ExtractionState()
        assert scan(sig, values, state, "Name:  ") is ScanStatus.NEED_MORE

    def test_fence_tail_sets_in_block(self):
        from fieldstream.extract import ExtractionState, ScanStatus, scan

        sig = _sig({"name": "code", "type": "code"}, {"name": "notes"})
        values, state = {}, ExtractionState()
        assert scan(sig, values, state, "Code: ```python") is ScanStatus.NEED_MORE
        assert state.in_block is True

    def test_field_closes_when_next_prefix_arrives(self):
        from fieldstream.extract import ExtractionState, ScanStatus, scan

        sig = _sig({"name": "name"}, {"name": "age", "type": "number"})
        values, state = {}, ExtractionState()
        assert scan(sig, values, state, "Name: Bob") is ScanStatus.DONE
        assert values == {}
        assert scan(sig, values, state, "Name: Bob\nAge: 4") is ScanStatus.DONE
        assert values == {"name": "Bob"}
        assert state.current_field.name == "age"
        assert [f.name for f in state.extracted_fields] == ["name", "age"]

    def test_required_first_field_missing_fails_early(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import ExtractionState, scan

        sig = _sig({"name": "name"}, {"name": "age"})
        with pytest.raises(FieldValidationError):
            scan(sig, {}, ExtractionState(), "Hello there")

    def test_skip_early_fail_defers_to_finalize(self):
        """With skip_early_fail, a missing first field is only reported at the end."""
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import ExtractionState, ScanStatus, finalize, scan

        sig = _sig({"name": "name"}, {"name": "age"})
        values, state = {}, ExtractionState()
        assert scan(sig, values, state, "Hello there", skip_early_fail=True) is ScanStatus.DONE
        with pytest.raises(FieldValidationError, match="Required fields not found: Name, Age"):
            finalize(sig, values, state, "Hello there")


class TestFinalize:

    def test_missing_required_field_listed(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import ExtractionState, finalize, scan

        sig = _sig({"name": "name"}, {"name": "age", "type": "number"})
        values, state = {}, ExtractionState()
        scan(sig, values, state, "Name: Bob")
        with pytest.raises(FieldValidationError, match="Required field not found: Age") as exc_info:
            finalize(sig, values, state, "Name: Bob")
        assert exc_info.value.field_names == ["age"]
        assert values == {"name": "Bob"}

    def test_all_missing_fields_listed(self):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import ExtractionState, finalize, scan

        sig = _sig({"name": "a"}, {"name": "b"}, {"name": "c"}, {"name": "d", "required": False})
        values, state = {}, ExtractionState()
        scan(sig, values, state, "A: 1")
        with pytest.raises(FieldValidationError) as exc_info:
            finalize(sig, values, state, "A: 1")
        assert exc_info.value.field_names == ["b", "c"]

    def test_last_field_closed(self):
        from fieldstream.extract import ExtractionState, finalize, scan

        sig = _sig({"name": "summary"})
        values, state = {}, ExtractionState()
        scan(sig, values, state, "Summary: Hello")
        finalize(sig, values, state, "Summary: Hello world  \n")
        assert values == {"summary": "Hello world"}

    def test_empty_optional_last_field(self):
        """An empty trailing optional field is left out of the values."""
        from fieldstream.extract import ExtractionState, finalize, scan

        sig = _sig({"name": "name"}, {"name": "notes", "required": False})
        values, state = {}, ExtractionState()
        content = "Name: Bob\nNotes: null"
        scan(sig, values, state, content)
        finalize(sig, values, state, content)
        assert values == {"name": "Bob"}
