# tests/test_package.py
"""Tests for top-level package API."""

import pytest


class TestPackageImports:
    """Verify the public API surface."""

    def test_version(self):
        import fieldstream
        assert hasattr(fieldstream, "__version__")
        assert fieldstream.__version__ == "0.1.0"

    def test_config_importable(self):
        from fieldstream.config import FieldstreamConfig, get_config
        assert FieldstreamConfig is not None
        assert callable(get_config)

    def test_cli_importable(self):
        from fieldstream.cli import cli
        assert callable(cli)

    def test_core_operations_exported(self):
        import fieldstream
        for name in ("scan", "finalize", "stream_deltas", "convert_and_validate", "extract_values"):
            assert callable(getattr(fieldstream, name))

    def test_validate_and_convert_alias(self):
        from fieldstream.extract import convert_and_validate, validate_and_convert
        assert validate_and_convert is convert_and_validate

    @pytest.mark.parametrize("name", ["FieldSpec", "FieldType", "Signature", "FieldValidationError", "StreamingExtractor"])
    def test_types_exported(self, name):
        import fieldstream
        assert name in fieldstream.__all__
