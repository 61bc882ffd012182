# tests/test_logging.py
"""Tests for the session log setup and structured log helpers."""

import logging

import pytest


@pytest.fixture
def log_session(tmp_path):
    from fieldstream.utils.logging import ROOT_LOGGER_NAME, setup_logging

    log_file = setup_logging(level="DEBUG", log_dir=tmp_path)
    yield log_file
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for f in root.filters[:]:
        root.removeFilter(f)
    root.setLevel(logging.NOTSET)
    root.propagate = True


def _flush():
    from fieldstream.utils.logging import ROOT_LOGGER_NAME

    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()


class TestSetupLogging:

    def test_creates_session_file(self, log_session, tmp_path):
        from fieldstream.utils.logging import get_current_log_file, get_session_id

        assert log_session.parent == tmp_path
        assert log_session.exists()
        assert get_current_log_file() == log_session
        sid = get_session_id()
        assert sid is not None and len(sid) == 6
        assert sid in log_session.name

    def test_symlink_points_to_latest(self, log_session, tmp_path):
        link = tmp_path / "fieldstream.log"
        if not link.is_symlink():
            pytest.skip("symlinks not supported here")
        assert link.resolve() == log_session.resolve()

    def test_records_carry_session_id(self, log_session):
        from fieldstream.utils.logging import get_logger, get_session_id

        get_logger("tests").info("hello from test")
        _flush()
        text = log_session.read_text(encoding="utf-8")
        assert "hello from test" in text
        assert get_session_id() in text

    def test_get_logger_namespaced(self):
        from fieldstream.utils.logging import get_logger

        assert get_logger("cli").name == "fieldstream.cli"
        assert get_logger("fieldstream.extract").name == "fieldstream.extract"


class TestExtractionLogging:

    def test_closed_fields_logged_at_debug(self, log_session):
        from fieldstream.extract import extract_values
        from fieldstream.schema import FieldSpec, Signature

        sig = Signature(fields=[FieldSpec(name="name"), FieldSpec(name="age", type="number")])
        extract_values(sig, "Name: Bob\nAge: 42", strict_mode=False)
        _flush()
        text = log_session.read_text(encoding="utf-8")
        assert "Closed field 'name'" in text
        assert "Closed field 'age'" in text

    def test_failed_session_logged_as_warning(self, log_session):
        from fieldstream.errors import FieldValidationError
        from fieldstream.extract import StreamingExtractor
        from fieldstream.schema import FieldSpec, Signature

        sig = Signature(fields=[FieldSpec(name="name"), FieldSpec(name="age")])
        ex = StreamingExtractor(sig, strict_mode=False, skip_early_fail=False)
        ex.feed("Name: Bob")
        with pytest.raises(FieldValidationError):
            ex.finish()
        _flush()
        text = log_session.read_text(encoding="utf-8")
        assert "WARNING" in text
        assert "EXTRACTION FAILED" in text

    def test_raw_content_truncated(self, caplog):
        from fieldstream.utils.logging import log_raw_content

        logger = logging.getLogger("tests.raw")
        with caplog.at_level(logging.DEBUG, logger="tests.raw"):
            log_raw_content(logger, "response", "x" * 50, truncate_at=10)
        assert "TRUNCATED, 50 chars total" in caplog.text
