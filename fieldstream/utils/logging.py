"""
fieldstream logging utilities.

Overview:
---------
Library modules log through ``logging.getLogger(__name__)`` and never attach
handlers themselves.  Applications (and the ``fieldstream`` CLI) call
:func:`setup_logging` once to get a per-session log file with a short session
ID on every record, which makes it easy to correlate the chunks of one
streamed response.

Log Location:
-------------
- Default: ~/.fieldstream/logs/ (``FIELDSTREAM_HOME_DIR`` moves it)
- One timestamped file per session, ``fieldstream.log`` symlinks the latest

Log Levels:
-----------
- DEBUG: closed fields with their spans, inconclusive scans, raw responses
- INFO: extraction summaries
- WARNING: failed extractions

Usage:
------
    from fieldstream.utils.logging import setup_logging, get_logger

    log_file = setup_logging(level="DEBUG")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..schema import FieldSpec

# ============================================================================
# Constants
# ============================================================================

ROOT_LOGGER_NAME = "fieldstream"
SYMLINK_NAME = "fieldstream.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s:%(lineno)d | %(message)s"

PREVIEW_CHARS = 120

_log_file_path: Optional[Path] = None
_session_id: Optional[str] = None


# ============================================================================
# Session-aware records
# ============================================================================

class SessionIdFilter(logging.Filter):
    """Stamp every record with the current session ID."""

    def __init__(self, session_id: str):
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id  # type: ignore[attr-defined]
        return True


class SessionFormatter(logging.Formatter):
    """Formatter that tolerates records logged before a session existed."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id or "N/A"  # type: ignore[attr-defined]
        return super().format(record)


# ============================================================================
# Setup
# ============================================================================

def generate_session_id() -> str:
    """Short unique session ID (6 hex characters)."""
    return uuid.uuid4().hex[:6]


def generate_log_filename(session_id: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"fieldstream_{timestamp}_{session_id}.log"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console_output: bool = False,
    quiet: bool = False,
) -> Path:
    """
    Start a logging session with a dedicated log file.

    Parameters
    ----------
    level : str, optional
        DEBUG, INFO, WARNING or ERROR.  Defaults to ``FieldstreamConfig.log_level``.
    log_dir : Path, optional
        Directory for log files.  Defaults to ``FieldstreamConfig.log_dir``.
    console_output : bool
        Also log to stderr.
    quiet : bool
        Suppress console output even when ``console_output`` is set.

    Returns
    -------
    Path
        The session's log file.
    """
    global _log_file_path, _session_id

    if level is None or log_dir is None:
        from ..config import get_config

        cfg = get_config()
        level = level or cfg.log_level
        log_dir = log_dir or cfg.log_dir

    _session_id = generate_session_id()
    log_level = getattr(logging, level.upper(), logging.INFO)

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / generate_log_filename(_session_id)
    _log_file_path = log_file

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for f in root.filters[:]:
        root.removeFilter(f)

    root.setLevel(log_level)
    root.addFilter(SessionIdFilter(_session_id))

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(SessionFormatter(FILE_LOG_FORMAT, LOG_DATE_FORMAT))
    root.addHandler(file_handler)

    if console_output and not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(SessionFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root.addHandler(console_handler)

    root.propagate = False

    symlink_path = log_dir / SYMLINK_NAME
    try:
        if symlink_path.is_symlink() or symlink_path.exists():
            symlink_path.unlink()
        symlink_path.symlink_to(log_file.name)
    except OSError:
        # No symlink support (e.g. Windows without developer mode).
        pass

    root.info("fieldstream logging session %s started (level %s)", _session_id, level.upper())
    return log_file


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``fieldstream`` namespace."""
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_current_log_file() -> Optional[Path]:
    return _log_file_path


def get_session_id() -> Optional[str]:
    return _session_id


# ============================================================================
# Structured helpers
# ============================================================================

def _preview(value: Any, limit: int = PREVIEW_CHARS) -> str:
    text = value if isinstance(value, str) else repr(value)
    if len(text) > limit:
        return text[:limit] + f"... [TRUNCATED, {len(text)} chars total]"
    return text


def log_field_closed(
    logger: logging.Logger,
    field: FieldSpec,
    start: int,
    end: int,
    value: Any,
) -> None:
    """Log a field whose span is complete and whose value was converted."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Closed field '%s' [%d:%d] -> %s", field.name, start, end, _preview(value))


def log_scan_waiting(
    logger: logging.Logger,
    field: FieldSpec,
    reason: str,
    cursor: int,
) -> None:
    """Log a scan that stopped on an inconclusive tail."""
    logger.debug("Waiting for more content while looking for '%s' (%s at %d)", field.title, reason, cursor)


def log_raw_content(
    logger: logging.Logger,
    source: str,
    content: str,
    truncate_at: int = 1000,
) -> None:
    """Log raw response text (for debugging extraction failures)."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("RAW CONTENT (%s, %d chars):\n%s", source, len(content), _preview(content, truncate_at))


def log_extraction_complete(
    logger: logging.Logger,
    success: bool,
    total_duration: Optional[float] = None,
    fields_extracted: Optional[int] = None,
    error: Optional[str] = None,
) -> None:
    """Log an extraction summary."""
    msg = f"EXTRACTION {'SUCCEEDED' if success else 'FAILED'}"
    if fields_extracted is not None:
        msg += f" | fields: {fields_extracted}"
    if total_duration is not None:
        msg += f" | {total_duration:.3f}s"
    if error:
        msg += f" | {error}"
    if success:
        logger.info(msg)
    else:
        logger.warning(msg)
