"""Cross-cutting helpers shared by the library and the CLI."""

from .logging import (
    setup_logging,
    get_logger,
    get_current_log_file,
    get_session_id,
    log_field_closed,
    log_scan_waiting,
    log_raw_content,
    log_extraction_complete,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_current_log_file",
    "get_session_id",
    "log_field_closed",
    "log_scan_waiting",
    "log_raw_content",
    "log_extraction_complete",
]
