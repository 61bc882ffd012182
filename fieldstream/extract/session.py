"""One streaming extraction, from first chunk to final values."""

from __future__ import annotations

import logging
import time
from typing import Any

from ..errors import FieldValidationError
from ..schema import Signature
from ..utils.logging import log_extraction_complete, log_raw_content
from .scanner import ScanStatus, finalize, scan, strip_internal_fields
from .state import ExtractionState
from .streaming import DeltaUpdate, stream_deltas

logger = logging.getLogger(__name__)

__all__ = ["StreamingExtractor"]


class StreamingExtractor:
    """Drive scan / stream / finalize for a single model response.

    Owns one :class:`ExtractionState` and the cumulative text seen so far.
    Create one instance per response; instances are not thread-safe and
    are never shared.

    Example
    -------
        extractor = StreamingExtractor(signature)
        for chunk in response_chunks:
            for update in extractor.feed(chunk):
                render(update.delta)
        extractor.finish()
        values = extractor.result()
    """

    def __init__(
        self,
        signature: Signature,
        *,
        strict_mode: bool | None = None,
        skip_early_fail: bool | None = None,
        index: int = 0,
    ) -> None:
        if strict_mode is None or skip_early_fail is None:
            from ..config import get_config

            cfg = get_config()
            strict_mode = cfg.strict_mode if strict_mode is None else strict_mode
            skip_early_fail = cfg.skip_early_fail if skip_early_fail is None else skip_early_fail

        self.signature = signature
        self.strict_mode = strict_mode
        self.skip_early_fail = skip_early_fail
        self.index = index
        self.state = ExtractionState()
        self.values: dict[str, Any] = {}
        self.content = ""
        self.last_status: ScanStatus | None = None
        self._finished = False
        # Set when finish() failed; the session cannot be finished again.
        self.error: FieldValidationError | None = None
        self._started_at = time.perf_counter()

    @property
    def finished(self) -> bool:
        return self._finished

    def _check_open(self) -> None:
        if self._finished or self.error is not None:
            raise RuntimeError("Extraction already finished")

    def update(self, content: str) -> list[DeltaUpdate]:
        """Process the cumulative *content* and return the new deltas."""
        self._check_open()
        if not content.startswith(self.content):
            raise ValueError("Cumulative content must extend the previously seen content")
        self.content = content
        self.last_status = scan(
            self.signature,
            self.values,
            self.state,
            content,
            strict_mode=self.strict_mode,
            skip_early_fail=self.skip_early_fail,
        )
        if self.last_status is ScanStatus.NEED_MORE:
            # The tail may be the start of the next prefix; don't show it yet.
            return []
        return list(stream_deltas(self.signature, content, self.values, self.state, self.index))

    def feed(self, chunk: str) -> list[DeltaUpdate]:
        """Append *chunk* to the content seen so far and process it."""
        return self.update(self.content + chunk)

    def finish(self) -> list[DeltaUpdate]:
        """Close the last field, check required fields and flush remaining deltas."""
        self._check_open()
        log_raw_content(logger, "final response", self.content)
        try:
            finalize(self.signature, self.values, self.state, self.content)
        except FieldValidationError as exc:
            self.error = exc
            log_extraction_complete(
                logger,
                success=False,
                total_duration=time.perf_counter() - self._started_at,
                error=str(exc),
            )
            raise
        self._finished = True
        deltas = list(stream_deltas(self.signature, self.content, self.values, self.state, self.index))
        log_extraction_complete(
            logger,
            success=True,
            total_duration=time.perf_counter() - self._started_at,
            fields_extracted=len(self.result()),
        )
        return deltas

    def result(self) -> dict[str, Any]:
        """Final values without internal fields."""
        if not self._finished:
            raise RuntimeError("Call finish() before reading the result")
        return strip_internal_fields(self.signature, dict(self.values))
