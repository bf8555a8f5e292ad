"""
Trace loading and validation for HAR documents.

This module parses a browser-exported HAR document into an ordered list of
TraceEntry values. Structural problems with the document abort the load;
problems with a single entry either abort it (strict mode) or are skipped and
accounted for (lenient mode).
"""

import json
import math
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from .models import TraceEntry, SkippedEntry


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TraceLoadError(Exception):
    """Base class for errors raised while loading a trace."""
    pass


class InvalidTraceFormat(TraceLoadError):
    """Raised when the top-level structure of the trace is missing or malformed."""
    pass


class MalformedEntry(TraceLoadError):
    """Raised when a single entry lacks a required field."""

    def __init__(self, index: int, field: str, reason: Optional[str] = None):
        self.index = index
        self.field = field
        self.reason = reason or f"missing required field '{field}'"
        super().__init__(f"Malformed entry at index {index}: {self.reason}")


@dataclass(frozen=True)
class LoadResult:
    """Entries that loaded cleanly plus the ones that were skipped."""
    entries: Tuple[TraceEntry, ...]
    skipped: Tuple[SkippedEntry, ...] = ()

    @property
    def total_entries(self) -> int:
        return len(self.entries) + len(self.skipped)


def parse_timestamp(value: str) -> float:
    """
    Parse an ISO-8601 HAR timestamp into epoch milliseconds.

    Accepts any number of fractional-second digits (HAR exports use
    anything from 1 to 7); digits past microseconds are truncated. Naive
    timestamps are treated as UTC.
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    # Integer microseconds keep whole-millisecond offsets exact
    return ((parsed - EPOCH) // timedelta(microseconds=1)) / 1000.0


def _non_negative_number(value: Any, default: Union[int, float] = 0) -> float:
    # HAR uses -1 for "unknown"; booleans are not sizes
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value) or value < 0:
        return default
    return value


class TraceLoader:
    """
    Loads HAR documents into TraceEntry values.

    In strict mode (the default) the first malformed entry raises
    MalformedEntry. In lenient mode such entries are skipped and recorded
    so the report can account for them.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self.logger = logging.getLogger(__name__)

    def load_file(self, path: Union[str, Path]) -> LoadResult:
        """
        Read and parse a HAR file.

        Raises:
            InvalidTraceFormat: If the file cannot be read or is not valid JSON.
            MalformedEntry: In strict mode, for the first invalid entry.
        """
        trace_path = Path(path)
        self.logger.info(f"Reading HAR file: {trace_path}")
        try:
            text = trace_path.read_text(encoding='utf-8')
        except OSError as e:
            raise InvalidTraceFormat(f"Cannot read trace file {trace_path}: {e}")
        return self.load_json(text)

    def load_json(self, text: str) -> LoadResult:
        """Parse a HAR document from its JSON text."""
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidTraceFormat(f"Trace is not valid JSON: {e}")
        return self.load(document)

    def load(self, document: Any) -> LoadResult:
        """
        Validate an already-decoded HAR document.

        Returns:
            LoadResult with entries in trace order.

        Raises:
            InvalidTraceFormat: If ``log.entries`` is absent or not a list.
            MalformedEntry: In strict mode, for the first invalid entry.
        """
        if not isinstance(document, dict):
            raise InvalidTraceFormat("Trace document must be a JSON object")
        log = document.get('log')
        if not isinstance(log, dict):
            raise InvalidTraceFormat("Trace document has no 'log' object")
        raw_entries = log.get('entries')
        if not isinstance(raw_entries, list):
            raise InvalidTraceFormat("Trace document has no 'log.entries' list")

        self.logger.info(f"Analyzing {len(raw_entries)} network requests...")

        entries: List[TraceEntry] = []
        skipped: List[SkippedEntry] = []
        for index, raw in enumerate(raw_entries):
            try:
                entries.append(self.parse_entry(index, raw))
            except MalformedEntry as e:
                if self.strict:
                    raise
                self.logger.warning(f"Skipping entry {index}: {e.reason}")
                skipped.append(SkippedEntry(index=e.index, field=e.field, reason=e.reason))

        if skipped:
            self.logger.warning(f"Skipped {len(skipped)} malformed entries out of {len(raw_entries)}")
        return LoadResult(entries=tuple(entries), skipped=tuple(skipped))

    def parse_entry(self, index: int, raw: Any) -> TraceEntry:
        """
        Normalize one HAR entry.

        Raises:
            MalformedEntry: If the start timestamp or response status is missing or invalid.
        """
        if not isinstance(raw, dict):
            raise MalformedEntry(index, 'entry', "entry is not an object")

        started = raw.get('startedDateTime')
        if not isinstance(started, str) or not started:
            raise MalformedEntry(index, 'startedDateTime')
        try:
            started_at_ms = parse_timestamp(started)
        except ValueError:
            raise MalformedEntry(index, 'startedDateTime', f"unparseable timestamp '{started}'")

        response = raw.get('response')
        if not isinstance(response, dict) or 'status' not in response:
            raise MalformedEntry(index, 'response.status')
        status = response['status']
        if isinstance(status, bool):
            raise MalformedEntry(index, 'response.status', f"invalid status {status!r}")
        try:
            status_code = int(status)
        except (TypeError, ValueError):
            raise MalformedEntry(index, 'response.status', f"invalid status {status!r}")

        request = raw.get('request')
        if not isinstance(request, dict):
            request = {}
        content = response.get('content')
        if not isinstance(content, dict):
            content = {}

        mime_type = content.get('mimeType') or ''
        return TraceEntry(
            index=index,
            url=str(request.get('url') or ''),
            method=str(request.get('method') or ''),
            status_code=status_code,
            mime_type=str(mime_type),
            size_bytes=int(_non_negative_number(content.get('size'))),
            duration_ms=float(_non_negative_number(raw.get('time'))),
            started_at_ms=started_at_ms
        )
