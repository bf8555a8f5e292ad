"""
Bottleneck ranking for classified records.

Two independent threshold rules are applied to every record: slow requests
and large files. A record can trip both and then yields two bottlenecks.
"""

import logging
from typing import List, Sequence, Tuple

from .models import Bottleneck, IssueKind, Record


class BottleneckRanker:
    """Flags records over the duration or size thresholds and ranks them by duration."""

    def __init__(self, slow_request_threshold_ms: float = 100.0,
                 large_file_threshold_bytes: int = 500 * 1024):
        self.slow_request_threshold_ms = slow_request_threshold_ms
        self.large_file_threshold_bytes = large_file_threshold_bytes
        self.logger = logging.getLogger(__name__)

    def issues_for(self, record: Record) -> List[IssueKind]:
        """Issue kinds a single record trips, in rule order."""
        issues = []
        if record.duration_ms > self.slow_request_threshold_ms:
            issues.append(IssueKind.SLOW_REQUEST)
        if record.size_bytes > self.large_file_threshold_bytes:
            issues.append(IssueKind.LARGE_FILE)
        return issues

    def rank(self, records: Sequence[Record]) -> Tuple[Bottleneck, ...]:
        """
        Flag and rank bottlenecks.

        Returns:
            Every bottleneck found, sorted by duration descending. The sort is
            stable, so equal durations keep trace order.
        """
        bottlenecks = [
            Bottleneck(record=record, issue_kind=issue)
            for record in records
            for issue in self.issues_for(record)
        ]
        bottlenecks.sort(key=lambda b: b.severity_ms, reverse=True)
        self.logger.info(f"Identified {len(bottlenecks)} performance bottlenecks")
        return tuple(bottlenecks)
