"""
Timeline gap detection.

Walks the request timeline in start order and reports idle intervals between
consecutive requests. Idle time before the first request and after the last
one is not modeled. This stage needs the complete, globally ordered record
set, so it runs only after every shard has been classified.
"""

import logging
from typing import Optional, Sequence, Tuple

from .models import Gap, GapSeverity, Record, TargetExceeded


class TimelineGapDetector:
    """
    Flags idle gaps between temporally adjacent requests.

    A gap longer than ``minor_threshold_ms`` is reported; one longer than
    ``critical_threshold_ms`` is Critical, otherwise Minor.
    """

    def __init__(self, minor_threshold_ms: float = 50.0, critical_threshold_ms: float = 200.0):
        self.minor_threshold_ms = minor_threshold_ms
        self.critical_threshold_ms = critical_threshold_ms
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def timeline(records: Sequence[Record]) -> Tuple[Record, ...]:
        """Records ordered by start offset, ties broken by trace order."""
        return tuple(sorted(records, key=lambda r: (r.start_offset_ms, r.index)))

    def classify_gap(self, duration_ms: float) -> Optional[GapSeverity]:
        if duration_ms <= self.minor_threshold_ms:
            return None
        if duration_ms > self.critical_threshold_ms:
            return GapSeverity.CRITICAL
        return GapSeverity.MINOR

    def detect(self, records: Sequence[Record]) -> Tuple[Gap, ...]:
        """
        Find gaps between adjacent requests.

        Returns:
            Gaps sorted by duration, longest first.
        """
        ordered = self.timeline(records)
        gaps = []
        for previous, current in zip(ordered, ordered[1:]):
            severity = self.classify_gap(current.start_offset_ms - previous.end_offset_ms)
            if severity is None:
                continue
            gaps.append(Gap(
                start_offset_ms=previous.end_offset_ms,
                end_offset_ms=current.start_offset_ms,
                before_url=previous.url,
                after_url=current.url,
                severity=severity
            ))

        gaps.sort(key=lambda gap: gap.duration_ms, reverse=True)
        critical = sum(1 for gap in gaps if gap.severity == GapSeverity.CRITICAL)
        self.logger.info(f"Identified {len(gaps)} performance gaps ({critical} critical)")
        return tuple(gaps)

    def check_target(self, total_load_time_ms: float,
                     target_load_time_ms: float) -> Optional[TargetExceeded]:
        """Report how far the total load time overshoots the target, if at all."""
        if total_load_time_ms > target_load_time_ms:
            return TargetExceeded(
                total_load_time_ms=total_load_time_ms,
                target_load_time_ms=target_load_time_ms
            )
        return None


def total_load_time(records: Sequence[Record]) -> float:
    """Span from the earliest start to the latest end; 0 for an empty trace."""
    if not records:
        return 0.0
    return max(r.end_offset_ms for r in records) - min(r.start_offset_ms for r in records)
