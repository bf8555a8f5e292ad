"""
Core data models for HAR trace diagnostics.

This module defines all the value types that flow between the analysis stages,
from loaded trace entries through classified records, derived findings and
the final report. Every model is frozen: stages hand each other new values
instead of mutating shared state.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict


class ResourceClass(Enum):
    """Coarse content-type category of a request, in classification priority order."""
    HTML = "html"
    CSS = "css"
    JS = "js"
    IMAGE = "image"
    FONT = "font"
    OTHER = "other"


class IssueKind(Enum):
    """Kind of problem a bottleneck was flagged for."""
    SLOW_REQUEST = "SlowRequest"
    LARGE_FILE = "LargeFile"


class GapSeverity(Enum):
    """Severity of an idle interval on the request timeline."""
    MINOR = "Minor"
    CRITICAL = "Critical"


class Priority(Enum):
    """Recommendation priority levels."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CriticalPathKind(Enum):
    """Role of a resource on the critical rendering path."""
    HTML_DOCUMENT = "HTML Document"
    CRITICAL_CSS = "Critical CSS"
    CRITICAL_JS = "Critical JS"


class PerformanceGrade(Enum):
    """Overall letter grade for a page load."""
    A_PLUS = "A+"
    B_PLUS = "B+"
    C = "C"


@dataclass(frozen=True)
class TraceEntry:
    """
    A single HAR entry after validation, before classification.

    Times are absolute: ``started_at_ms`` is milliseconds since the epoch.
    """
    index: int
    url: str
    method: str
    status_code: int
    mime_type: str
    size_bytes: int
    duration_ms: float
    started_at_ms: float


@dataclass(frozen=True)
class SkippedEntry:
    """Accounting record for an entry dropped by lenient loading."""
    index: int
    field: str
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {"index": self.index, "field": self.field, "reason": self.reason}


@dataclass(frozen=True)
class Record:
    """
    A classified request record with offsets relative to the trace origin.

    ``index`` keeps the position of the entry in the source trace so that
    timeline ordering can break ties deterministically.
    """
    url: str
    method: str
    status_code: int
    mime_type: str
    size_bytes: int
    duration_ms: float
    start_offset_ms: float
    resource_class: ResourceClass
    index: int = 0

    @property
    def end_offset_ms(self) -> float:
        """Offset at which the request finished."""
        return self.start_offset_ms + self.duration_ms

    def to_dict(self) -> Dict[str, object]:
        return {
            "url": self.url,
            "method": self.method,
            "statusCode": self.status_code,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
            "durationMs": self.duration_ms,
            "startOffsetMs": self.start_offset_ms,
            "endOffsetMs": self.end_offset_ms,
            "resourceClass": self.resource_class.value,
        }


@dataclass(frozen=True)
class ResourceStat:
    """
    Aggregated statistics for one resource class.

    Only the additive totals are stored; ``avg_time_ms`` is derived from them,
    so partial stats can be merged in any order without rounding drift.
    """
    resource_class: ResourceClass
    count: int = 0
    total_size_bytes: int = 0
    total_time_ms: float = 0.0

    @property
    def avg_time_ms(self) -> float:
        """Average request duration for the class."""
        if self.count > 0:
            return self.total_time_ms / self.count
        return 0.0

    def add(self, record: Record) -> 'ResourceStat':
        """Return a new stat that also accounts for ``record``."""
        return ResourceStat(
            resource_class=self.resource_class,
            count=self.count + 1,
            total_size_bytes=self.total_size_bytes + record.size_bytes,
            total_time_ms=self.total_time_ms + record.duration_ms
        )

    def merge(self, other: 'ResourceStat') -> 'ResourceStat':
        """Field-wise sum of two partial stats for the same class."""
        if other.resource_class is not self.resource_class:
            raise ValueError(
                f"Cannot merge {other.resource_class.value} stats into {self.resource_class.value} stats"
            )
        return ResourceStat(
            resource_class=self.resource_class,
            count=self.count + other.count,
            total_size_bytes=self.total_size_bytes + other.total_size_bytes,
            total_time_ms=self.total_time_ms + other.total_time_ms
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "count": self.count,
            "totalSizeBytes": self.total_size_bytes,
            "totalTimeMs": self.total_time_ms,
            "avgTimeMs": self.avg_time_ms,
        }


@dataclass(frozen=True)
class Bottleneck:
    """A single record flagged for excessive duration or size."""
    record: Record
    issue_kind: IssueKind

    @property
    def severity_ms(self) -> float:
        """Ranking key; bottlenecks are ranked by request duration."""
        return self.record.duration_ms

    @property
    def description(self) -> str:
        if self.issue_kind == IssueKind.SLOW_REQUEST:
            return "Slow request"
        return "Large file size"

    def to_dict(self) -> Dict[str, object]:
        return {
            "record": self.record.to_dict(),
            "issueKind": self.issue_kind.value,
            "severityMs": self.severity_ms,
        }


@dataclass(frozen=True)
class Gap:
    """An idle interval between two temporally adjacent requests."""
    start_offset_ms: float
    end_offset_ms: float
    before_url: str
    after_url: str
    severity: GapSeverity

    @property
    def duration_ms(self) -> float:
        return self.end_offset_ms - self.start_offset_ms

    @property
    def suggestion(self) -> str:
        if self.severity == GapSeverity.CRITICAL:
            return "Critical gap - investigate waterfall"
        return "Minor optimization opportunity"

    def to_dict(self) -> Dict[str, object]:
        return {
            "startOffsetMs": self.start_offset_ms,
            "endOffsetMs": self.end_offset_ms,
            "durationMs": self.duration_ms,
            "beforeUrl": self.before_url,
            "afterUrl": self.after_url,
            "severity": self.severity.value,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class TargetExceeded:
    """
    Finding raised when the whole page load overshoots the target.

    Reported next to the gaps but it is not a timeline interval and is never
    counted as one.
    """
    total_load_time_ms: float
    target_load_time_ms: float

    @property
    def excess_ms(self) -> float:
        return self.total_load_time_ms - self.target_load_time_ms

    @property
    def suggestion(self) -> str:
        return (
            f"Total load time exceeds {self.target_load_time_ms:g}ms target "
            f"by {self.excess_ms:g}ms"
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": "Target Exceeded",
            "totalLoadTimeMs": self.total_load_time_ms,
            "targetLoadTimeMs": self.target_load_time_ms,
            "excessMs": self.excess_ms,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class CriticalPathItem:
    """A resource selected onto the critical rendering path."""
    kind: CriticalPathKind
    record: Record

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.kind.value, "record": self.record.to_dict()}


@dataclass(frozen=True)
class Recommendation:
    """An optimization recommendation produced by the rule table."""
    priority: Priority
    category: str
    suggestion: str
    impact_estimate: str
    action: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "priority": self.priority.value,
            "category": self.category,
            "suggestion": self.suggestion,
            "impactEstimate": self.impact_estimate,
            "action": self.action,
        }


@dataclass(frozen=True)
class RequestSummary:
    """HTTP outcome counts across the trace."""
    total_requests: int = 0
    successful_requests: int = 0
    redirect_requests: int = 0
    failed_requests: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "redirectRequests": self.redirect_requests,
            "failedRequests": self.failed_requests,
        }


@dataclass(frozen=True)
class GradeAssessment:
    """Letter grade together with the inputs it was computed from."""
    grade: PerformanceGrade
    page_load_time_ms: float
    image_error_count: int
    image_success_rate: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "grade": self.grade.value,
            "pageLoadTimeMs": self.page_load_time_ms,
            "imageErrorCount": self.image_error_count,
            "imageSuccessRate": self.image_success_rate,
        }


@dataclass(frozen=True)
class ImageSummary:
    """
    Outcome of the image requests in a trace.

    ``error_records`` holds the images that returned 404. Modern-format
    totals cover successful WebP/AVIF images only.
    """
    total_images: int = 0
    successful_images: int = 0
    error_records: Tuple[Record, ...] = ()
    modern_format_count: int = 0
    modern_format_total_time_ms: float = 0.0
    modern_format_total_size_bytes: int = 0

    @property
    def error_count(self) -> int:
        return len(self.error_records)

    @property
    def success_rate(self) -> float:
        """Percentage of images answered with 200; 100 when there are none."""
        if self.total_images == 0:
            return 100.0
        return self.successful_images / self.total_images * 100

    @property
    def modern_format_avg_time_ms(self) -> float:
        if self.modern_format_count > 0:
            return self.modern_format_total_time_ms / self.modern_format_count
        return 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalImages": self.total_images,
            "successfulImages": self.successful_images,
            "errorCount": self.error_count,
            "errors": [
                {"url": r.url, "statusCode": r.status_code, "durationMs": r.duration_ms}
                for r in self.error_records
            ],
            "successRate": self.success_rate,
            "modernFormatCount": self.modern_format_count,
            "modernFormatAvgTimeMs": self.modern_format_avg_time_ms,
            "modernFormatTotalSizeBytes": self.modern_format_total_size_bytes,
        }


@dataclass(frozen=True)
class ReportMetadata:
    """Provenance of a report: where the trace came from and what was skipped."""
    source: str = "<memory>"
    generated_at: str = ""
    total_entries: int = 0
    skipped_entries: Tuple[SkippedEntry, ...] = ()

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_entries)

    def to_dict(self) -> Dict[str, object]:
        return {
            "source": self.source,
            "generatedAt": self.generated_at,
            "totalEntries": self.total_entries,
            "skippedCount": self.skipped_count,
            "skippedEntries": [entry.to_dict() for entry in self.skipped_entries],
        }


@dataclass(frozen=True)
class Report:
    """
    Aggregate root of a trace diagnosis.

    Built once by the ReportAssembler. Gaps and bottlenecks are stored already
    ranked, most severe first.
    """
    total_load_time_ms: float
    target_load_time_ms: float
    resource_stats: Tuple[ResourceStat, ...] = ()
    critical_path: Tuple[CriticalPathItem, ...] = ()
    gaps: Tuple[Gap, ...] = ()
    bottlenecks: Tuple[Bottleneck, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()
    target_exceeded: Optional[TargetExceeded] = None
    request_summary: RequestSummary = field(default_factory=RequestSummary)
    grade: Optional[GradeAssessment] = None
    images: ImageSummary = field(default_factory=ImageSummary)
    metadata: ReportMetadata = field(default_factory=ReportMetadata)

    @property
    def performance_status(self) -> str:
        if self.total_load_time_ms <= self.target_load_time_ms:
            return "GOOD"
        return "NEEDS_OPTIMIZATION"

    @property
    def resource_breakdown(self) -> Dict[ResourceClass, ResourceStat]:
        """Per-class statistics keyed by resource class."""
        return {stat.resource_class: stat for stat in self.resource_stats}

    @property
    def record_count(self) -> int:
        return sum(stat.count for stat in self.resource_stats)

    def top_bottlenecks(self, limit: int = 5) -> Tuple[Bottleneck, ...]:
        return self.bottlenecks[:limit]

    def top_gaps(self, limit: int = 5) -> Tuple[Gap, ...]:
        return self.gaps[:limit]

    def recommendations_by_priority(self, priority: Priority) -> Tuple[Recommendation, ...]:
        return tuple(rec for rec in self.recommendations if rec.priority == priority)


__all__ = [
    'ResourceClass',
    'IssueKind',
    'GapSeverity',
    'Priority',
    'CriticalPathKind',
    'PerformanceGrade',
    'TraceEntry',
    'SkippedEntry',
    'Record',
    'ResourceStat',
    'Bottleneck',
    'Gap',
    'TargetExceeded',
    'CriticalPathItem',
    'Recommendation',
    'RequestSummary',
    'GradeAssessment',
    'ImageSummary',
    'ReportMetadata',
    'Report',
]
