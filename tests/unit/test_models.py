"""
Tests for the core data models.
"""

import dataclasses
import pytest

from har_diagnostics.models import (
    Bottleneck, GapSeverity, Gap, IssueKind, Priority, Recommendation, Report,
    ImageSummary, ReportMetadata, ResourceClass, ResourceStat, SkippedEntry, TargetExceeded
)


class TestRecord:
    """Test cases for Record."""

    def test_end_offset(self, make_record):
        record = make_record(start_ms=120.0, duration_ms=30.5)
        assert record.end_offset_ms == 150.5

    def test_records_are_immutable(self, make_record):
        record = make_record()
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.duration_ms = 1.0

    def test_to_dict(self, make_record):
        data = make_record(url="https://example.com/a.css", resource_class=ResourceClass.CSS,
                           start_ms=10, duration_ms=5).to_dict()
        assert data["resourceClass"] == "css"
        assert data["endOffsetMs"] == 15


class TestResourceStat:
    """Test cases for ResourceStat."""

    def test_add_returns_new_stat(self, make_record):
        empty = ResourceStat(ResourceClass.IMAGE)
        updated = empty.add(make_record(duration_ms=12, size=100))

        assert empty.count == 0
        assert (updated.count, updated.total_size_bytes, updated.total_time_ms) == (1, 100, 12)

    def test_to_dict_includes_average(self):
        data = ResourceStat(ResourceClass.JS, count=4, total_size_bytes=10, total_time_ms=100).to_dict()
        assert data["avgTimeMs"] == 25


class TestFindings:
    """Test cases for Gap, TargetExceeded and Bottleneck."""

    def test_gap_duration(self):
        gap = Gap(100.0, 160.0, "a", "b", GapSeverity.MINOR)
        assert gap.duration_ms == 60
        assert gap.to_dict()["severity"] == "Minor"

    def test_target_exceeded_fractional_values(self):
        exceeded = TargetExceeded(total_load_time_ms=12.5, target_load_time_ms=2.0)
        assert exceeded.excess_ms == 10.5
        assert exceeded.suggestion == "Total load time exceeds 2ms target by 10.5ms"
        assert exceeded.to_dict()["type"] == "Target Exceeded"

    def test_bottleneck_severity_is_duration(self, make_record):
        bottleneck = Bottleneck(make_record(duration_ms=42, size=10 ** 7), IssueKind.LARGE_FILE)
        assert bottleneck.severity_ms == 42
        assert bottleneck.to_dict()["issueKind"] == "LargeFile"


class TestReport:
    """Test cases for the Report aggregate."""

    def test_defaults(self):
        report = Report(total_load_time_ms=0.0, target_load_time_ms=2.0)

        assert report.performance_status == "GOOD"
        assert report.record_count == 0
        assert report.resource_breakdown == {}
        assert report.metadata == ReportMetadata()
        assert report.images == ImageSummary()

    def test_top_n_helpers(self):
        gaps = tuple(Gap(0.0, float(d), "a", "b", GapSeverity.CRITICAL) for d in (900, 700, 300))
        report = Report(total_load_time_ms=1000.0, target_load_time_ms=2.0, gaps=gaps)

        assert report.top_gaps(2) == gaps[:2]
        assert report.top_bottlenecks(2) == ()

    def test_recommendations_by_priority(self):
        high = Recommendation(Priority.HIGH, "Images", "s", "i", "a")
        medium = Recommendation(Priority.MEDIUM, "Network", "s", "i", "a")
        report = Report(total_load_time_ms=0.0, target_load_time_ms=2.0, recommendations=(high, medium))

        assert report.recommendations_by_priority(Priority.HIGH) == (high,)
        assert report.recommendations_by_priority(Priority.CRITICAL) == ()

    def test_metadata_skipped_count(self):
        metadata = ReportMetadata(
            source="x.har",
            total_entries=3,
            skipped_entries=(SkippedEntry(2, "startedDateTime", "missing"),)
        )
        assert metadata.skipped_count == 1
        assert metadata.to_dict()["skippedEntries"] == [
            {"index": 2, "field": "startedDateTime", "reason": "missing"}
        ]


class TestImageSummary:
    """Test cases for ImageSummary."""

    def test_empty_summary(self):
        images = ImageSummary()

        assert images.error_count == 0
        assert images.success_rate == 100
        assert images.modern_format_avg_time_ms == 0

    def test_to_dict(self, make_record):
        missing = make_record(url="https://example.com/x.png", resource_class=ResourceClass.IMAGE,
                              status=404, duration_ms=12)
        images = ImageSummary(
            total_images=4,
            successful_images=3,
            error_records=(missing,),
            modern_format_count=2,
            modern_format_total_time_ms=90.0,
            modern_format_total_size_bytes=2048
        )

        assert images.to_dict() == {
            "totalImages": 4,
            "successfulImages": 3,
            "errorCount": 1,
            "errors": [{"url": "https://example.com/x.png", "statusCode": 404, "durationMs": 12}],
            "successRate": 75.0,
            "modernFormatCount": 2,
            "modernFormatAvgTimeMs": 45.0,
            "modernFormatTotalSizeBytes": 2048,
        }

    def test_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ImageSummary().total_images = 1
