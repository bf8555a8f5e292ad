"""
Tests for bottleneck detection and ranking.
"""

from har_diagnostics.bottleneck_ranker import BottleneckRanker
from har_diagnostics.models import IssueKind


class TestBottleneckRanker:
    """Test cases for BottleneckRanker class."""

    def setup_method(self):
        self.ranker = BottleneckRanker()

    def test_slow_and_large_record_yields_two_bottlenecks(self, make_record):
        record = make_record(duration_ms=150, size=600 * 1024)

        bottlenecks = self.ranker.rank([record])

        assert [b.issue_kind for b in bottlenecks] == [IssueKind.SLOW_REQUEST, IssueKind.LARGE_FILE]
        assert all(b.record == record for b in bottlenecks)
        assert all(b.severity_ms == 150 for b in bottlenecks)

    def test_thresholds_are_strict(self, make_record):
        records = [
            make_record(duration_ms=100, size=500 * 1024),
            make_record(duration_ms=100.1),
            make_record(size=500 * 1024 + 1),
        ]

        kinds = [b.issue_kind for b in self.ranker.rank(records)]

        assert sorted(kinds, key=lambda k: k.value) == [IssueKind.LARGE_FILE, IssueKind.SLOW_REQUEST]

    def test_ranked_by_duration_descending(self, make_record):
        records = [
            make_record(url="a", duration_ms=120, index=0),
            make_record(url="b", duration_ms=800, index=1),
            make_record(url="c", duration_ms=5, size=2 * 1024 * 1024, index=2),
            make_record(url="d", duration_ms=300, index=3),
        ]

        bottlenecks = self.ranker.rank(records)

        assert [b.record.url for b in bottlenecks] == ["b", "d", "a", "c"]
        severities = [b.severity_ms for b in bottlenecks]
        assert severities == sorted(severities, reverse=True)

    def test_equal_durations_keep_trace_order(self, make_record):
        records = [make_record(url=str(i), duration_ms=250, index=i) for i in range(4)]
        assert [b.record.url for b in self.ranker.rank(records)] == ["0", "1", "2", "3"]

    def test_descriptions(self, make_record):
        slow, large = self.ranker.rank([make_record(duration_ms=150, size=600 * 1024)])
        assert slow.description == "Slow request"
        assert large.description == "Large file size"

    def test_no_bottlenecks(self, make_record):
        assert self.ranker.rank([make_record(duration_ms=20, size=1024)]) == ()
        assert self.ranker.rank([]) == ()

    def test_custom_thresholds(self, make_record):
        ranker = BottleneckRanker(slow_request_threshold_ms=10, large_file_threshold_bytes=100)
        assert len(ranker.rank([make_record(duration_ms=20, size=200)])) == 2
