"""
Unit tests for request classification.
"""

import pytest

from har_diagnostics.models import ResourceClass, TraceEntry
from har_diagnostics.request_classifier import (
    RequestClassifier, classify_entry, classify_mime_type, split_into_shards, time_origin
)


def make_trace_entry(index, started_at_ms, duration_ms=10.0, mime_type="text/html"):
    return TraceEntry(
        index=index,
        url=f"https://example.com/{index}",
        method="GET",
        status_code=200,
        mime_type=mime_type,
        size_bytes=100,
        duration_ms=duration_ms,
        started_at_ms=started_at_ms
    )


class TestClassifyMimeType:
    """Test cases for the MIME type rule table."""

    @pytest.mark.parametrize("mime_type,expected", [
        ("text/html", ResourceClass.HTML),
        ("text/html; charset=utf-8", ResourceClass.HTML),
        ("text/css", ResourceClass.CSS),
        ("application/javascript", ResourceClass.JS),
        ("text/javascript", ResourceClass.JS),
        ("application/x-javascript", ResourceClass.JS),
        ("image/png", ResourceClass.IMAGE),
        ("image/svg+xml", ResourceClass.IMAGE),
        ("font/woff2", ResourceClass.FONT),
        ("application/json", ResourceClass.OTHER),
        ("application/font-woff", ResourceClass.OTHER),
        ("", ResourceClass.OTHER),
    ])
    def test_classification(self, mime_type, expected):
        assert classify_mime_type(mime_type) == expected

    def test_first_match_wins(self):
        # Contains both the html and javascript markers
        assert classify_mime_type("text/html+javascript") == ResourceClass.HTML

    def test_none_is_other(self):
        assert classify_mime_type(None) == ResourceClass.OTHER


class TestRequestClassifier:
    """Test cases for RequestClassifier."""

    def test_offsets_relative_to_earliest_start(self):
        entries = [
            make_trace_entry(0, 1_000_100.0, duration_ms=20),
            make_trace_entry(1, 1_000_000.0, duration_ms=50),
            make_trace_entry(2, 1_000_250.0, duration_ms=5),
        ]

        records = RequestClassifier().classify(entries)

        assert [r.start_offset_ms for r in records] == [100.0, 0.0, 250.0]
        assert [r.end_offset_ms for r in records] == [120.0, 50.0, 255.0]
        assert [r.index for r in records] == [0, 1, 2]

    def test_end_offset_never_before_start(self):
        entries = [make_trace_entry(i, 500.0 + i, duration_ms=0.0) for i in range(3)]
        for record in RequestClassifier().classify(entries):
            assert record.end_offset_ms >= record.start_offset_ms

    def test_classification_is_idempotent(self):
        entry = make_trace_entry(0, 2_000.0, mime_type="text/css")
        first = classify_entry(entry, 1_500.0)
        second = classify_entry(entry, 1_500.0)

        assert first == second
        assert first.resource_class == ResourceClass.CSS
        assert first.start_offset_ms == 500.0

    def test_empty_input(self):
        assert RequestClassifier().classify([]) == ()
        assert RequestClassifier().classify_shards([]) == []
        assert time_origin([]) == 0.0

    def test_sharded_classification_matches_sequential(self):
        entries = [
            make_trace_entry(i, 10_000.0 + (37 * i) % 400, mime_type="image/png" if i % 2 else "text/css")
            for i in range(25)
        ]

        sequential = RequestClassifier().classify(entries)
        sharded = RequestClassifier(max_workers=4, shard_size=4).classify_shards(entries)

        assert len(sharded) == 7
        assert tuple(record for shard in sharded for record in shard) == sequential

    def test_shards_share_one_time_origin(self):
        # The earliest entry sits in the last shard
        entries = [make_trace_entry(i, 1_000.0 - i * 10) for i in range(6)]

        shards = RequestClassifier(max_workers=2, shard_size=2).classify_shards(entries)

        assert shards[0][0].start_offset_ms == 50.0
        assert shards[-1][-1].start_offset_ms == 0.0


class TestSplitIntoShards:
    """Test cases for shard splitting."""

    def test_contiguous_shards(self):
        assert split_into_shards([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_invalid_shard_size(self):
        with pytest.raises(ValueError):
            split_into_shards([1], 0)
