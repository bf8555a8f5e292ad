"""
Tests for critical rendering path extraction.
"""

from har_diagnostics.critical_path import CriticalPathExtractor
from har_diagnostics.models import CriticalPathKind, ResourceClass


class TestCriticalPathExtractor:
    """Test cases for CriticalPathExtractor class."""

    def setup_method(self):
        self.extractor = CriticalPathExtractor()

    def test_document_comes_first(self, make_record):
        records = [
            make_record(url="https://example.com/app.js", resource_class=ResourceClass.JS,
                        start_ms=10, duration_ms=30, index=0),
            make_record(url="https://example.com/", resource_class=ResourceClass.HTML,
                        start_ms=0, duration_ms=80, index=1),
        ]

        path = self.extractor.extract(records)

        assert path[0].kind == CriticalPathKind.HTML_DOCUMENT
        assert path[0].record.url == "https://example.com/"
        assert path[1].kind == CriticalPathKind.CRITICAL_JS

    def test_earliest_html_is_the_document(self, make_record):
        records = [
            make_record(url="https://example.com/frame", resource_class=ResourceClass.HTML, start_ms=300, index=0),
            make_record(url="https://example.com/", resource_class=ResourceClass.HTML, start_ms=0, index=1),
        ]

        path = self.extractor.extract(records)

        documents = [item for item in path if item.kind == CriticalPathKind.HTML_DOCUMENT]
        assert len(documents) == 1
        assert documents[0].record.url == "https://example.com/"

    def test_no_html_means_no_document(self, make_record):
        records = [make_record(url="https://example.com/a.css", resource_class=ResourceClass.CSS)]

        path = self.extractor.extract(records)

        assert [item.kind for item in path] == [CriticalPathKind.CRITICAL_CSS]

    def test_keeps_the_fastest_candidates(self, make_record):
        """Test that only the ``limit`` shortest css/js requests are kept, fastest first."""
        durations = [90, 10, 70, 30, 50, 20, 60]
        records = [
            make_record(url=f"https://example.com/{i}.js", resource_class=ResourceClass.JS,
                        duration_ms=duration, index=i)
            for i, duration in enumerate(durations)
        ]

        path = self.extractor.extract(records)

        assert [item.record.duration_ms for item in path] == [10, 20, 30, 50, 60]

    def test_excluded_urls_are_dropped(self, make_record):
        records = [
            make_record(url="https://cdn.analytics.example.net/a.js", resource_class=ResourceClass.JS, index=0),
            make_record(url="https://example.com/tracking/pixel.js", resource_class=ResourceClass.JS, index=1),
            make_record(url="https://example.com/main.css", resource_class=ResourceClass.CSS, index=2),
        ]

        path = self.extractor.extract(records)

        assert [item.record.url for item in path] == ["https://example.com/main.css"]
        for item in path:
            assert "analytics" not in item.record.url
            assert "tracking" not in item.record.url

    def test_images_and_fonts_are_not_render_blocking(self, make_record):
        records = [
            make_record(resource_class=ResourceClass.IMAGE, duration_ms=1),
            make_record(resource_class=ResourceClass.FONT, duration_ms=1),
            make_record(resource_class=ResourceClass.OTHER, duration_ms=1),
        ]
        assert self.extractor.extract(records) == ()

    def test_ties_keep_trace_order(self, make_record):
        records = [
            make_record(url=f"https://example.com/{i}.css", resource_class=ResourceClass.CSS,
                        duration_ms=25, index=i)
            for i in range(3)
        ]

        path = CriticalPathExtractor(limit=2).extract(records)

        assert [item.record.index for item in path] == [0, 1]

    def test_custom_exclusions(self, make_record):
        extractor = CriticalPathExtractor(excluded_url_substrings=("ads",))
        records = [
            make_record(url="https://ads.example.com/x.js", resource_class=ResourceClass.JS, index=0),
            make_record(url="https://analytics.example.com/y.js", resource_class=ResourceClass.JS, index=1),
        ]

        path = extractor.extract(records)

        assert [item.record.index for item in path] == [1]

    def test_empty_exclusions_keep_every_candidate(self, make_record):
        extractor = CriticalPathExtractor(excluded_url_substrings=())
        records = [
            make_record(url="https://analytics.example.com/y.js", resource_class=ResourceClass.JS, index=0),
        ]
        assert [item.record.index for item in extractor.extract(records)] == [0]

    def test_length_bound(self, make_record):
        records = [make_record(resource_class=ResourceClass.HTML, index=0)] + [
            make_record(resource_class=ResourceClass.CSS, index=i) for i in range(1, 12)
        ]
        assert len(self.extractor.extract(records)) == 6
