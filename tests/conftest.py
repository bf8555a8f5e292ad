"""
Shared test fixtures and configuration for all tests.

This module provides builders for HAR documents so tests can describe a
trace as a list of (offset, duration, mime type, size) requests instead of
spelling out the full HAR structure.
"""

import json
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from har_diagnostics.models import Record, ResourceClass


BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def build_entry(url="https://example.com/", start_ms=0.0, duration_ms=10.0,
                mime_type="text/html", size=1024, status=200, method="GET"):
    """Build one HAR entry starting ``start_ms`` after BASE_TIME."""
    started = BASE_TIME + timedelta(milliseconds=start_ms)
    return {
        "startedDateTime": started.isoformat().replace("+00:00", "Z"),
        "time": duration_ms,
        "request": {"method": method, "url": url},
        "response": {
            "status": status,
            "content": {"mimeType": mime_type, "size": size}
        }
    }


def build_har(entries):
    return {"log": {"version": "1.2", "entries": list(entries)}}


def build_record(url="https://example.com/", start_ms=0.0, duration_ms=10.0,
                 resource_class=ResourceClass.OTHER, size=0, status=200, index=0,
                 mime_type=""):
    """Build an already-classified Record."""
    return Record(
        url=url,
        method="GET",
        status_code=status,
        mime_type=mime_type,
        size_bytes=size,
        duration_ms=duration_ms,
        start_offset_ms=start_ms,
        resource_class=resource_class,
        index=index
    )


@pytest.fixture(autouse=True)
def clean_config_environment():
    """Isolate every test from HAR_* variables."""
    with patch.dict('os.environ', {}, clear=False) as environ:
        for key in [k for k in environ if k.startswith('HAR_')]:
            del environ[key]
        yield


@pytest.fixture
def make_entry():
    """Factory fixture for single HAR entries."""
    return build_entry


@pytest.fixture
def make_har():
    """Factory fixture for HAR documents."""
    return build_har


@pytest.fixture
def make_record():
    """Factory fixture for classified records."""
    return build_record


@pytest.fixture
def sample_har():
    """A small page load: document, styles, scripts, images and a tracking beacon."""
    return build_har([
        build_entry("https://shop.example.com/", 0, 120, "text/html; charset=utf-8", 20 * 1024),
        build_entry("https://shop.example.com/css/main.css", 130, 40, "text/css", 15 * 1024),
        build_entry("https://shop.example.com/js/app.js", 135, 90, "application/javascript", 120 * 1024),
        build_entry("https://cdn.analytics.example.net/a.js", 140, 20, "text/javascript", 4 * 1024),
        build_entry("https://shop.example.com/img/hero.png", 500, 350, "image/png", 800 * 1024),
        build_entry("https://shop.example.com/fonts/inter.woff2", 520, 30, "font/woff2", 48 * 1024),
        build_entry("https://shop.example.com/api/cart", 900, 60, "application/json", 512),
    ])


@pytest.fixture
def har_file(tmp_path, sample_har):
    """The sample HAR written to disk."""
    path = tmp_path / "page.har"
    path.write_text(json.dumps(sample_har), encoding="utf-8")
    return path
