"""
Request classification for loaded trace entries.

Assigns each entry a ResourceClass from its MIME type and converts its
absolute start time into offsets relative to the trace origin (the earliest
entry start). Each entry is classified independently of the others, so large
traces can be split into shards and classified on a thread pool.
"""

import logging
import concurrent.futures
from typing import List, Optional, Sequence, Tuple

from .models import ResourceClass, TraceEntry, Record


# Ordered (marker, class) rules; first substring match wins.
MIME_TYPE_RULES: Tuple[Tuple[str, ResourceClass], ...] = (
    ('text/html', ResourceClass.HTML),
    ('text/css', ResourceClass.CSS),
    ('javascript', ResourceClass.JS),
    ('image/', ResourceClass.IMAGE),
    ('font/', ResourceClass.FONT),
)


def classify_mime_type(mime_type: str) -> ResourceClass:
    """
    Map a MIME type to its resource class.

    Total over all strings: anything that matches no rule, including the
    empty string, is ``ResourceClass.OTHER``.
    """
    for marker, resource_class in MIME_TYPE_RULES:
        if marker in (mime_type or ''):
            return resource_class
    return ResourceClass.OTHER


def time_origin(entries: Sequence[TraceEntry]) -> float:
    """Earliest start time across the trace, or 0 for an empty trace."""
    if not entries:
        return 0.0
    return min(entry.started_at_ms for entry in entries)


def classify_entry(entry: TraceEntry, origin_ms: float) -> Record:
    """Classify a single entry against a fixed time origin."""
    return Record(
        url=entry.url,
        method=entry.method,
        status_code=entry.status_code,
        mime_type=entry.mime_type,
        size_bytes=entry.size_bytes,
        duration_ms=entry.duration_ms,
        start_offset_ms=entry.started_at_ms - origin_ms,
        resource_class=classify_mime_type(entry.mime_type),
        index=entry.index
    )


def split_into_shards(items: Sequence, shard_size: int) -> List[Sequence]:
    """Split a sequence into contiguous shards of at most ``shard_size`` items."""
    if shard_size < 1:
        raise ValueError(f"shard_size must be at least 1, got {shard_size}")
    return [items[i:i + shard_size] for i in range(0, len(items), shard_size)]


class RequestClassifier:
    """
    Classifies trace entries into records.

    The time origin is computed once for the whole trace so that every shard
    shares the same reference point.
    """

    def __init__(self, max_workers: int = 1, shard_size: int = 500):
        self.max_workers = max_workers
        self.shard_size = shard_size
        self.logger = logging.getLogger(__name__)

    def classify(self, entries: Sequence[TraceEntry],
                 origin_ms: Optional[float] = None) -> Tuple[Record, ...]:
        """Classify all entries sequentially, preserving input order."""
        if origin_ms is None:
            origin_ms = time_origin(entries)
        return tuple(classify_entry(entry, origin_ms) for entry in entries)

    def classify_shards(self, entries: Sequence[TraceEntry]) -> List[Tuple[Record, ...]]:
        """
        Classify entries shard by shard.

        Shards are classified concurrently when ``max_workers > 1``. The
        returned list holds one tuple of records per shard, in input order.
        """
        origin_ms = time_origin(entries)
        shards = split_into_shards(list(entries), self.shard_size)

        if self.max_workers <= 1 or len(shards) <= 1:
            return [self.classify(shard, origin_ms) for shard in shards]

        self.logger.debug(
            f"Classifying {len(entries)} entries in {len(shards)} shards "
            f"with {self.max_workers} workers"
        )
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(lambda shard: self.classify(shard, origin_ms), shards))
