"""
Per-class resource statistics.

Aggregation is an immutable fold: every step produces a new ResourceStat
rather than bumping shared counters. Partial breakdowns computed over
separate shards merge by field-wise addition, in any order, to the same
result as a single pass.
"""

import logging
from functools import reduce
from typing import Dict, Iterable, Tuple

from .models import ResourceClass, ResourceStat, Record


ResourceBreakdown = Tuple[ResourceStat, ...]


def _ordered(stats: Dict[ResourceClass, ResourceStat]) -> ResourceBreakdown:
    return tuple(stats[cls] for cls in ResourceClass if cls in stats and stats[cls].count > 0)


def fold_record(breakdown: ResourceBreakdown, record: Record) -> ResourceBreakdown:
    """Return a new breakdown that also accounts for ``record``."""
    stats = {stat.resource_class: stat for stat in breakdown}
    current = stats.get(record.resource_class, ResourceStat(resource_class=record.resource_class))
    stats[record.resource_class] = current.add(record)
    return _ordered(stats)


class ResourceAggregator:
    """Folds classified records into per-class statistics."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def aggregate(self, records: Iterable[Record]) -> ResourceBreakdown:
        """
        Aggregate records into one ResourceStat per class present.

        Classes with no records are omitted; the result is ordered by
        ResourceClass declaration order.
        """
        return reduce(fold_record, records, ())

    @staticmethod
    def merge(*breakdowns: ResourceBreakdown) -> ResourceBreakdown:
        """Merge partial breakdowns; commutative and associative."""
        merged: Dict[ResourceClass, ResourceStat] = {}
        for breakdown in breakdowns:
            for stat in breakdown:
                existing = merged.get(stat.resource_class)
                merged[stat.resource_class] = existing.merge(stat) if existing else stat
        return _ordered(merged)

    def aggregate_shards(self, shards: Iterable[Iterable[Record]]) -> ResourceBreakdown:
        """Aggregate each shard separately, then merge the partial results."""
        partials = [self.aggregate(shard) for shard in shards]
        self.logger.debug(f"Merging {len(partials)} partial resource breakdowns")
        return reduce(lambda left, right: self.merge(left, right), partials, ())
