"""
TraceAnalyzer: the end-to-end HAR diagnosis pipeline.

This module wires the analysis stages together:

    TraceLoader -> RequestClassifier -> (ResourceAggregator | CriticalPathExtractor
    | TimelineGapDetector | BottleneckRanker) -> RecommendationEngine -> ReportAssembler

Each stage receives immutable values from the previous one. Classification
and aggregation may run per shard; gap detection waits for every shard since
it needs the full timeline.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from .config_manager import AnalysisConfig
from .models import Report, SkippedEntry, TraceEntry
from .trace_loader import TraceLoader, LoadResult
from .request_classifier import RequestClassifier
from .resource_aggregator import ResourceAggregator
from .critical_path import CriticalPathExtractor
from .gap_detector import TimelineGapDetector, total_load_time
from .bottleneck_ranker import BottleneckRanker
from .recommendation_engine import Findings, RecommendationEngine
from .report_assembler import ReportAssembler


class TraceAnalyzer:
    """
    Runs the full diagnosis pipeline over a captured trace.

    Every call is independent: the analyzer holds only configuration and
    stateless stage objects, never results from a previous run.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, strict: bool = True):
        """
        Initialize the analyzer and its stages.

        Args:
            config: Analysis thresholds; defaults to AnalysisConfig().
            strict: Raise on malformed entries instead of skipping them.
        """
        self.config = config or AnalysisConfig()
        self.logger = logging.getLogger(__name__)

        self.loader = TraceLoader(strict=strict)
        self.classifier = RequestClassifier(
            max_workers=self.config.max_workers,
            shard_size=self.config.shard_size
        )
        self.aggregator = ResourceAggregator()
        self.critical_path_extractor = CriticalPathExtractor(
            limit=self.config.critical_path_limit,
            excluded_url_substrings=self.config.excluded_url_substrings
        )
        self.gap_detector = TimelineGapDetector(
            minor_threshold_ms=self.config.minor_gap_threshold_ms,
            critical_threshold_ms=self.config.critical_gap_threshold_ms
        )
        self.bottleneck_ranker = BottleneckRanker(
            slow_request_threshold_ms=self.config.slow_request_threshold_ms,
            large_file_threshold_bytes=self.config.large_file_threshold_bytes
        )
        self.recommendation_engine = RecommendationEngine()
        self.assembler = ReportAssembler(
            grade_a_load_time_ms=self.config.grade_a_load_time_ms,
            grade_b_load_time_ms=self.config.grade_b_load_time_ms
        )

    def analyze_file(self, path: Union[str, Path]) -> Report:
        """
        Load and analyze a HAR file.

        Raises:
            InvalidTraceFormat: If the file is unreadable or structurally invalid.
            MalformedEntry: In strict mode, for the first invalid entry.
        """
        self.logger.info("🔍 Starting HAR file analysis...")
        return self._analyze_loaded(self.loader.load_file(path), source=str(path))

    def analyze_document(self, document: Any, source: str = "<memory>") -> Report:
        """Analyze an already-decoded HAR document."""
        return self._analyze_loaded(self.loader.load(document), source=source)

    def _analyze_loaded(self, result: LoadResult, source: str) -> Report:
        return self.analyze_entries(result.entries, skipped=result.skipped, source=source)

    def analyze_entries(self, entries: Sequence[TraceEntry],
                        skipped: Sequence[SkippedEntry] = (),
                        source: str = "<memory>") -> Report:
        """Run every stage after loading over validated entries."""
        shards = self.classifier.classify_shards(entries)
        resource_stats = self.aggregator.aggregate_shards(shards)

        # Barrier: everything below needs the complete record set
        records = tuple(record for shard in shards for record in shard)
        total_ms = total_load_time(records)
        self.logger.info(f"Total load time: {round(total_ms)}ms across {len(records)} requests")

        critical_path = self.critical_path_extractor.extract(records)
        gaps = self.gap_detector.detect(records)
        target_exceeded = self.gap_detector.check_target(total_ms, self.config.target_load_time_ms)
        bottlenecks = self.bottleneck_ranker.rank(records)

        findings = Findings(
            bottlenecks=bottlenecks,
            gaps=gaps,
            target_exceeded=target_exceeded
        )
        recommendations = self.recommendation_engine.recommend(findings)

        return self.assembler.assemble(
            records=records,
            total_load_time_ms=total_ms,
            target_load_time_ms=self.config.target_load_time_ms,
            resource_stats=resource_stats,
            critical_path=critical_path,
            gaps=gaps,
            bottlenecks=bottlenecks,
            recommendations=recommendations,
            target_exceeded=target_exceeded,
            source=source,
            skipped_entries=skipped
        )

    def render(self, report: Report) -> str:
        return self.assembler.render_text(report, top_n=self.config.top_n)
