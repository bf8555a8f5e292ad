"""
Report assembly, rendering and serialization.

This module combines the outputs of the analysis stages into one immutable
Report, renders it as deterministic text for operators and serializes it as
JSON for tooling.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union
from urllib.parse import urlparse

from .models import (
    Bottleneck, CriticalPathItem, CriticalPathKind, Gap, GradeAssessment, ImageSummary,
    PerformanceGrade, Recommendation, Record, Report, ReportMetadata,
    RequestSummary, ResourceClass, ResourceStat, SkippedEntry, TargetExceeded
)
from .utils import format_bytes, format_ms, truncate_url


SECTION_WIDTH = 80


class ReportAssembler:
    """
    Builds Report values and their text/JSON forms.

    The text rendering is a pure function of the Report; the generation
    timestamp only appears in the JSON form.
    """

    def __init__(self, grade_a_load_time_ms: float = 2000.0, grade_b_load_time_ms: float = 5000.0):
        self.grade_a_load_time_ms = grade_a_load_time_ms
        self.grade_b_load_time_ms = grade_b_load_time_ms
        self.logger = logging.getLogger(__name__)

    def assemble(
        self,
        records: Sequence[Record],
        total_load_time_ms: float,
        target_load_time_ms: float,
        resource_stats: Sequence[ResourceStat],
        critical_path: Sequence[CriticalPathItem],
        gaps: Sequence[Gap],
        bottlenecks: Sequence[Bottleneck],
        recommendations: Sequence[Recommendation],
        target_exceeded: Optional[TargetExceeded] = None,
        source: str = "<memory>",
        skipped_entries: Sequence[SkippedEntry] = ()
    ) -> Report:
        """
        Combine all stage outputs into one Report.

        Gaps and bottlenecks are re-sorted (stable, most severe first) so the
        Report ordering holds no matter how the inputs were produced.
        """
        metadata = ReportMetadata(
            source=source,
            generated_at=datetime.now(timezone.utc).isoformat(),
            total_entries=len(records) + len(skipped_entries),
            skipped_entries=tuple(skipped_entries)
        )
        images = self.summarize_images(records)
        report = Report(
            total_load_time_ms=total_load_time_ms,
            target_load_time_ms=target_load_time_ms,
            resource_stats=tuple(resource_stats),
            critical_path=tuple(critical_path),
            gaps=tuple(sorted(gaps, key=lambda g: g.duration_ms, reverse=True)),
            bottlenecks=tuple(sorted(bottlenecks, key=lambda b: b.severity_ms, reverse=True)),
            recommendations=tuple(recommendations),
            target_exceeded=target_exceeded,
            request_summary=self.summarize_requests(records),
            grade=self.grade(records, critical_path, total_load_time_ms, images),
            images=images,
            metadata=metadata
        )
        self.logger.info(
            f"Report assembled: {format_ms(total_load_time_ms)} total, {len(report.gaps)} gaps, "
            f"{len(report.bottlenecks)} bottlenecks, {len(report.recommendations)} recommendations"
        )
        return report

    @staticmethod
    def summarize_requests(records: Sequence[Record]) -> RequestSummary:
        return RequestSummary(
            total_requests=len(records),
            successful_requests=sum(1 for r in records if 200 <= r.status_code < 300),
            redirect_requests=sum(1 for r in records if 300 <= r.status_code < 400),
            failed_requests=sum(1 for r in records if r.status_code >= 400)
        )

    @staticmethod
    def summarize_images(records: Sequence[Record]) -> ImageSummary:
        """
        Summarize image requests.

        A WebP or AVIF image (by MIME type or URL) answered with 200 counts
        as a modern format.
        """
        images = [r for r in records if r.resource_class == ResourceClass.IMAGE]
        successful = [r for r in images if r.status_code == 200]
        modern = [r for r in successful if _is_modern_format(r)]
        return ImageSummary(
            total_images=len(images),
            successful_images=len(successful),
            error_records=tuple(r for r in images if r.status_code == 404),
            modern_format_count=len(modern),
            modern_format_total_time_ms=sum(r.duration_ms for r in modern),
            modern_format_total_size_bytes=sum(r.size_bytes for r in modern)
        )

    @staticmethod
    def main_document(critical_path: Sequence[CriticalPathItem]) -> Optional[Record]:
        for item in critical_path:
            if item.kind == CriticalPathKind.HTML_DOCUMENT:
                return item.record
        return None

    def grade(self, records: Sequence[Record], critical_path: Sequence[CriticalPathItem],
              total_load_time_ms: float, images: Optional[ImageSummary] = None) -> GradeAssessment:
        """
        Grade the page load.

        The page load time is the duration of the HTML document when one is
        on the critical path, otherwise the total load time.
        """
        document = self.main_document(critical_path)
        page_load_time_ms = document.duration_ms if document is not None else total_load_time_ms

        if images is None:
            images = self.summarize_images(records)
        image_errors = images.error_count
        success_rate = images.success_rate

        if page_load_time_ms < self.grade_a_load_time_ms and image_errors == 0 and success_rate == 100:
            grade = PerformanceGrade.A_PLUS
        elif page_load_time_ms < self.grade_b_load_time_ms and image_errors < 3 and success_rate > 90:
            grade = PerformanceGrade.B_PLUS
        else:
            grade = PerformanceGrade.C

        return GradeAssessment(
            grade=grade,
            page_load_time_ms=page_load_time_ms,
            image_error_count=image_errors,
            image_success_rate=success_rate
        )

    # Text rendering

    def render_text(self, report: Report, top_n: int = 5) -> str:
        """Render the report in fixed section order."""
        sections = [
            self._generate_summary_section(report),
            self._generate_resource_section(report),
            self._generate_image_section(report),
            self._generate_critical_path_section(report),
            self._generate_gaps_section(report, top_n),
            self._generate_bottleneck_section(report, top_n),
            self._generate_recommendations_section(report),
        ]
        return "\n\n".join(section for section in sections if section) + "\n"

    def _generate_summary_section(self, report: Report) -> str:
        status = "✅ GOOD" if report.performance_status == "GOOD" else "❌ NEEDS OPTIMIZATION"
        summary = report.request_summary
        lines = [
            "📊 HAR ANALYSIS REPORT",
            "=" * 60,
            f"⏱️  Total Load Time: {format_ms(report.total_load_time_ms)}",
            f"🎯 Target Load Time: {report.target_load_time_ms:g}ms",
            f"📈 Performance Status: {status}",
            f"🌐 Requests: {summary.total_requests} total, {summary.successful_requests} successful, "
            f"{summary.redirect_requests} redirected, {summary.failed_requests} failed",
        ]
        if report.grade is not None:
            lines.append(
                f"🏆 Grade: {report.grade.grade.value} (page load {format_ms(report.grade.page_load_time_ms)}, "
                f"{report.grade.image_error_count} image errors, "
                f"{report.grade.image_success_rate:.1f}% image success rate)"
            )
        document = self.main_document(report.critical_path)
        if document is not None:
            lines.append(
                f"🏠 Main Page: {truncate_url(document.url, 60)} ({document.status_code}, "
                f"{format_ms(document.duration_ms)}, {format_bytes(document.size_bytes)})"
            )
        if report.metadata.skipped_count:
            lines.append(f"⚠️  Skipped {report.metadata.skipped_count} malformed entries")
        return "\n".join(lines)

    def _generate_resource_section(self, report: Report) -> str:
        lines = [
            "📋 RESOURCE BREAKDOWN:",
            "-" * SECTION_WIDTH,
            "Type".ljust(12) + "Count".ljust(8) + "Total Size".ljust(15) + "Avg Time".ljust(12) + "Total Time",
            "-" * SECTION_WIDTH,
        ]
        for stat in report.resource_stats:
            lines.append(
                stat.resource_class.value.ljust(12)
                + str(stat.count).ljust(8)
                + format_bytes(stat.total_size_bytes).ljust(15)
                + format_ms(stat.avg_time_ms).ljust(12)
                + format_ms(stat.total_time_ms)
            )
        if not report.resource_stats:
            lines.append("   (no requests)")
        return "\n".join(lines)

    def _generate_image_section(self, report: Report) -> str:
        images = report.images
        if images.total_images == 0:
            return ""
        lines = [
            "📸 IMAGE PERFORMANCE:",
            "-" * SECTION_WIDTH,
            f"   Total Images: {images.total_images}",
            f"   ✅ Successful: {images.successful_images} ({images.success_rate:.1f}%)",
            f"   ❌ Failed (404): {images.error_count}",
        ]
        if images.modern_format_count:
            lines.append(
                f"   🖼️  Modern formats (WebP/AVIF): {images.modern_format_count}, "
                f"avg {format_ms(images.modern_format_avg_time_ms)}, "
                f"{format_bytes(images.modern_format_total_size_bytes)} total"
            )
        if images.error_records:
            for record in images.error_records:
                name = urlparse(record.url).path.rsplit('/', 1)[-1] or record.url
                lines.append(f"      └─ {name}: {record.status_code} ({format_ms(record.duration_ms)})")
        else:
            lines.append("   ✅ No image errors")
        return "\n".join(lines)

    def _generate_critical_path_section(self, report: Report) -> str:
        if not report.critical_path:
            return ""
        lines = ["🎯 CRITICAL PATH ANALYSIS:", "-" * SECTION_WIDTH]
        for item in report.critical_path:
            lines.append(
                f"   {item.kind.value}: {format_ms(item.record.duration_ms)} "
                f"({format_bytes(item.record.size_bytes)})"
            )
            lines.append(f"   └─ {truncate_url(item.record.url, 80)}")
        return "\n".join(lines)

    def _generate_gaps_section(self, report: Report, top_n: int) -> str:
        if not report.gaps and report.target_exceeded is None:
            return ""
        lines = ["⚠️  PERFORMANCE GAPS:", "-" * SECTION_WIDTH]
        if report.target_exceeded is not None:
            lines.append(f"   🚨 {report.target_exceeded.suggestion}")
        for gap in report.top_gaps(top_n):
            lines.append(f"   ⏳ {format_ms(gap.duration_ms)} gap [{gap.severity.value}] - {gap.suggestion}")
            lines.append(f"      {truncate_url(gap.before_url, 50)} → {truncate_url(gap.after_url, 50)}")
        return "\n".join(lines)

    def _generate_bottleneck_section(self, report: Report, top_n: int) -> str:
        if not report.bottlenecks:
            return ""
        lines = ["🚫 TOP BOTTLENECKS:", "-" * SECTION_WIDTH]
        for position, bottleneck in enumerate(report.top_bottlenecks(top_n), 1):
            lines.append(
                f"   {position}. {bottleneck.description}: {format_ms(bottleneck.record.duration_ms)} "
                f"({format_bytes(bottleneck.record.size_bytes)})"
            )
            lines.append(f"      └─ {truncate_url(bottleneck.record.url, 100)}")
        if len(report.bottlenecks) > top_n:
            lines.append(f"   ... and {len(report.bottlenecks) - top_n} more")
        return "\n".join(lines)

    def _generate_recommendations_section(self, report: Report) -> str:
        if not report.recommendations:
            return ""
        lines = ["💡 OPTIMIZATION RECOMMENDATIONS:", "-" * SECTION_WIDTH]
        for position, rec in enumerate(report.recommendations, 1):
            lines.append(f"   {position}. [{rec.priority.value}] {rec.category}")
            lines.append(f"      💡 {rec.suggestion}")
            lines.append(f"      📈 {rec.impact_estimate}")
            lines.append(f"      🔧 {rec.action}")
        return "\n".join(lines)

    # Serialization

    def report_to_dict(self, report: Report) -> Dict[str, Any]:
        """Machine-readable form of the report."""
        document = self.main_document(report.critical_path)
        return {
            "timestamp": report.metadata.generated_at,
            "summary": {
                "totalLoadTimeMs": report.total_load_time_ms,
                "targetLoadTimeMs": report.target_load_time_ms,
                "performanceStatus": report.performance_status,
            },
            "totalLoadTimeMs": report.total_load_time_ms,
            "targetLoadTimeMs": report.target_load_time_ms,
            "mainPage": document.to_dict() if document is not None else None,
            "resourceStats": {
                stat.resource_class.value: stat.to_dict() for stat in report.resource_stats
            },
            "criticalPath": [item.to_dict() for item in report.critical_path],
            "gaps": [gap.to_dict() for gap in report.gaps],
            "targetExceeded": report.target_exceeded.to_dict() if report.target_exceeded else None,
            "bottlenecks": [bottleneck.to_dict() for bottleneck in report.bottlenecks],
            "recommendations": [rec.to_dict() for rec in report.recommendations],
            "requestSummary": report.request_summary.to_dict(),
            "images": report.images.to_dict(),
            "grade": report.grade.to_dict() if report.grade else None,
            "metadata": report.metadata.to_dict(),
        }

    def report_to_json(self, report: Report) -> str:
        return json.dumps(self.report_to_dict(report), indent=2)

    def save_report(self, report: Report, output_path: Union[str, Path]) -> str:
        """
        Write the JSON report.

        Returns:
            Path to the written file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.report_to_json(report))
        self.logger.info(f"Detailed report saved to: {path}")
        return str(path)


MODERN_IMAGE_FORMATS = ('webp', 'avif')


def _is_modern_format(record: Record) -> bool:
    haystack = f"{record.mime_type} {record.url}".lower()
    return any(fmt in haystack for fmt in MODERN_IMAGE_FORMATS)
