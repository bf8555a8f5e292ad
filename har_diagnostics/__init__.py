"""
HAR trace diagnostics.

This package turns a browser-captured HAR trace into a page-load diagnosis:
- Resource-class breakdown
- Critical-path reconstruction
- Idle-time gap detection
- Bottleneck ranking
- Rule-based optimization recommendations
"""

from .analyzer import TraceAnalyzer
from .config_manager import AnalysisConfig, ConfigManager, ConfigurationError
from .trace_loader import TraceLoader, TraceLoadError, InvalidTraceFormat, MalformedEntry
from .models import (
    ResourceClass,
    IssueKind,
    GapSeverity,
    Priority,
    Record,
    ResourceStat,
    Bottleneck,
    Gap,
    Recommendation,
    Report
)

__version__ = "0.1.0"

__all__ = [
    'TraceAnalyzer',
    'AnalysisConfig',
    'ConfigManager',
    'ConfigurationError',
    'TraceLoader',
    'TraceLoadError',
    'InvalidTraceFormat',
    'MalformedEntry',
    'ResourceClass',
    'IssueKind',
    'GapSeverity',
    'Priority',
    'Record',
    'ResourceStat',
    'Bottleneck',
    'Gap',
    'Recommendation',
    'Report'
]
