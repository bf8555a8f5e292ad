"""
Rule-based optimization recommendations.

The engine is a flat table of independent rules. Each rule looks at the
aggregate findings and either contributes its recommendation or not; no rule
depends on another, so adding a rule never changes what existing rules emit.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .models import (
    Bottleneck, Gap, IssueKind, Priority, Recommendation, ResourceClass, TargetExceeded
)


@dataclass(frozen=True)
class Findings:
    """Everything the recommendation rules are allowed to look at."""
    bottlenecks: Tuple[Bottleneck, ...] = ()
    gaps: Tuple[Gap, ...] = ()
    target_exceeded: Optional[TargetExceeded] = None

    def has_issue(self, issue_kind: IssueKind) -> bool:
        return any(b.issue_kind == issue_kind for b in self.bottlenecks)

    def has_bottleneck_in(self, resource_class: ResourceClass) -> bool:
        return any(b.record.resource_class == resource_class for b in self.bottlenecks)


RecommendationFactory = Callable[[Findings], Recommendation]


@dataclass(frozen=True)
class RecommendationRule:
    """A named predicate over the findings plus the recommendation it yields."""
    name: str
    applies: Callable[[Findings], bool]
    build: RecommendationFactory

    def evaluate(self, findings: Findings) -> Optional[Recommendation]:
        if self.applies(findings):
            return self.build(findings)
        return None


def _fixed(priority: Priority, category: str, suggestion: str,
           impact: str, action: str) -> RecommendationFactory:
    recommendation = Recommendation(
        priority=priority,
        category=category,
        suggestion=suggestion,
        impact_estimate=impact,
        action=action
    )
    return lambda findings: recommendation


def _overall_performance(findings: Findings) -> Recommendation:
    exceeded = findings.target_exceeded
    return Recommendation(
        priority=Priority.CRITICAL,
        category="Overall Performance",
        suggestion=(
            f"Total load time is {round(exceeded.total_load_time_ms)}ms, "
            f"target is {exceeded.target_load_time_ms:g}ms"
        ),
        impact_estimate="Critical for user experience",
        action="Implement all high-priority optimizations immediately"
    )


DEFAULT_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(
        name='image_bottlenecks',
        applies=lambda f: f.has_bottleneck_in(ResourceClass.IMAGE),
        build=_fixed(
            Priority.HIGH, "Images",
            "Convert images to WebP format and implement responsive sizing",
            "Could save 60-80% on image file sizes",
            "Convert images to a modern compressed format and serve responsive sizes"
        )
    ),
    RecommendationRule(
        name='large_files',
        applies=lambda f: f.has_issue(IssueKind.LARGE_FILE),
        build=_fixed(
            Priority.HIGH, "File Size",
            "Compress and optimize large files",
            "Reduce bandwidth usage by 50-70%",
            "Implement gzip/brotli compression"
        )
    ),
    RecommendationRule(
        name='slow_requests',
        applies=lambda f: f.has_issue(IssueKind.SLOW_REQUEST),
        build=_fixed(
            Priority.MEDIUM, "Network",
            "Optimize slow requests with caching and CDN",
            "Reduce request times by 40-60%",
            "Implement proper caching headers and CDN"
        )
    ),
    RecommendationRule(
        name='loading_gaps',
        applies=lambda f: len(f.gaps) > 0,
        build=_fixed(
            Priority.MEDIUM, "Loading Strategy",
            "Optimize resource loading order and implement preloading",
            "Reduce loading gaps and improve perceived performance",
            "Implement resource hints and optimize critical path"
        )
    ),
    RecommendationRule(
        name='target_exceeded',
        applies=lambda f: f.target_exceeded is not None,
        build=_overall_performance
    ),
)


class RecommendationEngine:
    """
    Evaluates the rule table against a set of findings.

    Rules are evaluated independently and unconditionally; recommendations
    come out in rule-table order.
    """

    def __init__(self, rules: Optional[Tuple[RecommendationRule, ...]] = None):
        self.rules: List[RecommendationRule] = list(DEFAULT_RULES if rules is None else rules)
        self.logger = logging.getLogger(__name__)

    def add_rule(self, rule: RecommendationRule) -> None:
        """Append a rule after the existing ones."""
        self.rules.append(rule)

    def recommend(self, findings: Findings) -> Tuple[Recommendation, ...]:
        self.logger.info("Generating optimization recommendations...")
        recommendations = []
        for rule in self.rules:
            recommendation = rule.evaluate(findings)
            if recommendation is not None:
                self.logger.debug(f"Rule '{rule.name}' matched: [{recommendation.priority.value}] "
                                  f"{recommendation.category}")
                recommendations.append(recommendation)
        return tuple(recommendations)
