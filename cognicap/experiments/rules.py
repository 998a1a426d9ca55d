"""
Recommendation Rules — declarative (predicate, message) table evaluated on the
aggregated metrics of an experiment run.

Each rule sees the configuration under test plus the run's mean semantic
consistency and mean per-sample load index. Rules are independent; every
matching rule contributes its message, in registry order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from .models import AgentConfiguration, ContextWindow, Specialization


@dataclass(frozen=True)
class RunSummary:
    configuration: AgentConfiguration
    consistency: float
    load: float


@dataclass(frozen=True)
class RecommendationRule:
    predicate: Callable[[RunSummary], bool]
    message: str


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

RECOMMENDATION_RULES: List[RecommendationRule] = [
    RecommendationRule(
        lambda s: s.consistency < 0.85,
        "Consider implementing persistent memory to improve semantic consistency",
    ),
    RecommendationRule(
        lambda s: s.load > 0.70,
        "Cognitive load is high - consider specialization or context reduction",
    ),
    RecommendationRule(
        lambda s: not s.configuration.database and s.consistency < 0.90,
        "Database backing could improve consistency by 15-20%",
    ),
    RecommendationRule(
        lambda s: (
            s.configuration.specialization == Specialization.GENERALIST
            and s.load > 0.60
        ),
        "Specialization could reduce cognitive load by 20-30%",
    ),
    RecommendationRule(
        lambda s: (
            s.configuration.context_window == ContextWindow.EXTENDED
            and s.load > 0.65
        ),
        "Reducing context window could improve performance",
    ),
]


def recommend(summary: RunSummary, rules: List[RecommendationRule] = RECOMMENDATION_RULES) -> List[str]:
    return [rule.message for rule in rules if rule.predicate(summary)]
