"""
Overload Detector — turns an agent's recent MetricRecords into a cognitive
load index in [0, 1] and a discrete overload severity.

Load index (last 10 records), each sub-load normalized to [0, 1]:
  context  — mean context window usage
  latency  — mean latency between 1x and 3x the derived baseline latency
  error    — mean error rate between 0 and 0.20
  drift    — (1 - mean consistency) between 0 and 0.50
combined with weights context 0.25, latency 0.25, error 0.30, drift 0.20.

Overload detection (last 5 records) runs four threshold checks in a fixed
order. Severity is the maximum reached by any check, so a later warning can
never downgrade an earlier critical.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .history import MetricHistoryStore, MetricRecord, mean_of
from .thresholds import DEFAULT_THRESHOLDS, OverloadThresholds

logger = logging.getLogger(__name__)

LOAD_WINDOW = 10
OVERLOAD_WINDOW = 5

LOAD_WEIGHTS: Dict[str, float] = {
    "context": 0.25,
    "latency": 0.25,
    "error": 0.30,
    "drift": 0.20,
}

ERROR_LOAD_CEILING = 0.20
DRIFT_LOAD_CEILING = 0.50
LATENCY_LOAD_SPAN = 3.0          # latency load saturates at 3x baseline


class Severity(str, Enum):
    NONE = "none"
    WARNING = "warning"
    CRITICAL = "critical"


_RANK = {Severity.NONE: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


@dataclass(frozen=True)
class OverloadResult:
    is_overloaded: bool = False
    severity: Severity = Severity.NONE
    factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoadSnapshot:
    """Inputs for a load report: index, 10-record averages and overload state."""
    agent_id: str
    load_index: float
    samples: int
    context_usage: float
    latency_ms: float
    error_rate: float
    consistency: float
    overload: OverloadResult


@dataclass(frozen=True)
class _Check:
    value: float
    warning: float
    critical: float
    critical_factor: str
    critical_recommendation: str
    warning_factor: str
    warning_recommendation: str


def normalize(value: float, lo: float, hi: float) -> float:
    if hi == lo:
        return 0.0
    return max(0.0, min(1.0, (value - lo) / (hi - lo)))


class OverloadDetector:

    def __init__(
        self,
        history: Optional[MetricHistoryStore] = None,
        thresholds: OverloadThresholds = DEFAULT_THRESHOLDS,
    ):
        self.history = history if history is not None else MetricHistoryStore()
        self.thresholds = thresholds

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def record_metric(self, record: MetricRecord) -> None:
        self.history.record(record)

    # ------------------------------------------------------------------
    # Load index
    # ------------------------------------------------------------------

    def calculate_cognitive_load(self, agent_id: str) -> float:
        recent = self.history.recent(agent_id, LOAD_WINDOW)
        if not recent:
            return 0.0

        base_latency = self.history.derived_baseline(agent_id).latency_ms
        loads = {
            "context": normalize(mean_of(recent, "context_window_usage"), 0.0, 1.0),
            "latency": normalize(
                mean_of(recent, "processing_latency_ms"),
                base_latency,
                base_latency * LATENCY_LOAD_SPAN,
            ),
            "error": normalize(mean_of(recent, "error_rate"), 0.0, ERROR_LOAD_CEILING),
            "drift": normalize(
                1.0 - mean_of(recent, "semantic_consistency"), 0.0, DRIFT_LOAD_CEILING
            ),
        }
        score = sum(loads[k] * w for k, w in LOAD_WEIGHTS.items())
        return max(0.0, min(score, 1.0))

    # ------------------------------------------------------------------
    # Overload
    # ------------------------------------------------------------------

    def detect_overload(self, agent_id: str) -> OverloadResult:
        recent = self.history.recent(agent_id, OVERLOAD_WINDOW)
        if not recent:
            return OverloadResult()

        severity = Severity.NONE
        factors: List[str] = []
        recommendations: List[str] = []

        for check in self._checks(agent_id, recent):
            if check.value >= check.critical:
                factors.append(check.critical_factor)
                recommendations.append(check.critical_recommendation)
                reached = Severity.CRITICAL
            elif check.value >= check.warning:
                factors.append(check.warning_factor)
                recommendations.append(check.warning_recommendation)
                reached = Severity.WARNING
            else:
                continue
            if _RANK[reached] > _RANK[severity]:
                severity = reached

        if severity is not Severity.NONE:
            logger.warning("Overload (%s) for %s: %s", severity.value, agent_id, ", ".join(factors))

        return OverloadResult(
            is_overloaded=severity is not Severity.NONE,
            severity=severity,
            factors=factors,
            recommendations=recommendations,
        )

    def snapshot(self, agent_id: str) -> LoadSnapshot:
        recent = self.history.recent(agent_id, LOAD_WINDOW)
        return LoadSnapshot(
            agent_id=agent_id,
            load_index=self.calculate_cognitive_load(agent_id),
            samples=len(recent),
            context_usage=mean_of(recent, "context_window_usage"),
            latency_ms=mean_of(recent, "processing_latency_ms"),
            error_rate=mean_of(recent, "error_rate"),
            consistency=mean_of(recent, "semantic_consistency"),
            overload=self.detect_overload(agent_id),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _checks(self, agent_id: str, recent: List[MetricRecord]) -> List[_Check]:
        t = self.thresholds
        base_latency = self.history.derived_baseline(agent_id).latency_ms
        return [
            _Check(
                value=mean_of(recent, "context_window_usage"),
                warning=t.context_window.warning,
                critical=t.context_window.critical,
                critical_factor="Critical context window usage",
                critical_recommendation="Reduce context size or implement chunking",
                warning_factor="High context window usage",
                warning_recommendation="Consider context optimization",
            ),
            _Check(
                value=mean_of(recent, "processing_latency_ms"),
                warning=base_latency * t.latency.warning_multiplier,
                critical=base_latency * t.latency.critical_multiplier,
                critical_factor="Critical processing latency",
                critical_recommendation="Investigate performance bottlenecks",
                warning_factor="Elevated processing latency",
                warning_recommendation="Monitor system resources",
            ),
            _Check(
                value=mean_of(recent, "error_rate"),
                warning=t.error_rate.warning,
                critical=t.error_rate.critical,
                critical_factor="Critical error rate",
                critical_recommendation="Review agent training and protocols",
                warning_factor="Elevated error rate",
                warning_recommendation="Check recent changes and inputs",
            ),
            _Check(
                value=1.0 - mean_of(recent, "semantic_consistency"),
                warning=t.semantic_drift.warning,
                critical=t.semantic_drift.critical,
                critical_factor="Critical semantic drift",
                critical_recommendation="Retrain agent or reset context",
                warning_factor="Significant semantic drift",
                warning_recommendation="Reinforce training protocols",
            ),
        ]
