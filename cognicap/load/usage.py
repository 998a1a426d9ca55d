"""
Usage Tracker — per-agent usage ranking and training-session effectiveness,
read from the same MetricHistoryStore the overload detector feeds.

Usage ranking: every MetricRecord counts as one invocation. The load trend
compares the two halves of the most recent 100 records once there are more
than 20 of them; a half-to-half move beyond 0.1 is improving (load fell) or
degrading (load rose).

Training sessions snapshot the means of the last 50 records when they start
and again when they end:

    session_id = usage.start_training_session("pm-agent", "glossary-drill")
    ...  # metrics keep flowing in
    report = usage.end_training_session(session_id)
    report.effectiveness

Effectiveness = 0.4 x consistency improvement + 0.3 x load reduction
+ 0.3 x error reduction, each a relative change against the starting value.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..errors import InvalidArgument, NotFound
from .history import MetricHistoryStore, MetricRecord, mean_of

logger = logging.getLogger(__name__)

TREND_WINDOW = 100
TREND_MIN_RECORDS = 20             # trend needs strictly more than this
TREND_BAND = 0.10
TRAINING_WINDOW = 50
IMPROVEMENT_REPORT_THRESHOLD = 0.10

EFFECTIVENESS_WEIGHTS = {
    "consistency": 0.4,
    "load": 0.3,
    "error": 0.3,
}


class LoadTrend(str, Enum):
    IMPROVING = "improving"
    DEGRADING = "degrading"
    STABLE = "stable"


@dataclass(frozen=True)
class AgentUsage:
    agent_id: str
    usage_count: int
    average_load: float
    trend: LoadTrend


@dataclass(frozen=True)
class TrainingMetrics:
    drift: float          # 1 - mean semantic consistency
    load: float
    error_rate: float


@dataclass(frozen=True)
class TrainingReport:
    session_id: str
    effectiveness: float
    consistency_improvement: float
    load_reduction: float
    error_reduction: float
    improvements: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class TrainingSession:
    id: str
    agent_id: str
    protocol: str
    started_at: float
    baseline: TrainingMetrics
    ended_at: Optional[float] = None
    improved: Optional[TrainingMetrics] = None
    report: Optional[TrainingReport] = None


def load_trend(records: List[MetricRecord]) -> LoadTrend:
    if len(records) <= TREND_MIN_RECORDS:
        return LoadTrend.STABLE
    half = len(records) // 2
    first = mean_of(records[:half], "cognitive_load_index")
    second = mean_of(records[half:], "cognitive_load_index")
    if second < first - TREND_BAND:
        return LoadTrend.IMPROVING
    if second > first + TREND_BAND:
        return LoadTrend.DEGRADING
    return LoadTrend.STABLE


def training_metrics(records: List[MetricRecord]) -> TrainingMetrics:
    if not records:
        return TrainingMetrics(drift=0.0, load=0.0, error_rate=0.0)
    return TrainingMetrics(
        drift=1.0 - mean_of(records, "semantic_consistency"),
        load=mean_of(records, "cognitive_load_index"),
        error_rate=mean_of(records, "error_rate"),
    )


def _reduction(before: float, after: float) -> float:
    # no change is measurable against a zero on either side
    if not before or not after:
        return 0.0
    return (before - after) / before


def evaluate_training(session_id: str, before: TrainingMetrics, after: TrainingMetrics) -> TrainingReport:
    consistency = _reduction(before.drift, after.drift)
    load = _reduction(before.load, after.load)
    error = _reduction(before.error_rate, after.error_rate)
    effectiveness = (
        consistency * EFFECTIVENESS_WEIGHTS["consistency"]
        + load * EFFECTIVENESS_WEIGHTS["load"]
        + error * EFFECTIVENESS_WEIGHTS["error"]
    )

    improvements: List[str] = []
    if consistency > IMPROVEMENT_REPORT_THRESHOLD:
        improvements.append(f"Semantic consistency improved by {consistency * 100:.1f}%")
    if load > IMPROVEMENT_REPORT_THRESHOLD:
        improvements.append(f"Cognitive load reduced by {load * 100:.1f}%")
    if error > IMPROVEMENT_REPORT_THRESHOLD:
        improvements.append(f"Error rate reduced by {error * 100:.1f}%")

    recommendations: List[str] = []
    if after.load > 0.7:
        recommendations.append("Consider reducing context window size")
    if after.drift > 0.3:
        recommendations.append("Increase training frequency or intensity")
    if effectiveness < 0.05:
        recommendations.append("Try alternative training protocols")

    return TrainingReport(
        session_id=session_id,
        effectiveness=effectiveness,
        consistency_improvement=consistency,
        load_reduction=load,
        error_reduction=error,
        improvements=improvements,
        recommendations=recommendations,
    )


class UsageTracker:

    def __init__(
        self,
        history: MetricHistoryStore,
        now: Callable[[], float] = time.time,
    ):
        self.history = history
        self._now = now
        self._sessions: Dict[str, TrainingSession] = {}
        self._session_seq = itertools.count(1)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Usage ranking
    # ------------------------------------------------------------------

    def most_used_agents(self, limit: int = 10) -> List[AgentUsage]:
        if limit < 1:
            raise InvalidArgument(f"limit must be >= 1, got {limit}")
        usage = []
        for agent_id in self.history.agents():
            records = self.history.history(agent_id)
            if not records:
                continue
            recent = records[-TREND_WINDOW:]
            usage.append(AgentUsage(
                agent_id=agent_id,
                usage_count=len(records),
                average_load=mean_of(recent, "cognitive_load_index"),
                trend=load_trend(recent),
            ))
        usage.sort(key=lambda u: u.usage_count, reverse=True)
        return usage[:limit]

    # ------------------------------------------------------------------
    # Training sessions
    # ------------------------------------------------------------------

    def start_training_session(self, agent_id: str, protocol: str) -> str:
        if not agent_id:
            raise InvalidArgument("agent_id is required")
        if not protocol:
            raise InvalidArgument("protocol is required")

        baseline = training_metrics(self.history.recent(agent_id, TRAINING_WINDOW))
        with self._lock:
            session_id = f"training-{agent_id}-{next(self._session_seq)}"
            self._sessions[session_id] = TrainingSession(
                id=session_id,
                agent_id=agent_id,
                protocol=protocol,
                started_at=self._now(),
                baseline=baseline,
            )
        logger.info("Training session %s started (%s)", session_id, protocol)
        return session_id

    def end_training_session(self, session_id: str) -> TrainingReport:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise NotFound(f"Training session {session_id} not found")

            improved = training_metrics(self.history.recent(session.agent_id, TRAINING_WINDOW))
            report = evaluate_training(session_id, session.baseline, improved)
            session.ended_at = self._now()
            session.improved = improved
            session.report = report

        logger.info(
            "Training session %s ended: effectiveness=%.3f", session_id, report.effectiveness
        )
        return report

    def get_training_session(self, session_id: str) -> TrainingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFound(f"Training session {session_id} not found")
        return session

    def training_sessions(self, agent_id: Optional[str] = None) -> List[TrainingSession]:
        with self._lock:
            sessions = list(self._sessions.values())
        if agent_id is None:
            return sessions
        return [s for s in sessions if s.agent_id == agent_id]
