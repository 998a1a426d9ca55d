"""
Metric History Store — bounded, per-agent, time-ordered MetricRecords plus the
"healthy" DerivedBaseline recalibrated from them.

The derived baseline only ever moves toward healthy behaviour: it is rebuilt
from the low-error / high-consistency subset of the most recent records and
left untouched when that subset is too small.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List

import numpy as np

from ..core.store import KeyedStore
from ..errors import InvalidArgument

logger = logging.getLogger(__name__)

HISTORY_CAPACITY = 1000
RECALIBRATION_MIN_HISTORY = 20     # history length before recalibration starts
RECALIBRATION_WINDOW = 50          # most recent records considered
RECALIBRATION_MIN_HEALTHY = 10     # healthy subset must be strictly larger
HEALTHY_MAX_ERROR_RATE = 0.05
HEALTHY_MIN_CONSISTENCY = 0.85


@dataclass
class MetricRecord:
    agent_id: str
    context_window_usage: float        # 0-1
    processing_latency_ms: float       # >= 0
    error_rate: float                  # 0-1
    semantic_consistency: float        # 0-1
    cognitive_load_index: float = 0.0  # 0-1
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        if not self.agent_id:
            raise InvalidArgument("agent_id is required")
        for name in (
            "context_window_usage",
            "error_rate",
            "semantic_consistency",
            "cognitive_load_index",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidArgument(f"{name} must be within [0, 1], got {value}")
        if self.processing_latency_ms < 0:
            raise InvalidArgument(
                f"processing_latency_ms must be >= 0, got {self.processing_latency_ms}"
            )


@dataclass(frozen=True)
class DerivedBaseline:
    latency_ms: float = 1000.0
    context_usage: float = 0.40
    consistency: float = 0.90


DEFAULT_DERIVED_BASELINE = DerivedBaseline()


def mean_of(records: List[MetricRecord], attr: str) -> float:
    """Mean of *attr* over *records*; 0.0 for an empty list."""
    if not records:
        return 0.0
    return float(np.mean([getattr(r, attr) for r in records]))


class MetricHistoryStore:

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        self.capacity = capacity
        self._history: KeyedStore[Deque[MetricRecord]] = KeyedStore()
        self._baselines: KeyedStore[DerivedBaseline] = KeyedStore()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def record(self, record: MetricRecord) -> None:
        agent_id = record.agent_id
        with self._history.locked(agent_id):
            history = self._history.setdefault(
                agent_id, lambda: deque(maxlen=self.capacity)
            )
            history.append(record)   # deque drops the oldest on overflow
            if len(history) >= RECALIBRATION_MIN_HISTORY:
                self._recalibrate(agent_id, history)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def recent(self, agent_id: str, count: int) -> List[MetricRecord]:
        return self.history(agent_id)[-count:]

    def history(self, agent_id: str) -> List[MetricRecord]:
        # copied under the writer lock: a deque cannot be iterated while appended to
        with self._history.locked(agent_id):
            return list(self._history.get(agent_id) or ())

    def agents(self) -> List[str]:
        return self._history.keys()

    def derived_baseline(self, agent_id: str) -> DerivedBaseline:
        return self._baselines.get(agent_id) or DEFAULT_DERIVED_BASELINE

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _recalibrate(self, agent_id: str, history: Deque[MetricRecord]) -> None:
        window = list(history)[-RECALIBRATION_WINDOW:]
        healthy = [
            r for r in window
            if r.error_rate < HEALTHY_MAX_ERROR_RATE
            and r.semantic_consistency > HEALTHY_MIN_CONSISTENCY
        ]
        if len(healthy) <= RECALIBRATION_MIN_HEALTHY:
            return

        baseline = DerivedBaseline(
            latency_ms=mean_of(healthy, "processing_latency_ms"),
            context_usage=mean_of(healthy, "context_window_usage"),
            consistency=mean_of(healthy, "semantic_consistency"),
        )
        self._baselines.set(agent_id, baseline)
        logger.debug(
            "Derived baseline for %s recalibrated from %d healthy records: latency=%.1fms",
            agent_id, len(healthy), baseline.latency_ms,
        )
