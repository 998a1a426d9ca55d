"""
Drift Tracker — owns per-agent terminology baselines and scores new samples
against them.

    tracker = DriftTracker()
    tracker.establish_baseline("pm-agent", samples)
    drift = tracker.measure_drift("pm-agent", "the api schema is consistent")

Every scored sample is appended to a bounded audit log of DriftObservations,
which also feeds the trend analysis returned by `analyze`.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Sequence

import numpy as np

from ..core.store import KeyedStore
from ..errors import InvalidArgument
from .patterns import ResponsePatterns, analyze_patterns
from .terminology import TerminologyProfile, extract_terminology, profile_drift

logger = logging.getLogger(__name__)

DEFAULT_LOG_CAPACITY = 10_000


@dataclass(frozen=True)
class Baseline:
    profile: TerminologyProfile
    established_at: float
    sample_count: int
    patterns: ResponsePatterns = field(default_factory=ResponsePatterns)


@dataclass(frozen=True)
class DriftObservation:
    agent_id: str
    drift: float
    timestamp: float


@dataclass(frozen=True)
class DriftAnalysis:
    agent_id: str
    samples: int = 0
    current: float = 0.0         # newest drift
    average: float = 0.0
    trend: float = 0.0           # newest - oldest; positive = drifting further
    volatility: float = 0.0      # RMS of successive differences


class DriftTracker:

    def __init__(
        self,
        log_capacity: int = DEFAULT_LOG_CAPACITY,
        now: Callable[[], float] = time.time,
    ):
        self._baselines: KeyedStore[Baseline] = KeyedStore()
        self._log: Deque[DriftObservation] = deque(maxlen=log_capacity)
        self._now = now

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def establish_baseline(self, agent_id: str, samples: Sequence[str]) -> Baseline:
        if not agent_id:
            raise InvalidArgument("agent_id is required")
        if isinstance(samples, str) or not samples:
            raise InvalidArgument("at least one baseline sample is required")

        baseline = Baseline(
            profile=extract_terminology(samples),
            established_at=self._now(),
            sample_count=len(samples),
            patterns=analyze_patterns(samples),
        )
        with self._baselines.locked(agent_id):
            # replace, never merge
            self._baselines.set(agent_id, baseline)
        logger.info(
            "Baseline established for %s: %d samples, %d terms",
            agent_id, baseline.sample_count, len(baseline.profile),
        )
        return baseline

    def measure_drift(self, agent_id: str, sample: str) -> float:
        baseline = self._baselines.get(agent_id)
        if baseline is None:
            return 0.0

        drift = profile_drift(baseline.profile, extract_terminology([sample]))
        self._log.append(DriftObservation(agent_id, drift, self._now()))
        logger.debug("Drift for %s: %.4f", agent_id, drift)
        return drift

    def get_baseline(self, agent_id: str) -> Optional[Baseline]:
        return self._baselines.get(agent_id)

    def observations(self, agent_id: Optional[str] = None) -> List[DriftObservation]:
        """Logged observations, oldest first; all agents when *agent_id* is None."""
        if agent_id is None:
            return list(self._log)
        return [o for o in self._log if o.agent_id == agent_id]

    def analyze(self, agent_id: str, limit: int = 500) -> DriftAnalysis:
        recent = self.observations(agent_id)[-limit:]
        if not recent:
            return DriftAnalysis(agent_id=agent_id)

        values = np.array([o.drift for o in recent], dtype=float)
        volatility = 0.0
        if len(values) > 1:
            volatility = float(np.sqrt(np.mean(np.diff(values) ** 2)))

        return DriftAnalysis(
            agent_id=agent_id,
            samples=len(values),
            current=float(values[-1]),
            average=float(values.mean()),
            trend=float(values[-1] - values[0]),
            volatility=volatility,
        )
