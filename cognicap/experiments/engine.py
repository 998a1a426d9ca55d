"""
Experiment Engine — simulates agent configurations against a sample stream and
ranks them.

A run establishes a terminology baseline from the first 10 samples under the
configuration's id, then walks the remaining samples until they run out or
the duration budget on the injected clock is spent. For each sample it
measures drift, synthesizes context usage and error rate from the injected
generator, computes a configuration-adjusted load, pays the configuration's
processing delay on the clock and records a MetricRecord with the detector.

    engine = ExperimentEngine(clock=VirtualClock(), rng=np.random.default_rng(7))
    comparison = engine.compare_configurations([cfg_a, cfg_b], samples)
    comparison.winner

Runs share the tracker and detector keyed by configuration id, so
`compare_configurations` runs strictly one configuration after another.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.store import KeyedStore
from ..drift.tracker import DriftTracker
from ..errors import InvalidArgument
from ..load.detector import OverloadDetector
from ..load.history import MetricRecord
from ..reporting.text import render_comparison
from .clock import CancelToken, Clock, SystemClock
from .models import (
    AgentConfiguration,
    ComparisonDeltas,
    ComparisonResult,
    ContextWindow,
    ExperimentResult,
    MemoryStrategy,
    RankedConfiguration,
    Specialization,
)
from .rules import RECOMMENDATION_RULES, RecommendationRule, RunSummary, recommend

logger = logging.getLogger(__name__)

BASELINE_SAMPLES = 10
DEFAULT_DURATION_MS = 60_000
MAX_SYNTHETIC_ERROR_RATE = 0.05

# Uniform [low, high) context window usage per configuration
CONTEXT_USAGE_RANGES: Dict[ContextWindow, Tuple[float, float]] = {
    ContextWindow.MINIMAL: (0.30, 0.50),
    ContextWindow.STANDARD: (0.50, 0.75),
    ContextWindow.EXTENDED: (0.70, 0.95),
}

SPECIALIZATION_LOAD_DELTA = {
    Specialization.EXPERT: -0.15,
    Specialization.GENERALIST: 0.10,
    Specialization.HYBRID: 0.0,
}

MEMORY_LOAD_DELTA = {
    MemoryStrategy.PERSISTENT: -0.05,
    MemoryStrategy.EPHEMERAL: 0.05,
    MemoryStrategy.HYBRID: 0.0,
}

DATABASE_LOAD_DELTA = -0.10

# Score weights: consistency, headroom, error, speed
SCORE_WEIGHTS = (40.0, 30.0, 20.0, 10.0)


def configuration_load(
    config: AgentConfiguration,
    context_usage: float,
    consistency: float,
    error_rate: float,
) -> float:
    load = context_usage * 0.25
    if config.database:
        load += DATABASE_LOAD_DELTA
    load += SPECIALIZATION_LOAD_DELTA[config.specialization]
    load += MEMORY_LOAD_DELTA[config.memory_strategy]
    load += (1.0 - consistency) * 0.30
    load += error_rate * 2.0
    return max(0.0, min(load, 1.0))


def processing_delay_ms(config: AgentConfiguration) -> float:
    delay = 100.0
    if config.database:
        delay += 50.0
    if config.context_window == ContextWindow.EXTENDED:
        delay += 30.0
    if config.specialization == Specialization.GENERALIST:
        delay += 20.0
    return delay


def drift_velocity(drifts: Sequence[float]) -> float:
    """Mean absolute change between consecutive drift measurements."""
    if len(drifts) < 2:
        return 0.0
    return float(np.mean(np.abs(np.diff(np.asarray(drifts, dtype=float)))))


def score_result(result: ExperimentResult) -> float:
    w_consistency, w_load, w_error, w_speed = SCORE_WEIGHTS
    # no samples means no latency to reward
    speed = 1000.0 / result.processing_latency_ms if result.processing_latency_ms > 0 else 0.0
    return (
        result.semantic_consistency * w_consistency
        + (1.0 - result.cognitive_load) * w_load
        + (1.0 - result.error_rate * 10.0) * w_error
        + speed * w_speed
    )


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) else 0.0


def _pct_change(delta: float, reference: float) -> float:
    return delta / reference * 100.0 if reference else 0.0


class ExperimentEngine:

    def __init__(
        self,
        drift_tracker: Optional[DriftTracker] = None,
        detector: Optional[OverloadDetector] = None,
        clock: Optional[Clock] = None,
        rng: Optional[np.random.Generator] = None,
        rules: List[RecommendationRule] = RECOMMENDATION_RULES,
    ):
        self.drift_tracker = drift_tracker if drift_tracker is not None else DriftTracker()
        self.detector = detector if detector is not None else OverloadDetector()
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.rules = rules
        self._results: Dict[str, ExperimentResult] = {}
        self._runs: KeyedStore[None] = KeyedStore()
        self._rng_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Single run
    # ------------------------------------------------------------------

    def run_experiment(
        self,
        config: AgentConfiguration,
        samples: Sequence[str],
        duration_ms: float = DEFAULT_DURATION_MS,
        cancel: Optional[CancelToken] = None,
    ) -> ExperimentResult:
        if config is None:
            raise InvalidArgument("configuration is required")
        if isinstance(samples, str) or not samples:
            raise InvalidArgument("samples are required")
        if duration_ms < 0:
            raise InvalidArgument(f"duration_ms must be >= 0, got {duration_ms}")

        # one run per configuration id at a time: runs share its baseline and history
        with self._runs.locked(config.id):
            return self._run(config, samples, duration_ms, cancel)

    def _run(
        self,
        config: AgentConfiguration,
        samples: Sequence[str],
        duration_ms: float,
        cancel: Optional[CancelToken],
    ) -> ExperimentResult:
        logger.info("Starting experiment for configuration %s", config.name)
        started = self.clock.now_ms()
        self.drift_tracker.establish_baseline(config.id, list(samples[:BASELINE_SAMPLES]))

        low, high = CONTEXT_USAGE_RANGES[config.context_window]
        delay = processing_delay_ms(config)
        records: List[MetricRecord] = []
        drifts: List[float] = []

        for sample in samples[BASELINE_SAMPLES:]:
            if self.clock.now_ms() - started >= duration_ms:
                break
            if cancel is not None:
                cancel.raise_if_cancelled()

            sample_start = self.clock.now_ms()
            drift = self.drift_tracker.measure_drift(config.id, sample)
            with self._rng_lock:
                context_usage = float(self.rng.uniform(low, high))
                error_rate = float(self.rng.uniform(0.0, MAX_SYNTHETIC_ERROR_RATE))
            consistency = 1.0 - drift
            load = configuration_load(config, context_usage, consistency, error_rate)

            self.clock.sleep_ms(delay)

            record = MetricRecord(
                agent_id=config.id,
                context_window_usage=context_usage,
                processing_latency_ms=self.clock.now_ms() - sample_start,
                error_rate=error_rate,
                semantic_consistency=consistency,
                cognitive_load_index=load,
                timestamp=self.clock.now_ms() / 1000.0,
            )
            self.detector.record_metric(record)
            records.append(record)
            drifts.append(drift)

        consistency = _mean([r.semantic_consistency for r in records])
        summary = RunSummary(
            configuration=config,
            consistency=consistency,
            load=_mean([r.cognitive_load_index for r in records]),
        )
        result = ExperimentResult(
            configuration_id=config.id,
            semantic_consistency=consistency,
            cognitive_load=self.detector.calculate_cognitive_load(config.id),
            processing_latency_ms=_mean([r.processing_latency_ms for r in records]),
            error_rate=_mean([r.error_rate for r in records]),
            drift_velocity=drift_velocity(drifts),
            samples=len(records),
            duration_ms=self.clock.now_ms() - started,
            recommendations=tuple(recommend(summary, self.rules)),
        )
        self._results[config.id] = result
        logger.info(
            "Experiment %s finished: %d samples, consistency=%.3f load=%.3f",
            config.id, result.samples, result.semantic_consistency, result.cognitive_load,
        )
        return result

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare_configurations(
        self,
        configs: Sequence[AgentConfiguration],
        samples: Sequence[str],
        duration_ms: float = DEFAULT_DURATION_MS,
        cancel: Optional[CancelToken] = None,
    ) -> ComparisonResult:
        if not configs:
            raise InvalidArgument("at least one configuration is required")
        if isinstance(samples, str) or not samples:
            raise InvalidArgument("samples are required")
        ids = [c.id for c in configs]
        if len(set(ids)) != len(ids):
            raise InvalidArgument("configuration ids must be unique")

        results: Dict[str, ExperimentResult] = {}
        for config in configs:
            results[config.id] = self.run_experiment(config, samples, duration_ms, cancel)

        winner = ""
        best = float("-inf")
        for config_id, result in results.items():
            score = score_result(result)
            if score > best:
                best = score
                winner = config_id

        ranking = sorted(
            (RankedConfiguration(cid, score_result(r), r) for cid, r in results.items()),
            key=lambda rc: rc.score,
            reverse=True,
        )
        deltas = self._deltas(ranking[0].result, ranking[1].result) if len(ranking) > 1 else None

        return ComparisonResult(
            winner=winner,
            results=results,
            ranking=ranking,
            deltas=deltas,
            analysis=render_comparison(ranking, deltas),
        )

    # ------------------------------------------------------------------
    # Retained results
    # ------------------------------------------------------------------

    def get_result(self, configuration_id: str) -> Optional[ExperimentResult]:
        return self._results.get(configuration_id)

    def results(self) -> Dict[str, ExperimentResult]:
        return dict(self._results)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _deltas(winner: ExperimentResult, runner_up: ExperimentResult) -> ComparisonDeltas:
        return ComparisonDeltas(
            consistency_pct=_pct_change(
                winner.semantic_consistency - runner_up.semantic_consistency,
                runner_up.semantic_consistency,
            ),
            load_pct=_pct_change(
                runner_up.cognitive_load - winner.cognitive_load,
                runner_up.cognitive_load,
            ),
            latency_pct=_pct_change(
                runner_up.processing_latency_ms - winner.processing_latency_ms,
                runner_up.processing_latency_ms,
            ),
        )
