"""Tests for OverloadDetector: load index and overload severity."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from cognicap.load.detector import OverloadDetector, Severity, normalize
from cognicap.load.history import MetricRecord


def _record(agent_id="a", **kwargs) -> MetricRecord:
    defaults = dict(
        context_window_usage=0.5,
        processing_latency_ms=1000.0,
        error_rate=0.0,
        semantic_consistency=1.0,
    )
    defaults.update(kwargs)
    return MetricRecord(agent_id=agent_id, **defaults)


def _detector_with(n: int = 5, **kwargs) -> OverloadDetector:
    det = OverloadDetector()
    for _ in range(n):
        det.record_metric(_record(**kwargs))
    return det


records = st.builds(
    MetricRecord,
    agent_id=st.just("fuzz"),
    context_window_usage=st.floats(0.0, 1.0),
    processing_latency_ms=st.floats(0.0, 1e7, allow_nan=False, allow_infinity=False),
    error_rate=st.floats(0.0, 1.0),
    semantic_consistency=st.floats(0.0, 1.0),
    cognitive_load_index=st.floats(0.0, 1.0),
)


class TestNormalize:
    def test_clamps(self):
        assert normalize(-1, 0, 1) == 0.0
        assert normalize(2, 0, 1) == 1.0
        assert normalize(0.25, 0, 0.5) == 0.5

    def test_degenerate_range_is_zero(self):
        assert normalize(5, 3, 3) == 0.0


class TestCognitiveLoad:
    def test_empty_history_is_zero(self):
        assert OverloadDetector().calculate_cognitive_load("nobody") == 0.0

    def test_weighted_sum(self):
        det = _detector_with(
            context_window_usage=0.5,
            processing_latency_ms=1000.0,
            error_rate=0.1,
            semantic_consistency=0.8,
        )
        # 0.5*0.25 + 0*0.25 + 0.5*0.30 + 0.4*0.20
        assert det.calculate_cognitive_load("a") == pytest.approx(0.355)

    def test_latency_normalized_against_derived_baseline(self):
        det = _detector_with(processing_latency_ms=2000.0, context_window_usage=0.0)
        # (2000 - 1000) / (3000 - 1000) = 0.5 → 0.5 * 0.25
        assert det.calculate_cognitive_load("a") == pytest.approx(0.125)

    def test_uses_last_ten_records(self):
        det = OverloadDetector()
        for _ in range(10):
            det.record_metric(_record(error_rate=1.0))
        for _ in range(10):
            det.record_metric(_record(error_rate=0.0, context_window_usage=0.0))
        assert det.calculate_cognitive_load("a") == 0.0

    @given(st.lists(records, min_size=1, max_size=40))
    @settings(max_examples=200)
    def test_load_always_in_unit_interval(self, batch):
        det = OverloadDetector()
        for r in batch:
            det.record_metric(r)
        load = det.calculate_cognitive_load("fuzz")
        assert 0.0 <= load <= 1.0


class TestDetectOverload:
    def test_no_history_is_not_overloaded(self):
        result = OverloadDetector().detect_overload("nobody")
        assert result.is_overloaded is False
        assert result.severity == Severity.NONE
        assert result.factors == []

    def test_healthy_metrics(self):
        result = _detector_with().detect_overload("a")
        assert result.severity == Severity.NONE
        assert result.recommendations == []

    def test_context_warning(self):
        result = _detector_with(context_window_usage=0.8).detect_overload("a")
        assert result.severity == Severity.WARNING
        assert result.factors == ["High context window usage"]
        assert result.recommendations == ["Consider context optimization"]

    def test_context_critical(self):
        result = _detector_with(context_window_usage=0.95).detect_overload("a")
        assert result.is_overloaded
        assert result.severity == Severity.CRITICAL
        assert result.factors == ["Critical context window usage"]

    def test_later_warning_does_not_downgrade_earlier_critical(self):
        result = _detector_with(context_window_usage=0.95, error_rate=0.06).detect_overload("a")
        assert result.severity == Severity.CRITICAL
        assert result.factors == ["Critical context window usage", "Elevated error rate"]

    def test_factors_follow_check_order(self):
        result = _detector_with(
            context_window_usage=0.8,
            processing_latency_ms=2500.0,
            error_rate=0.2,
            semantic_consistency=0.7,
        ).detect_overload("a")
        assert result.factors == [
            "High context window usage",
            "Critical processing latency",
            "Critical error rate",
            "Significant semantic drift",
        ]
        assert result.severity == Severity.CRITICAL

    def test_latency_warning_relative_to_baseline(self):
        result = _detector_with(processing_latency_ms=1600.0).detect_overload("a")
        assert result.factors == ["Elevated processing latency"]

    def test_drift_critical(self):
        result = _detector_with(semantic_consistency=0.5).detect_overload("a")
        assert result.factors == ["Critical semantic drift"]
        assert result.recommendations == ["Retrain agent or reset context"]

    def test_uses_last_five_records(self):
        det = OverloadDetector()
        for _ in range(5):
            det.record_metric(_record(context_window_usage=0.99))
        for _ in range(5):
            det.record_metric(_record(context_window_usage=0.1))
        assert det.detect_overload("a").severity == Severity.NONE

    def test_detection_does_not_mutate_history(self):
        det = _detector_with(context_window_usage=0.95)
        before = det.history.history("a")
        det.detect_overload("a")
        assert det.history.history("a") == before


class TestSnapshot:
    def test_snapshot_averages(self):
        det = _detector_with(n=3, context_window_usage=0.6, processing_latency_ms=800.0)
        snap = det.snapshot("a")
        assert snap.samples == 3
        assert snap.context_usage == pytest.approx(0.6)
        assert snap.latency_ms == pytest.approx(800.0)
        assert snap.overload.severity == Severity.NONE

    def test_empty_snapshot(self):
        snap = OverloadDetector().snapshot("nobody")
        assert snap.samples == 0
        assert snap.load_index == 0.0
