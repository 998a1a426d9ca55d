"""
/agents — baselines, per-sample measurement, metrics, drift, overload, usage
ranking and training sessions.
"""

from __future__ import annotations

import dataclasses
import time
from typing import List

from fastapi import APIRouter, Depends, Query, Request

from ...api.schemas import (
    AgentUsageOut,
    BaselineIn,
    BaselineOut,
    DriftAnalysisOut,
    MeasureIn,
    MeasureOut,
    MeasurementOut,
    MetricsOut,
    OverloadOut,
    ResponsePatternsOut,
    TrainingReportOut,
    TrainingStartIn,
    TrainingStartOut,
)
from ...load.detector import OverloadResult
from ...load.history import MetricRecord
from ...reporting.text import render_load_report
from ...storage.journal import AlertEntry, MeasurementEntry

router = APIRouter(prefix="/agents", tags=["agents"])


def _get_services(request: Request):
    return request.app.state.services


def overload_out(result: OverloadResult) -> OverloadOut:
    return OverloadOut(
        is_overloaded=result.is_overloaded,
        severity=result.severity.value,
        factors=list(result.factors),
        recommendations=list(result.recommendations),
    )


@router.post("/{agent_id}/baseline", response_model=BaselineOut)
def establish_baseline(agent_id: str, body: BaselineIn, services=Depends(_get_services)):
    """Replace the agent's terminology baseline with one built from *samples*."""
    baseline = services["tracker"].establish_baseline(agent_id, body.samples)
    return BaselineOut(
        agent_id=agent_id,
        sample_count=baseline.sample_count,
        term_count=len(baseline.profile),
        established_at=baseline.established_at,
        patterns=ResponsePatternsOut(
            avg_length=baseline.patterns.avg_length,
            structure_types=list(baseline.patterns.structure_types),
            common_phrases=list(baseline.patterns.common_phrases),
        ),
    )


@router.post("/{agent_id}/measure", response_model=MeasureOut)
def measure(agent_id: str, body: MeasureIn, services=Depends(_get_services)):
    """Score one sample, record its runtime context and check for overload."""
    tracker = services["tracker"]
    detector = services["detector"]
    journal = services["journal"]

    drift = tracker.measure_drift(agent_id, body.sample)
    record = MetricRecord(
        agent_id=agent_id,
        context_window_usage=body.context.usage,
        processing_latency_ms=body.context.latency_ms,
        error_rate=body.context.error_rate,
        semantic_consistency=1.0 - drift,
    )
    detector.record_metric(record)
    record.cognitive_load_index = detector.calculate_cognitive_load(agent_id)

    journal.append_measurement(MeasurementEntry(
        id=None,
        agent_id=agent_id,
        timestamp=record.timestamp,
        semantic_consistency=record.semantic_consistency,
        cognitive_load=record.cognitive_load_index,
        context_usage=record.context_window_usage,
        processing_latency_ms=record.processing_latency_ms,
        error_rate=record.error_rate,
        drift=drift,
    ))

    overload = detector.detect_overload(agent_id)
    if overload.is_overloaded:
        journal.append_alert(AlertEntry(
            id=None,
            agent_id=agent_id,
            severity=overload.severity.value,
            message=f"Overload detected: {', '.join(overload.factors)}",
            timestamp=time.time(),
        ))

    return MeasureOut(
        agent_id=agent_id,
        drift=drift,
        semantic_consistency=record.semantic_consistency,
        cognitive_load=record.cognitive_load_index,
        overload=overload_out(overload),
    )


@router.get("/{agent_id}/metrics", response_model=MetricsOut)
def get_metrics(agent_id: str, limit: int = 100, services=Depends(_get_services)):
    detector = services["detector"]
    entries = services["journal"].measurements(agent_id, limit=limit)
    return MetricsOut(
        agent_id=agent_id,
        measurements=[MeasurementOut(**e.__dict__) for e in entries],
        report=render_load_report(detector.snapshot(agent_id)),
        current_load=detector.calculate_cognitive_load(agent_id),
    )


@router.get("/{agent_id}/drift", response_model=DriftAnalysisOut)
def get_drift(agent_id: str, limit: int = 500, services=Depends(_get_services)):
    analysis = services["tracker"].analyze(agent_id, limit=limit)
    return DriftAnalysisOut(**analysis.__dict__)


@router.get("/{agent_id}/overload", response_model=OverloadOut)
def get_overload(agent_id: str, services=Depends(_get_services)):
    return overload_out(services["detector"].detect_overload(agent_id))


# ── Usage and training ─────────────────────────────────────────────────────

@router.get("/usage", response_model=List[AgentUsageOut])
def get_usage(limit: int = Query(10, ge=1, le=1000), services=Depends(_get_services)):
    """Most-used agents first, with each agent's recent load trend."""
    return [
        AgentUsageOut(
            agent_id=u.agent_id,
            usage_count=u.usage_count,
            average_load=u.average_load,
            trend=u.trend.value,
        )
        for u in services["usage"].most_used_agents(limit)
    ]


@router.post("/{agent_id}/training", response_model=TrainingStartOut, status_code=201)
def start_training(agent_id: str, body: TrainingStartIn, services=Depends(_get_services)):
    usage = services["usage"]
    session = usage.get_training_session(usage.start_training_session(agent_id, body.protocol))
    return TrainingStartOut(
        session_id=session.id,
        agent_id=session.agent_id,
        protocol=session.protocol,
        started_at=session.started_at,
    )


@router.post("/training/{session_id}/end", response_model=TrainingReportOut)
def end_training(session_id: str, services=Depends(_get_services)):
    report = services["usage"].end_training_session(session_id)
    return TrainingReportOut(**dataclasses.asdict(report))
