"""
Pydantic schemas for the FastAPI local API.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..experiments.models import ContextWindow, MemoryStrategy, Specialization

# ── Drift ──────────────────────────────────────────────────────────────────

class BaselineIn(BaseModel):
    samples: List[str] = Field(..., min_length=1)


class ResponsePatternsOut(BaseModel):
    avg_length: float
    structure_types: List[str]
    common_phrases: List[str]


class BaselineOut(BaseModel):
    agent_id: str
    message: str = "Baseline established"
    sample_count: int
    term_count: int
    established_at: float
    patterns: ResponsePatternsOut


class DriftAnalysisOut(BaseModel):
    agent_id: str
    samples: int
    current: float
    average: float
    trend: float
    volatility: float


# ── Measurement ────────────────────────────────────────────────────────────

class MeasureContext(BaseModel):
    usage: float = Field(0.5, ge=0.0, le=1.0, description="context window usage")
    latency_ms: float = Field(1000.0, ge=0.0)
    error_rate: float = Field(0.01, ge=0.0, le=1.0)


class MeasureIn(BaseModel):
    sample: str = Field(..., min_length=1)
    context: MeasureContext = Field(default_factory=MeasureContext)


class OverloadOut(BaseModel):
    is_overloaded: bool
    severity: str
    factors: List[str]
    recommendations: List[str]


class MeasureOut(BaseModel):
    agent_id: str
    drift: float
    semantic_consistency: float
    cognitive_load: float = Field(..., ge=0.0, le=1.0)
    overload: OverloadOut


class MeasurementOut(BaseModel):
    id: Optional[int]
    agent_id: str
    timestamp: float
    semantic_consistency: float
    cognitive_load: float
    context_usage: float
    processing_latency_ms: float
    error_rate: float
    drift: float


class MetricsOut(BaseModel):
    agent_id: str
    measurements: List[MeasurementOut]
    report: str
    current_load: float


# ── Usage and training ─────────────────────────────────────────────────────

class AgentUsageOut(BaseModel):
    agent_id: str
    usage_count: int
    average_load: float
    trend: str


class TrainingStartIn(BaseModel):
    protocol: str = Field(..., min_length=1)


class TrainingStartOut(BaseModel):
    session_id: str
    agent_id: str
    protocol: str
    started_at: float


class TrainingReportOut(BaseModel):
    session_id: str
    effectiveness: float
    consistency_improvement: float
    load_reduction: float
    error_reduction: float
    improvements: List[str]
    recommendations: List[str]


# ── Experiments ────────────────────────────────────────────────────────────

class AgentConfigurationIn(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    database: bool = False
    specialization: Specialization = Specialization.HYBRID
    context_window: ContextWindow = ContextWindow.STANDARD
    memory_strategy: MemoryStrategy = MemoryStrategy.HYBRID
    training_protocol: Optional[str] = None


class ExperimentRunIn(BaseModel):
    configuration: AgentConfigurationIn
    samples: List[str] = Field(..., min_length=1)
    duration_ms: Optional[float] = Field(None, ge=0)


class CompareIn(BaseModel):
    configurations: List[AgentConfigurationIn] = Field(..., min_length=1)
    samples: List[str] = Field(..., min_length=1)
    duration_ms: Optional[float] = Field(None, ge=0)


class ExperimentResultOut(BaseModel):
    configuration_id: str
    semantic_consistency: float
    cognitive_load: float
    processing_latency_ms: float
    error_rate: float
    drift_velocity: float
    samples: int
    duration_ms: float
    recommendations: List[str]


class RankedOut(BaseModel):
    configuration_id: str
    score: float


class DeltasOut(BaseModel):
    consistency_pct: float
    load_pct: float
    latency_pct: float


class ComparisonOut(BaseModel):
    winner: str
    results: Dict[str, ExperimentResultOut]
    ranking: List[RankedOut]
    deltas: Optional[DeltasOut] = None
    analysis: str


class StoredExperimentOut(BaseModel):
    id: str
    configuration: dict
    results: dict
    created_at: float


# ── Scheduler ──────────────────────────────────────────────────────────────

class ScheduleIn(BaseModel):
    experiment_id: str
    priority: str = Field("normal", description="high | normal | low")


class DesignOut(BaseModel):
    id: str
    name: str
    hypothesis: str
    required_samples: int
    duration_ms: int


class OutcomeOut(BaseModel):
    experiment_id: str
    hypothesis_confirmed: bool
    key_findings: List[str]
    recommendations: List[str]
    confidence_level: float


class ActiveOut(BaseModel):
    id: str
    name: str
    started_at: float
    status: str


class CompletedOut(BaseModel):
    id: str
    name: str
    completed_at: float
    outcome: OutcomeOut


class SchedulerStatusOut(BaseModel):
    active: List[ActiveOut]
    queued: List[DesignOut]
    completed: List[CompletedOut]


# ── Monitoring ─────────────────────────────────────────────────────────────

class AlertOut(BaseModel):
    id: Optional[int]
    agent_id: str
    severity: str
    message: str
    timestamp: float


class AgentSummaryOut(BaseModel):
    agent_id: str
    semantic_consistency: float
    cognitive_load: float
    status: str
    last_measurement: float


class DashboardOut(BaseModel):
    agents: List[AgentSummaryOut]
    total_measurements: int
    active_alerts: int
    experiments: int
