"""
Experiment data types — agent configurations under test and the immutable
results produced by running them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Specialization(str, Enum):
    EXPERT = "expert"
    GENERALIST = "generalist"
    HYBRID = "hybrid"


class ContextWindow(str, Enum):
    MINIMAL = "minimal"
    STANDARD = "standard"
    EXTENDED = "extended"


class MemoryStrategy(str, Enum):
    EPHEMERAL = "ephemeral"
    PERSISTENT = "persistent"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class AgentConfiguration:
    id: str
    name: str = ""
    database: bool = False
    specialization: Specialization = Specialization.HYBRID
    context_window: ContextWindow = ContextWindow.STANDARD
    memory_strategy: MemoryStrategy = MemoryStrategy.HYBRID
    training_protocol: Optional[str] = None

    def __post_init__(self):
        # accept plain strings from JSON callers
        object.__setattr__(self, "specialization", Specialization(self.specialization))
        object.__setattr__(self, "context_window", ContextWindow(self.context_window))
        object.__setattr__(self, "memory_strategy", MemoryStrategy(self.memory_strategy))
        if not self.name:
            object.__setattr__(self, "name", self.id)


@dataclass(frozen=True)
class ExperimentResult:
    configuration_id: str
    semantic_consistency: float      # mean over processed samples
    cognitive_load: float            # final load index of the configuration's history
    processing_latency_ms: float     # mean
    error_rate: float                # mean
    drift_velocity: float
    samples: int
    duration_ms: float
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RankedConfiguration:
    configuration_id: str
    score: float
    result: ExperimentResult


@dataclass(frozen=True)
class ComparisonDeltas:
    """Winner vs runner-up, in percent; positive favours the winner."""
    consistency_pct: float
    load_pct: float
    latency_pct: float


@dataclass(frozen=True)
class ComparisonResult:
    winner: str
    results: Dict[str, ExperimentResult]
    ranking: List[RankedConfiguration]
    deltas: Optional[ComparisonDeltas] = None
    analysis: str = field(default="", repr=False)
