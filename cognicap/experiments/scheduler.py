"""
Experiment Scheduler — queues catalog experiments by priority and runs them
one at a time through an outcome generator.

Queue positions:
  high    → front of the queue
  low     → back of the queue
  normal  → the current midpoint (index len // 2), a positional insert rather
            than a stable priority merge

The default outcome generator is a stub: it draws the confirmation and the
confidence level from the injected generator and reports canned findings per
catalog id.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..errors import InvalidArgument, NotFound
from .catalog import ExperimentDesign, get_design

logger = logging.getLogger(__name__)


class Priority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


@dataclass(frozen=True)
class ExperimentOutcome:
    experiment_id: str
    hypothesis_confirmed: bool
    key_findings: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    confidence_level: float


@dataclass
class ActiveExperiment:
    run_id: int
    design: ExperimentDesign
    started_at: float
    status: str = "running"


@dataclass(frozen=True)
class CompletedExperiment:
    design: ExperimentDesign
    outcome: ExperimentOutcome
    completed_at: float


@dataclass(frozen=True)
class ExperimentStatus:
    active: List[ActiveExperiment] = field(default_factory=list)
    queued: List[ExperimentDesign] = field(default_factory=list)
    completed: List[CompletedExperiment] = field(default_factory=list)


OutcomeGenerator = Callable[[ExperimentDesign, np.random.Generator], ExperimentOutcome]

_CANNED_FINDINGS: Dict[str, Tuple[str, ...]] = {
    "exp-001-database-impact": (
        "Database persistence improves consistency by 18.3%",
        "Latency increase of 12ms is acceptable trade-off",
    ),
    "exp-002-specialization-efficiency": (
        "Expert agents show 28% lower cognitive load",
        "Cross-domain performance penalty is 45%",
    ),
    "exp-003-context-window-optimization": (
        "Optimal context usage is 65-70%",
        "Beyond 80% shows exponential performance degradation",
    ),
}

_GENERIC_FINDINGS = (
    "Significant correlation found between variables",
    "Further investigation recommended",
)

CONFIRMATION_CUTOFF = 0.3


def stub_outcome(design: ExperimentDesign, rng: np.random.Generator) -> ExperimentOutcome:
    return ExperimentOutcome(
        experiment_id=design.id,
        hypothesis_confirmed=bool(rng.random() > CONFIRMATION_CUTOFF),
        key_findings=_CANNED_FINDINGS.get(design.id, _GENERIC_FINDINGS),
        recommendations=(
            f"Implement {design.independent_variable} optimization",
            f"Monitor {', '.join(design.dependent_variables)} continuously",
            "Schedule follow-up experiment for validation",
        ),
        confidence_level=0.85 + float(rng.random()) * 0.15,
    )


class ExperimentScheduler:

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        outcome_generator: OutcomeGenerator = stub_outcome,
        now: Callable[[], float] = time.time,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self._generate = outcome_generator
        self._now = now
        self._queue: List[ExperimentDesign] = []
        self._active: Dict[int, ActiveExperiment] = {}     # keyed by run id
        self._completed: Dict[str, CompletedExperiment] = {}
        self._run_ids = itertools.count(1)
        self._lock = threading.Lock()          # queue, active and completed
        self._rng_lock = threading.Lock()      # numpy Generators are not thread-safe

    # ------------------------------------------------------------------
    # Queue management
    # ------------------------------------------------------------------

    def schedule_experiment(self, experiment_id: str, priority: str = Priority.NORMAL) -> None:
        design = get_design(experiment_id)
        try:
            priority = Priority(priority)
        except ValueError:
            raise InvalidArgument(f"Unknown priority {priority!r}") from None

        with self._lock:
            if priority == Priority.HIGH:
                self._queue.insert(0, design)
            elif priority == Priority.LOW:
                self._queue.append(design)
            else:
                self._queue.insert(len(self._queue) // 2, design)
            queued = len(self._queue)
        logger.info("Scheduled %s (%s), queue length %d", design.id, priority.value, queued)

    def run_next_experiment(self) -> Optional[ExperimentOutcome]:
        with self._lock:
            if not self._queue:
                return None
            design = self._queue.pop(0)
            run_id = next(self._run_ids)
            self._active[run_id] = ActiveExperiment(
                run_id=run_id, design=design, started_at=self._now()
            )

        logger.info("Starting experiment: %s", design.name)
        logger.debug("Hypothesis: %s", design.hypothesis)
        try:
            with self._rng_lock:
                outcome = self._generate(design, self.rng)
        except Exception:
            with self._lock:
                del self._active[run_id]
            raise

        with self._lock:
            del self._active[run_id]
            self._completed[design.id] = CompletedExperiment(
                design=design, outcome=outcome, completed_at=self._now()
            )
        logger.info(
            "Experiment %s completed: hypothesis %s",
            design.id, "CONFIRMED" if outcome.hypothesis_confirmed else "REJECTED",
        )
        return outcome

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def get_experiment_status(self) -> ExperimentStatus:
        with self._lock:
            return ExperimentStatus(
                active=list(self._active.values()),
                queued=list(self._queue),
                completed=list(self._completed.values()),
            )

    def get_completed(self, experiment_id: str) -> CompletedExperiment:
        completed = self._completed.get(experiment_id)
        if completed is None:
            raise NotFound(f"Experiment {experiment_id} not found or not yet completed")
        return completed
