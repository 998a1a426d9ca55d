"""
/scheduler — queue catalog experiments and drain the queue.
"""

from __future__ import annotations

import dataclasses
from typing import List

from fastapi import APIRouter, Depends, Request, Response

from ...api.schemas import (
    ActiveOut,
    CompletedOut,
    DesignOut,
    OutcomeOut,
    ScheduleIn,
    SchedulerStatusOut,
)
from ...experiments.catalog import EXPERIMENT_CATALOG, ExperimentDesign
from ...experiments.scheduler import ExperimentOutcome
from ...reporting.text import render_experiment_report

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


def _get_scheduler(request: Request):
    return request.app.state.services["scheduler"]


def _design_out(design: ExperimentDesign) -> DesignOut:
    return DesignOut(
        id=design.id,
        name=design.name,
        hypothesis=design.hypothesis,
        required_samples=design.required_samples,
        duration_ms=design.duration_ms,
    )


def _outcome_out(outcome: ExperimentOutcome) -> OutcomeOut:
    data = dataclasses.asdict(outcome)
    data["key_findings"] = list(outcome.key_findings)
    data["recommendations"] = list(outcome.recommendations)
    return OutcomeOut(**data)


@router.get("", response_model=SchedulerStatusOut)
def get_status(scheduler=Depends(_get_scheduler)):
    status = scheduler.get_experiment_status()
    return SchedulerStatusOut(
        active=[
            ActiveOut(id=a.design.id, name=a.design.name, started_at=a.started_at, status=a.status)
            for a in status.active
        ],
        queued=[_design_out(d) for d in status.queued],
        completed=[
            CompletedOut(
                id=c.design.id,
                name=c.design.name,
                completed_at=c.completed_at,
                outcome=_outcome_out(c.outcome),
            )
            for c in status.completed
        ],
    )


@router.get("/catalog", response_model=List[DesignOut])
def get_catalog():
    return [_design_out(d) for d in EXPERIMENT_CATALOG]


@router.post("/schedule", status_code=202)
def schedule(body: ScheduleIn, scheduler=Depends(_get_scheduler)):
    """Queue a catalog experiment; unknown ids → 404, unknown priorities → 422."""
    scheduler.schedule_experiment(body.experiment_id, body.priority)
    return {
        "status": "scheduled",
        "queued": [d.id for d in scheduler.get_experiment_status().queued],
    }


@router.post("/next", response_model=OutcomeOut, responses={204: {"description": "Queue empty"}})
def run_next(scheduler=Depends(_get_scheduler)):
    outcome = scheduler.run_next_experiment()
    if outcome is None:
        return Response(status_code=204)
    return _outcome_out(outcome)


@router.get("/{experiment_id}/report")
def get_report(experiment_id: str, scheduler=Depends(_get_scheduler)):
    completed = scheduler.get_completed(experiment_id)
    return {"experiment_id": experiment_id, "report": render_experiment_report(completed)}
