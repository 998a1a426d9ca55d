"""
/experiments — run and compare agent configurations.
"""

from __future__ import annotations

import asyncio
import dataclasses

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import (
    AgentConfigurationIn,
    CompareIn,
    ComparisonOut,
    DeltasOut,
    ExperimentResultOut,
    ExperimentRunIn,
    RankedOut,
    StoredExperimentOut,
)
from ...config import config
from ...experiments.models import AgentConfiguration, ExperimentResult

router = APIRouter(prefix="/experiments", tags=["experiments"])


def _get_services(request: Request):
    return request.app.state.services


def _to_config(body: AgentConfigurationIn) -> AgentConfiguration:
    return AgentConfiguration(**body.model_dump())


def result_out(result: ExperimentResult) -> ExperimentResultOut:
    data = dataclasses.asdict(result)
    data["recommendations"] = list(result.recommendations)
    return ExperimentResultOut(**data)


@router.post("/run", response_model=ExperimentResultOut)
async def run_experiment(body: ExperimentRunIn, services=Depends(_get_services)):
    """Run one configuration over *samples* and journal the result."""
    cfg = _to_config(body.configuration)
    duration = body.duration_ms if body.duration_ms is not None else config.experiment_duration_ms
    loop = asyncio.get_event_loop()
    result = await loop.run_in_executor(
        None, services["engine"].run_experiment, cfg, body.samples, duration
    )
    services["journal"].save_experiment(
        cfg.id,
        configuration=dataclasses.asdict(cfg),
        results=dataclasses.asdict(result),
    )
    return result_out(result)


@router.post("/compare", response_model=ComparisonOut)
async def compare(body: CompareIn, services=Depends(_get_services)):
    """Run every configuration in turn and rank them."""
    configs = [_to_config(c) for c in body.configurations]
    duration = body.duration_ms if body.duration_ms is not None else config.experiment_duration_ms
    loop = asyncio.get_event_loop()
    comparison = await loop.run_in_executor(
        None, services["engine"].compare_configurations, configs, body.samples, duration
    )
    return ComparisonOut(
        winner=comparison.winner,
        results={cid: result_out(r) for cid, r in comparison.results.items()},
        ranking=[RankedOut(configuration_id=r.configuration_id, score=r.score)
                 for r in comparison.ranking],
        deltas=DeltasOut(**dataclasses.asdict(comparison.deltas)) if comparison.deltas else None,
        analysis=comparison.analysis,
    )


@router.get("/{experiment_id}/results", response_model=StoredExperimentOut)
def get_results(experiment_id: str, services=Depends(_get_services)):
    entry = services["journal"].get_experiment(experiment_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Experiment not found")
    return StoredExperimentOut(**entry.__dict__)
