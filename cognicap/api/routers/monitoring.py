"""
/alerts and /dashboard — journal-backed monitoring views.
"""

from __future__ import annotations

import time
from typing import List

from fastapi import APIRouter, Depends, Query, Request

from ...api.schemas import AgentSummaryOut, AlertOut, DashboardOut

router = APIRouter(tags=["monitoring"])

ACTIVE_ALERT_WINDOW_S = 3600


def _get_services(request: Request):
    return request.app.state.services


@router.get("/alerts", response_model=List[AlertOut])
def get_alerts(limit: int = Query(50, ge=1, le=1000), services=Depends(_get_services)):
    return [AlertOut(**a.__dict__) for a in services["journal"].alerts(limit=limit)]


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(services=Depends(_get_services)):
    journal = services["journal"]
    detector = services["detector"]

    agents = []
    for agent_id in journal.agent_ids():
        latest = journal.latest_measurement(agent_id)
        agents.append(AgentSummaryOut(
            agent_id=agent_id,
            semantic_consistency=latest.semantic_consistency if latest else 0.0,
            cognitive_load=latest.cognitive_load if latest else 0.0,
            status=detector.detect_overload(agent_id).severity.value,
            last_measurement=latest.timestamp if latest else 0.0,
        ))

    return DashboardOut(
        agents=agents,
        total_measurements=journal.count_measurements(),
        active_alerts=journal.count_alerts(since=time.time() - ACTIVE_ALERT_WINDOW_S),
        experiments=journal.count_experiments(),
    )
