"""
FastAPI application — local CogniCap measurement API.
Runs on http://127.0.0.1:3025 by default.

Singletons (drift tracker, overload detector, experiment engine, scheduler,
journal) live on app.state so that each call to create_app() produces a fully
independent instance with no shared module-level globals. This makes test
isolation straightforward.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import numpy as np
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import config
from ..drift.tracker import DriftTracker
from ..errors import InvalidArgument, NotFound
from ..experiments.clock import Clock, SystemClock
from ..experiments.engine import ExperimentEngine
from ..experiments.scheduler import ExperimentScheduler
from ..load.detector import OverloadDetector
from ..load.history import MetricHistoryStore
from ..load.usage import UsageTracker
from ..storage.journal import MeasurementJournal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Background scheduler loop
# ---------------------------------------------------------------------------

async def _scheduler_loop(scheduler: ExperimentScheduler, interval_s: float) -> None:
    while True:
        await asyncio.sleep(interval_s)
        status = scheduler.get_experiment_status()
        if status.active or not status.queued:
            continue
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, scheduler.run_next_experiment)
        except Exception:
            logger.exception("Scheduled experiment failed")


# ---------------------------------------------------------------------------
# Lifespan — initialises and tears down all per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    seed = app.state.seed
    detector = OverloadDetector(MetricHistoryStore(capacity=config.history_capacity))
    tracker = DriftTracker(log_capacity=config.drift_log_capacity)

    app.state.services = {
        "tracker": tracker,
        "detector": detector,
        "engine": ExperimentEngine(
            drift_tracker=tracker,
            detector=detector,
            clock=app.state.clock,
            rng=np.random.default_rng(seed),
        ),
        "scheduler": ExperimentScheduler(rng=np.random.default_rng(seed)),
        "journal": MeasurementJournal(app.state.db_path),
        "usage": UsageTracker(detector.history),
    }

    scheduler_task = asyncio.create_task(
        _scheduler_loop(app.state.services["scheduler"], config.scheduler_interval_s)
    )

    yield

    scheduler_task.cancel()
    try:
        await scheduler_task
    except asyncio.CancelledError:
        pass


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    db_path: Optional[Path] = None,
    clock: Optional[Clock] = None,
    seed: Optional[int] = None,
) -> FastAPI:
    app = FastAPI(
        title="CogniCap",
        description="Terminology drift and cognitive load measurement for agents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db_path = db_path or config.journal_path
    app.state.clock = clock or SystemClock()
    app.state.seed = seed if seed is not None else config.seed

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidArgument)
    async def _invalid_argument(request: Request, exc: InvalidArgument):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    from .routers import agents, experiments, monitoring, scheduler

    app.include_router(agents.router)
    app.include_router(experiments.router)
    app.include_router(scheduler.router)
    app.include_router(monitoring.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "CogniCap", "version": __version__}

    return app


app = create_app()
