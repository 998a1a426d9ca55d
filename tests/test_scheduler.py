"""Tests for the experiment catalog and ExperimentScheduler queue."""

import threading
import time

import pytest

from cognicap.errors import InvalidArgument, NotFound
from cognicap.experiments.catalog import EXPERIMENT_CATALOG, get_design
from cognicap.experiments.scheduler import ExperimentScheduler, stub_outcome

A = "exp-001-database-impact"
B = "exp-002-specialization-efficiency"
C = "exp-003-context-window-optimization"
D = "exp-004-training-protocol-effectiveness"
E = "exp-005-memory-strategy-impact"


def _queued(scheduler):
    return [d.id for d in scheduler.get_experiment_status().queued]


@pytest.fixture()
def scheduler(fixed_rng):
    return ExperimentScheduler(rng=fixed_rng, now=lambda: 1000.0)


class TestCatalog:
    def test_ten_unique_designs(self):
        ids = [d.id for d in EXPERIMENT_CATALOG]
        assert len(ids) == 10
        assert len(set(ids)) == 10

    def test_unknown_design(self):
        with pytest.raises(NotFound, match="exp-999 not found in catalog"):
            get_design("exp-999")


class TestQueueing:
    def test_high_runs_before_normal(self, scheduler):
        scheduler.schedule_experiment(A)
        scheduler.schedule_experiment(B)
        assert _queued(scheduler) == [B, A]
        scheduler.schedule_experiment(C, "high")
        assert scheduler.run_next_experiment().experiment_id == C

    def test_low_after_normal(self, scheduler):
        scheduler.schedule_experiment(A, "normal")
        scheduler.schedule_experiment(B, "low")
        assert _queued(scheduler) == [A, B]

    def test_normal_inserts_at_midpoint(self, scheduler):
        for exp_id in (A, B, C, D):
            scheduler.schedule_experiment(exp_id, "low")
        scheduler.schedule_experiment(E)
        assert _queued(scheduler) == [A, B, E, C, D]

    def test_unknown_experiment(self, scheduler):
        with pytest.raises(NotFound):
            scheduler.schedule_experiment("exp-999")
        assert _queued(scheduler) == []

    def test_unknown_priority(self, scheduler):
        with pytest.raises(InvalidArgument):
            scheduler.schedule_experiment(A, "urgent")
        assert _queued(scheduler) == []

    def test_empty_queue_runs_nothing(self, scheduler):
        assert scheduler.run_next_experiment() is None


class TestRunning:
    def test_run_moves_to_completed(self, scheduler):
        scheduler.schedule_experiment(A)
        outcome = scheduler.run_next_experiment()
        status = scheduler.get_experiment_status()
        assert status.queued == []
        assert status.active == []
        assert [c.design.id for c in status.completed] == [A]
        completed = scheduler.get_completed(A)
        assert completed.outcome == outcome
        assert completed.completed_at == 1000.0

    def test_status_is_a_copy(self, scheduler):
        scheduler.schedule_experiment(A)
        scheduler.get_experiment_status().queued.clear()
        assert _queued(scheduler) == [A]

    def test_get_completed_unknown(self, scheduler):
        with pytest.raises(NotFound):
            scheduler.get_completed(A)

    def test_failed_generator_leaves_nothing_active(self, fixed_rng):
        def boom(design, rng):
            raise RuntimeError("generator failed")

        scheduler = ExperimentScheduler(rng=fixed_rng, outcome_generator=boom)
        scheduler.schedule_experiment(A)
        with pytest.raises(RuntimeError):
            scheduler.run_next_experiment()
        status = scheduler.get_experiment_status()
        assert status.active == []
        assert status.completed == []


class TestStubOutcome:
    def test_canned_findings(self, fixed_rng):
        outcome = stub_outcome(get_design(A), fixed_rng)
        assert outcome.hypothesis_confirmed is True
        assert outcome.confidence_level == pytest.approx(0.925)
        assert outcome.key_findings[0] == "Database persistence improves consistency by 18.3%"
        assert outcome.recommendations == (
            "Implement database_persistence optimization",
            "Monitor semantic_consistency, cognitive_load continuously",
            "Schedule follow-up experiment for validation",
        )

    def test_generic_findings_and_rejection(self, rng_factory):
        outcome = stub_outcome(get_design("exp-010-temporal-consistency"), rng_factory(0.2))
        assert outcome.hypothesis_confirmed is False
        assert outcome.key_findings == (
            "Significant correlation found between variables",
            "Further investigation recommended",
        )
        assert outcome.confidence_level == pytest.approx(0.88)


class TestConcurrentDraining:
    def test_two_workers_drain_duplicate_entries(self, fixed_rng):
        def slow(design, rng):
            time.sleep(0.2)
            return stub_outcome(design, rng)

        scheduler = ExperimentScheduler(rng=fixed_rng, outcome_generator=slow)
        scheduler.schedule_experiment(A, "low")
        scheduler.schedule_experiment(A, "low")
        outcomes, errors = [], []

        def drain():
            try:
                outcomes.append(scheduler.run_next_experiment())
            except Exception as e:
                errors.append(repr(e))

        workers = [threading.Thread(target=drain) for _ in range(2)]
        for w in workers:
            w.start()
        for w in workers:
            w.join(timeout=10)

        assert errors == []
        assert [o.experiment_id for o in outcomes] == [A, A]
        status = scheduler.get_experiment_status()
        assert status.active == []
        assert status.queued == []
        assert [c.design.id for c in status.completed] == [A]

    def test_active_runs_tracked_per_run(self, fixed_rng):
        started, release = threading.Event(), threading.Event()

        def gated(design, rng):
            started.set()
            release.wait(timeout=10)
            return stub_outcome(design, rng)

        scheduler = ExperimentScheduler(rng=fixed_rng, outcome_generator=gated)
        scheduler.schedule_experiment(A)
        worker = threading.Thread(target=scheduler.run_next_experiment)
        worker.start()
        try:
            assert started.wait(timeout=10)
            [active] = scheduler.get_experiment_status().active
            assert active.run_id == 1
            assert active.design.id == A
        finally:
            release.set()
            worker.join(timeout=10)
        assert scheduler.get_experiment_status().active == []
