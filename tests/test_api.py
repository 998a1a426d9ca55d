"""HTTP API tests against an in-process app."""

BASELINE = ["the api uses the database schema"] * 10
STREAM = BASELINE + ["the api uses the database schema once"] * 5


async def _baseline(client, agent_id="pm-agent"):
    resp = await client.post(f"/agents/{agent_id}/baseline", json={"samples": BASELINE})
    assert resp.status_code == 200
    return resp.json()


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── Agents ─────────────────────────────────────────────────────────────────

async def test_baseline(client):
    data = await _baseline(client)
    assert data["sample_count"] == 10
    assert data["term_count"] == 3
    assert data["patterns"]["common_phrases"][0] == "the api uses"


async def test_baseline_rejects_empty_samples(client):
    resp = await client.post("/agents/pm-agent/baseline", json={"samples": []})
    assert resp.status_code == 422


async def test_measure_without_baseline_scores_zero_drift(client):
    resp = await client.post("/agents/fresh/measure", json={"sample": "anything at all"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["drift"] == 0.0
    assert data["semantic_consistency"] == 1.0
    assert data["overload"]["severity"] == "none"


async def test_measure_drift_against_baseline(client):
    await _baseline(client)
    resp = await client.post(
        "/agents/pm-agent/measure",
        json={"sample": "the api uses the database schema once"},
    )
    data = resp.json()
    assert abs(data["drift"] - 0.9) < 1e-9
    assert 0.0 <= data["cognitive_load"] <= 1.0


async def test_overload_raises_alert(client):
    resp = await client.post(
        "/agents/busy/measure",
        json={"sample": "hello", "context": {"usage": 0.95, "latency_ms": 900, "error_rate": 0.0}},
    )
    overload = resp.json()["overload"]
    assert overload["is_overloaded"] is True
    assert overload["severity"] == "critical"

    alerts = (await client.get("/alerts")).json()
    assert len(alerts) == 1
    assert alerts[0]["agent_id"] == "busy"
    assert alerts[0]["message"] == "Overload detected: Critical context window usage"

    resp = await client.get("/agents/busy/overload")
    assert resp.json()["factors"] == ["Critical context window usage"]


async def test_measure_rejects_out_of_range_context(client):
    resp = await client.post(
        "/agents/a/measure", json={"sample": "x", "context": {"usage": 1.5}}
    )
    assert resp.status_code == 422


async def test_metrics_and_report(client):
    empty = (await client.get("/agents/ghost/metrics")).json()
    assert empty["measurements"] == []
    assert empty["report"] == "No metrics available for agent ghost"

    for _ in range(3):
        await client.post("/agents/pm-agent/measure", json={"sample": "the api"})
    data = (await client.get("/agents/pm-agent/metrics", params={"limit": 2})).json()
    assert len(data["measurements"]) == 2
    assert data["report"].startswith("Cognitive Load Report for pm-agent")


async def test_drift_analysis(client):
    await _baseline(client)
    for sample in ("the api uses the database schema", "the api schema"):
        await client.post("/agents/pm-agent/measure", json={"sample": sample})
    data = (await client.get("/agents/pm-agent/drift")).json()
    assert data["samples"] == 2
    assert data["trend"] > 0


# ── Experiments ────────────────────────────────────────────────────────────

async def test_run_and_fetch_results(client):
    resp = await client.post(
        "/experiments/run",
        json={"configuration": {"id": "cfg-a", "database": True}, "samples": STREAM},
    )
    assert resp.status_code == 200
    result = resp.json()
    assert result["samples"] == 5
    assert result["processing_latency_ms"] == 150.0

    stored = (await client.get("/experiments/cfg-a/results")).json()
    assert stored["configuration"]["database"] is True
    assert stored["results"]["samples"] == 5


async def test_results_not_found(client):
    resp = await client.get("/experiments/nope/results")
    assert resp.status_code == 404


async def test_run_rejects_unknown_specialization(client):
    resp = await client.post(
        "/experiments/run",
        json={"configuration": {"id": "x", "specialization": "wizard"}, "samples": STREAM},
    )
    assert resp.status_code == 422


async def test_compare(client):
    resp = await client.post(
        "/experiments/compare",
        json={
            "configurations": [
                {"id": "generalist", "specialization": "generalist", "context_window": "extended"},
                {"id": "expert", "specialization": "expert", "database": True,
                 "context_window": "minimal", "memory_strategy": "persistent"},
            ],
            "samples": STREAM,
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["winner"] == data["ranking"][0]["configuration_id"]
    assert set(data["results"]) == {"generalist", "expert"}
    assert data["deltas"] is not None
    assert "Comparative Analysis" in data["analysis"]


async def test_compare_duplicate_ids(client):
    resp = await client.post(
        "/experiments/compare",
        json={"configurations": [{"id": "x"}, {"id": "x"}], "samples": STREAM},
    )
    assert resp.status_code == 422


# ── Scheduler ──────────────────────────────────────────────────────────────

async def test_catalog(client):
    data = (await client.get("/scheduler/catalog")).json()
    assert len(data) == 10


async def test_schedule_unknown_experiment(client):
    resp = await client.post("/scheduler/schedule", json={"experiment_id": "exp-999"})
    assert resp.status_code == 404


async def test_schedule_unknown_priority(client):
    resp = await client.post(
        "/scheduler/schedule",
        json={"experiment_id": "exp-001-database-impact", "priority": "urgent"},
    )
    assert resp.status_code == 422


async def test_next_on_empty_queue(client):
    resp = await client.post("/scheduler/next")
    assert resp.status_code == 204


async def test_schedule_run_and_report(client):
    for exp_id, priority in (
        ("exp-001-database-impact", "normal"),
        ("exp-003-context-window-optimization", "high"),
    ):
        resp = await client.post(
            "/scheduler/schedule", json={"experiment_id": exp_id, "priority": priority}
        )
        assert resp.status_code == 202

    resp = await client.post("/scheduler/next")
    assert resp.status_code == 200
    assert resp.json()["experiment_id"] == "exp-003-context-window-optimization"

    status = (await client.get("/scheduler")).json()
    assert [q["id"] for q in status["queued"]] == ["exp-001-database-impact"]
    assert [c["id"] for c in status["completed"]] == ["exp-003-context-window-optimization"]

    report = (await client.get("/scheduler/exp-003-context-window-optimization/report")).json()
    assert report["report"].startswith("# Experiment Report: Optimal Context Window Discovery")

    missing = await client.get("/scheduler/exp-001-database-impact/report")
    assert missing.status_code == 404


# ── Monitoring ─────────────────────────────────────────────────────────────

async def test_dashboard(client):
    await client.post("/agents/a/measure", json={"sample": "x"})
    await client.post(
        "/agents/b/measure", json={"sample": "y", "context": {"usage": 0.95}}
    )
    await client.post(
        "/experiments/run", json={"configuration": {"id": "cfg"}, "samples": STREAM}
    )
    data = (await client.get("/dashboard")).json()
    assert [a["agent_id"] for a in data["agents"]] == ["a", "b"]
    assert data["agents"][1]["status"] == "critical"
    assert data["total_measurements"] == 2
    assert data["active_alerts"] == 1
    assert data["experiments"] == 1


async def test_alerts_limit_validated(client):
    resp = await client.get("/alerts", params={"limit": 0})
    assert resp.status_code == 422


# ── Usage and training ─────────────────────────────────────────────────────

async def test_usage_ranking(client):
    for _ in range(3):
        await client.post("/agents/busy/measure", json={"sample": "the api"})
    await client.post("/agents/quiet/measure", json={"sample": "the api"})
    data = (await client.get("/agents/usage")).json()
    assert [(u["agent_id"], u["usage_count"]) for u in data] == [("busy", 3), ("quiet", 1)]
    assert data[0]["trend"] == "stable"


async def test_training_session_round_trip(client):
    await client.post("/agents/pm-agent/measure", json={"sample": "the api"})
    resp = await client.post("/agents/pm-agent/training", json={"protocol": "glossary-drill"})
    assert resp.status_code == 201
    session = resp.json()
    assert session["agent_id"] == "pm-agent"

    resp = await client.post(f"/agents/training/{session['session_id']}/end")
    assert resp.status_code == 200
    report = resp.json()
    assert report["effectiveness"] == 0.0
    assert "Try alternative training protocols" in report["recommendations"]


async def test_training_unknown_session(client):
    resp = await client.post("/agents/training/nope/end")
    assert resp.status_code == 404


async def test_training_requires_protocol(client):
    resp = await client.post("/agents/pm-agent/training", json={"protocol": ""})
    assert resp.status_code == 422
