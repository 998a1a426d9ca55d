"""Tests for the plain-text report renderers."""

from cognicap.experiments.catalog import get_design
from cognicap.experiments.models import ComparisonDeltas, ExperimentResult, RankedConfiguration
from cognicap.experiments.scheduler import CompletedExperiment, ExperimentOutcome
from cognicap.load.detector import LoadSnapshot, OverloadResult, Severity
from cognicap.reporting.text import (
    render_comparison,
    render_experiment_report,
    render_load_report,
)


def _snapshot(samples=5, overload=None) -> LoadSnapshot:
    return LoadSnapshot(
        agent_id="pm-agent",
        load_index=0.355,
        samples=samples,
        context_usage=0.5,
        latency_ms=1000.0,
        error_rate=0.1,
        consistency=0.8,
        overload=overload or OverloadResult(),
    )


def _ranked(cid, score) -> RankedConfiguration:
    result = ExperimentResult(
        configuration_id=cid,
        semantic_consistency=0.9,
        cognitive_load=0.3,
        processing_latency_ms=150.0,
        error_rate=0.01,
        drift_velocity=0.02,
        samples=10,
        duration_ms=1500.0,
    )
    return RankedConfiguration(cid, score, result)


class TestLoadReport:
    def test_no_metrics(self):
        assert render_load_report(_snapshot(samples=0)) == "No metrics available for agent pm-agent"

    def test_normal_report(self):
        report = render_load_report(_snapshot())
        assert report.startswith("Cognitive Load Report for pm-agent")
        assert "Overall Cognitive Load Index: 35.5%" in report
        assert "Status: NONE" in report
        assert "Operating within normal parameters" in report
        assert "OVERLOAD DETECTED" not in report

    def test_overload_report(self):
        overload = OverloadResult(
            is_overloaded=True,
            severity=Severity.CRITICAL,
            factors=["Critical error rate"],
            recommendations=["Review agent training and protocols"],
        )
        report = render_load_report(_snapshot(overload=overload))
        assert "Status: CRITICAL" in report
        assert "OVERLOAD DETECTED" in report
        assert "  - Critical error rate" in report
        assert "  * Review agent training and protocols" in report


class TestComparison:
    def test_ranking_and_findings(self):
        text = render_comparison(
            [_ranked("a", 90.0), _ranked("b", 80.0)],
            ComparisonDeltas(consistency_pct=12.5, load_pct=20.0, latency_pct=0.0),
        )
        assert text.startswith("Comparative Analysis of Agent Configurations")
        assert text.index("1. Configuration a") < text.index("2. Configuration b")
        assert "Score: 90.00" in text
        assert "* Winner shows 12.5% better semantic consistency" in text
        assert "* Cognitive load reduced by 20.0%" in text

    def test_single_configuration_has_no_findings(self):
        text = render_comparison([_ranked("solo", 75.0)])
        assert "Key Findings:" not in text


def test_experiment_report():
    design = get_design("exp-001-database-impact")
    outcome = ExperimentOutcome(
        experiment_id=design.id,
        hypothesis_confirmed=False,
        key_findings=("finding one",),
        recommendations=("do this",),
        confidence_level=0.9,
    )
    report = render_experiment_report(CompletedExperiment(design, outcome, completed_at=0.0))
    assert report.startswith("# Experiment Report: Database Persistence Impact Study")
    assert "- Hypothesis REJECTED" in report
    assert "- Confidence Level: 90.0%" in report
    assert "- finding one" in report
    assert "## Next Steps" in report
