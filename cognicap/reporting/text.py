"""
Text Reports — pure rendering of already-computed results.

Nothing here measures anything; each function takes the typed output of a
core operation and returns a string.
"""

from __future__ import annotations

from typing import List, Optional

from ..experiments.models import ComparisonDeltas, RankedConfiguration
from ..experiments.scheduler import CompletedExperiment
from ..load.detector import LoadSnapshot


def _bullets(items, marker: str = "-", indent: str = "  ") -> str:
    return "\n".join(f"{indent}{marker} {item}" for item in items)


def render_load_report(snapshot: LoadSnapshot) -> str:
    if snapshot.samples == 0:
        return f"No metrics available for agent {snapshot.agent_id}"

    title = f"Cognitive Load Report for {snapshot.agent_id}"
    overload = snapshot.overload
    lines = [
        title,
        "=" * len(title),
        "",
        f"Overall Cognitive Load Index: {snapshot.load_index * 100:.1f}%",
        f"Status: {overload.severity.value.upper()}",
        "",
        f"Current Metrics ({snapshot.samples}-sample average):",
        f"- Context Window Usage: {snapshot.context_usage * 100:.1f}%",
        f"- Processing Latency: {snapshot.latency_ms:.0f}ms",
        f"- Error Rate: {snapshot.error_rate * 100:.2f}%",
        f"- Semantic Consistency: {snapshot.consistency * 100:.1f}%",
        "",
    ]
    if overload.is_overloaded:
        lines += [
            "OVERLOAD DETECTED",
            "Factors:",
            _bullets(overload.factors),
            "",
            "Recommendations:",
            _bullets(overload.recommendations, marker="*"),
        ]
    else:
        lines.append("Operating within normal parameters")
    return "\n".join(lines)


def render_comparison(
    ranking: List[RankedConfiguration],
    deltas: Optional[ComparisonDeltas] = None,
) -> str:
    title = "Comparative Analysis of Agent Configurations"
    out = [title, "=" * len(title), ""]

    for position, ranked in enumerate(ranking, start=1):
        r = ranked.result
        out += [
            f"{position}. Configuration {ranked.configuration_id}",
            f"   Score: {ranked.score:.2f}",
            f"   Semantic Consistency: {r.semantic_consistency * 100:.1f}%",
            f"   Cognitive Load: {r.cognitive_load * 100:.1f}%",
            f"   Processing Latency: {r.processing_latency_ms:.0f}ms",
            f"   Error Rate: {r.error_rate * 100:.2f}%",
            f"   Drift Velocity: {r.drift_velocity:.4f}",
            "",
        ]

    if deltas is not None:
        out += [
            "Key Findings:",
            "-------------",
            f"* Winner shows {deltas.consistency_pct:.1f}% better semantic consistency",
            f"* Cognitive load reduced by {deltas.load_pct:.1f}%",
            f"* Processing {deltas.latency_pct:.1f}% faster",
        ]
    return "\n".join(out) + "\n"


def render_experiment_report(completed: CompletedExperiment) -> str:
    design, outcome = completed.design, completed.outcome
    verdict = "CONFIRMED" if outcome.hypothesis_confirmed else "REJECTED"
    return "\n".join([
        f"# Experiment Report: {design.name}",
        "",
        "## Hypothesis",
        design.hypothesis,
        "",
        "## Methodology",
        design.methodology,
        "",
        "## Results",
        f"- Hypothesis {verdict}",
        f"- Confidence Level: {outcome.confidence_level * 100:.1f}%",
        "",
        "## Key Findings",
        _bullets(outcome.key_findings, indent=""),
        "",
        "## Recommendations",
        _bullets(outcome.recommendations, indent=""),
        "",
        "## Next Steps",
        "- Validate findings with follow-up experiment",
        "- Implement recommended optimizations",
        "- Monitor long-term impact",
    ])
