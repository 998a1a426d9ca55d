"""
Overload Thresholds — process-wide cutoffs for overload detection.

Read-only after import; the detector takes an instance so tests can pass a
custom table, but nothing mutates the default.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Band:
    safe: float          # below this nothing is worth mentioning
    warning: float
    critical: float


@dataclass(frozen=True)
class LatencyBand:
    baseline_ms: float = 1000.0
    warning_multiplier: float = 1.5
    critical_multiplier: float = 2.0


@dataclass(frozen=True)
class OverloadThresholds:
    context_window: Band = field(default_factory=lambda: Band(0.60, 0.75, 0.90))
    latency: LatencyBand = field(default_factory=LatencyBand)
    error_rate: Band = field(default_factory=lambda: Band(0.02, 0.05, 0.10))
    semantic_drift: Band = field(default_factory=lambda: Band(0.15, 0.25, 0.40))


DEFAULT_THRESHOLDS = OverloadThresholds()
