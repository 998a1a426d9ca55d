"""
Measurement Journal — append-only SQLite store for what the API observes:
per-agent measurements, overload alerts and experiment results.

The measurement core never touches this; the HTTP layer writes to it after
each core call.
"""

from __future__ import annotations

import json
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class MeasurementEntry:
    id: Optional[int]
    agent_id: str
    timestamp: float
    semantic_consistency: float
    cognitive_load: float
    context_usage: float
    processing_latency_ms: float
    error_rate: float
    drift: float


@dataclass
class AlertEntry:
    id: Optional[int]
    agent_id: str
    severity: str
    message: str
    timestamp: float


@dataclass
class ExperimentEntry:
    id: str
    configuration: Dict[str, Any]
    results: Dict[str, Any]
    created_at: float


_MEASUREMENT_COLS = (
    "id, agent_id, timestamp, semantic_consistency, cognitive_load, "
    "context_usage, processing_latency_ms, error_rate, drift"
)


class MeasurementJournal:
    """Thread-safe SQLite-backed journal (one connection per operation)."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    # ------------------------------------------------------------------
    # Measurements
    # ------------------------------------------------------------------

    def append_measurement(self, entry: MeasurementEntry) -> int:
        with self._conn() as conn:
            cur = conn.execute(
                """
                INSERT INTO measurements
                    (agent_id, timestamp, semantic_consistency, cognitive_load,
                     context_usage, processing_latency_ms, error_rate, drift)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.agent_id,
                    entry.timestamp,
                    entry.semantic_consistency,
                    entry.cognitive_load,
                    entry.context_usage,
                    entry.processing_latency_ms,
                    entry.error_rate,
                    entry.drift,
                ),
            )
            return cur.lastrowid  # type: ignore[return-value]

    def measurements(self, agent_id: str, limit: int = 100) -> List[MeasurementEntry]:
        """Most recent *limit* measurements for *agent_id*, oldest first."""
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_MEASUREMENT_COLS} FROM measurements "
                f"WHERE agent_id = ? ORDER BY timestamp DESC, id DESC LIMIT ?",
                (agent_id, limit),
            ).fetchall()
        return [MeasurementEntry(*row) for row in reversed(rows)]

    def latest_measurement(self, agent_id: str) -> Optional[MeasurementEntry]:
        rows = self.measurements(agent_id, limit=1)
        return rows[0] if rows else None

    def agent_ids(self) -> List[str]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT DISTINCT agent_id FROM measurements ORDER BY agent_id"
            ).fetchall()
        return [r[0] for r in rows]

    def count_measurements(self) -> int:
        return self._count("SELECT COUNT(*) FROM measurements")

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def append_alert(self, entry: AlertEntry) -> int:
        with self._conn() as conn:
            cur = conn.execute(
                "INSERT INTO alerts (agent_id, severity, message, timestamp) VALUES (?, ?, ?, ?)",
                (entry.agent_id, entry.severity, entry.message, entry.timestamp),
            )
            return cur.lastrowid  # type: ignore[return-value]

    def alerts(self, limit: int = 50, since: Optional[float] = None) -> List[AlertEntry]:
        """Newest first."""
        where = "WHERE timestamp >= ?" if since is not None else ""
        params: list = [since] if since is not None else []
        params.append(limit)
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT id, agent_id, severity, message, timestamp FROM alerts "
                f"{where} ORDER BY timestamp DESC, id DESC LIMIT ?",
                params,
            ).fetchall()
        return [AlertEntry(*row) for row in rows]

    def count_alerts(self, since: Optional[float] = None) -> int:
        if since is None:
            return self._count("SELECT COUNT(*) FROM alerts")
        return self._count("SELECT COUNT(*) FROM alerts WHERE timestamp >= ?", (since,))

    # ------------------------------------------------------------------
    # Experiments
    # ------------------------------------------------------------------

    def save_experiment(
        self,
        experiment_id: str,
        configuration: Dict[str, Any],
        results: Dict[str, Any],
        created_at: Optional[float] = None,
    ) -> None:
        with self._conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO experiments (id, configuration, results, created_at) "
                "VALUES (?, ?, ?, ?)",
                (
                    experiment_id,
                    json.dumps(configuration),
                    json.dumps(results),
                    created_at if created_at is not None else time.time(),
                ),
            )

    def get_experiment(self, experiment_id: str) -> Optional[ExperimentEntry]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT id, configuration, results, created_at FROM experiments WHERE id = ?",
                (experiment_id,),
            ).fetchone()
        if row is None:
            return None
        return ExperimentEntry(
            id=row[0],
            configuration=json.loads(row[1]),
            results=json.loads(row[2]),
            created_at=row[3],
        )

    def count_experiments(self) -> int:
        return self._count("SELECT COUNT(*) FROM experiments")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _count(self, sql: str, params: tuple = ()) -> int:
        with self._conn() as conn:
            return conn.execute(sql, params).fetchone()[0]

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS measurements (
                    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
                    agent_id              TEXT    NOT NULL,
                    timestamp             REAL    NOT NULL,
                    semantic_consistency  REAL    NOT NULL DEFAULT 1.0,
                    cognitive_load        REAL    NOT NULL DEFAULT 0.0,
                    context_usage         REAL    NOT NULL DEFAULT 0.0,
                    processing_latency_ms REAL    NOT NULL DEFAULT 0.0,
                    error_rate            REAL    NOT NULL DEFAULT 0.0,
                    drift                 REAL    NOT NULL DEFAULT 0.0
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_measurements_agent "
                "ON measurements(agent_id, timestamp)"
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS alerts (
                    id        INTEGER PRIMARY KEY AUTOINCREMENT,
                    agent_id  TEXT NOT NULL,
                    severity  TEXT NOT NULL,
                    message   TEXT NOT NULL,
                    timestamp REAL NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS experiments (
                    id            TEXT PRIMARY KEY,
                    configuration TEXT NOT NULL,
                    results       TEXT NOT NULL,
                    created_at    REAL NOT NULL
                )
                """
            )

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()
