"""
Central configuration for the CogniCap engine.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 3025
    log_level: str = "info"

    # Measurement
    history_capacity: int = 1000             # metric records kept per agent
    drift_log_capacity: int = 10_000         # drift observations kept across agents

    # Experiments
    experiment_duration_ms: int = 60_000
    scheduler_interval_s: int = 60           # background queue drain period
    rng_seed: int = -1                       # < 0 → fresh entropy

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    journal_db: str = "cognicap.db"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def journal_path(self) -> Path:
        return self.data_dir / self.journal_db

    @property
    def seed(self):
        return self.rng_seed if self.rng_seed >= 0 else None

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (COGNICAP_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"COGNICAP_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, type(getattr(cfg, k))(os.environ[env_key]))
        cfg.data_dir = Path(cfg.data_dir)
        return cfg


# Module-level singleton
config = Config.load()
