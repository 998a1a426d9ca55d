"""
Command-line launcher.

Usage:
    python -m cognicap.cli serve                 # start the API
    python -m cognicap.cli catalog               # list catalog experiments
    python -m cognicap.cli compare runs.json     # rank configurations offline
    python -m cognicap.cli compare runs.json --seed 7 --duration-ms 30000

The compare input is a JSON object with "configurations" (list of
configuration objects) and "samples" (list of strings). Offline comparisons
run on a virtual clock, so they finish immediately.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import config
from .errors import CognicapError
from .experiments.catalog import EXPERIMENT_CATALOG
from .experiments.clock import VirtualClock
from .experiments.engine import ExperimentEngine
from .experiments.models import AgentConfiguration


def _cmd_serve(args: argparse.Namespace) -> int:
    from .main import main as serve
    serve()
    return 0


def _cmd_catalog(args: argparse.Namespace) -> int:
    for design in EXPERIMENT_CATALOG:
        print(f"{design.id:<42} {design.required_samples:>5} samples  {design.name}")
    return 0


def _cmd_compare(args: argparse.Namespace) -> int:
    try:
        payload = json.loads(Path(args.file).read_text())
    except (OSError, ValueError) as e:
        print(f"Cannot read {args.file}: {e}", file=sys.stderr)
        return 2
    if not isinstance(payload, dict):
        print(f"{args.file}: expected a JSON object with configurations and samples", file=sys.stderr)
        return 2

    try:
        configs = [AgentConfiguration(**c) for c in payload.get("configurations", [])]
    except (TypeError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    engine = ExperimentEngine(clock=VirtualClock(), rng=np.random.default_rng(args.seed))
    try:
        comparison = engine.compare_configurations(
            configs, payload.get("samples", []), duration_ms=args.duration_ms
        )
    except CognicapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(comparison.analysis)
    print(f"Winner: {comparison.winner}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cognicap", description="CogniCap measurement engine")
    parser.add_argument("--log-level", default="warning", help="Python logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Start the HTTP API").set_defaults(func=_cmd_serve)
    sub.add_parser("catalog", help="List catalog experiments").set_defaults(func=_cmd_catalog)

    compare = sub.add_parser("compare", help="Compare configurations from a JSON file")
    compare.add_argument("file")
    compare.add_argument("--seed", type=int, default=config.seed)
    compare.add_argument("--duration-ms", type=float, default=config.experiment_duration_ms)
    compare.set_defaults(func=_cmd_compare)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
