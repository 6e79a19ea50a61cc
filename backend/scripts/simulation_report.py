#!/usr/bin/env python3
"""Run a scenario simulation from a JSON file and write a report.

Usage:
    python scripts/simulation_report.py idea.json                  # defaults
    python scripts/simulation_report.py idea.json --iterations 5000 --months 24
    python scripts/simulation_report.py idea.json --format xlsx --out my_idea.xlsx

The input file holds either a bare IdeaFinancialData object or a full
request body ``{"idea_data": {...}, "simulation_params": {...}}``.
Output lands in ``reports/`` at the project root.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
BACKEND_DIR = Path(__file__).resolve().parent.parent
PROJECT_DIR = BACKEND_DIR.parent
REPORTS_DIR = PROJECT_DIR / "reports"

sys.path.insert(0, str(BACKEND_DIR))

from ideasim.errors import SimulationError  # noqa: E402
from ideasim.models.simulation import SimulationRequest  # noqa: E402
from ideasim.services.export_service import export_results  # noqa: E402
from ideasim.services.simulation_service import run_request  # noqa: E402
from ideasim.simulation.defaults import default_simulation_params  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def load_request(path: Path, args: argparse.Namespace) -> SimulationRequest:
    data = json.loads(path.read_text())
    if "idea_data" not in data and "ideaData" not in data:
        data = {"idea_data": data}
    request = SimulationRequest.model_validate(data)

    params = request.simulation_params or default_simulation_params(with_variables=True)
    overrides = {}
    if args.iterations:
        overrides["iterations"] = args.iterations
    if args.months:
        overrides["time_horizon"] = args.months
    if args.seed is not None:
        overrides["seed"] = args.seed
    if overrides:
        params = params.model_copy(update=overrides)
    return request.model_copy(update={"simulation_params": params})


def print_summary(results) -> None:
    header = f"{'Scenario':<12} {'Mean':>14} {'P5':>14} {'P95':>14} {'P(loss)':>8} {'BE month':>9} {'ROI':>8}"
    print(header)
    print("-" * len(header))
    for name, res in results.items():
        s, r, f = res.statistics, res.risk_metrics, res.final_metrics
        be = str(r.break_even_month) if r.break_even_month >= 0 else "never"
        print(
            f"{name:<12} {s.mean:>14,.0f} {s.percentile5:>14,.0f} {s.percentile95:>14,.0f} "
            f"{r.probability_of_loss:>8.1%} {be:>9} {f.roi:>8.1%}"
        )


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("input", help="Path to idea / request JSON")
    parser.add_argument("--iterations", type=int, default=None)
    parser.add_argument("--months", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--format", choices=["csv", "xlsx", "json"], default="csv")
    parser.add_argument("--out", default=None, help="Output file name (inside reports/)")
    args = parser.parse_args()

    request = load_request(Path(args.input), args)
    try:
        results = run_request(request)
    except SimulationError as e:
        logger.error("Simulation failed: %s", e)
        return 1

    print_summary(results)

    payload, _ = export_results(results, args.format)
    REPORTS_DIR.mkdir(exist_ok=True)
    out = REPORTS_DIR / (args.out or f"simulation_{Path(args.input).stem}.{args.format}")
    out.write_bytes(payload)
    print(f"  wrote {out.relative_to(PROJECT_DIR)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
