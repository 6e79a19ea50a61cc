"""Export simulation results as CSV, XLSX or JSON.

Only the aggregated fields (mean trajectory and metrics) are exported.
"""
from __future__ import annotations

import json
from io import BytesIO

import pandas as pd

from ideasim.models.results import SimulationResults

MONTHLY_COLUMNS = ["Scenario", "Month", "Revenue", "Costs", "Profit", "Cumulative_Profit"]

EXPORT_FORMATS = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "json": "application/json",
}


def results_to_frame(results: SimulationResults) -> pd.DataFrame:
    """One row per scenario and month of the mean trajectory."""
    rows = []
    for scenario, res in results.items():
        for r in res.results:
            rows.append([
                scenario, r.month, round(r.revenue, 2), round(r.costs, 2),
                round(r.profit, 2), round(r.cumulative_profit, 2),
            ])
    return pd.DataFrame(rows, columns=MONTHLY_COLUMNS)


def summary_frame(results: SimulationResults) -> pd.DataFrame:
    """One row per scenario with statistics, risk and final metrics."""
    rows = []
    for scenario, res in results.items():
        row = {"Scenario": scenario}
        row.update({f"statistics.{k}": v for k, v in res.statistics.model_dump(by_alias=True).items()})
        row.update({f"riskMetrics.{k}": v for k, v in res.risk_metrics.model_dump(by_alias=True).items()})
        row.update({f"finalMetrics.{k}": v for k, v in res.final_metrics.model_dump(by_alias=True).items()})
        rows.append(row)
    return pd.DataFrame(rows)


def export_csv(results: SimulationResults) -> bytes:
    return results_to_frame(results).to_csv(index=False).encode("utf-8")


def export_xlsx(results: SimulationResults) -> bytes:
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        results_to_frame(results).to_excel(writer, sheet_name="Monthly", index=False)
        summary_frame(results).to_excel(writer, sheet_name="Summary", index=False)
    return buf.getvalue()


def export_json(results: SimulationResults) -> bytes:
    return json.dumps(results.model_dump(by_alias=True), indent=2).encode("utf-8")


def export_results(results: SimulationResults, fmt: str) -> tuple[bytes, str]:
    """Return (payload, media type) for a format name.

    Raises ValueError for unsupported formats.
    """
    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format '{fmt}'. Use one of: {', '.join(EXPORT_FORMATS)}"
        )
    exporters = {"csv": export_csv, "xlsx": export_xlsx, "json": export_json}
    return exporters[fmt](results), EXPORT_FORMATS[fmt]
