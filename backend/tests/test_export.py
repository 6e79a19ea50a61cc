"""Tests for the CSV / XLSX / JSON result exporters."""
import json
from io import BytesIO

import pytest
from openpyxl import load_workbook

from ideasim.models.idea import IdeaFinancialData
from ideasim.models.simulation import SimulationParams
from ideasim.services.export_service import (
    MONTHLY_COLUMNS,
    export_results,
    results_to_frame,
    summary_frame,
)
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.engine import run_simulation

_MONTHS = 6


@pytest.fixture(scope="module")
def results():
    idea = IdeaFinancialData(
        title="Export test",
        target_market_size=50_000,
        initial_investment=5_000.0,
        monthly_costs=300.0,
        pricing=15.0,
    )
    params = SimulationParams(time_horizon=_MONTHS, iterations=10)
    return run_simulation(idea, params, config=EngineConfig(max_workers=1))


def test_monthly_frame(results):
    df = results_to_frame(results)
    assert list(df.columns) == MONTHLY_COLUMNS
    assert len(df) == 3 * _MONTHS
    assert set(df["Scenario"]) == {"optimistic", "realistic", "pessimistic"}


def test_summary_frame(results):
    df = summary_frame(results)
    assert len(df) == 3
    assert "riskMetrics.probabilityOfLoss" in df.columns
    assert "finalMetrics.roi" in df.columns


def test_csv_export(results):
    payload, media_type = export_results(results, "csv")
    assert media_type == "text/csv"
    lines = payload.decode("utf-8").strip().splitlines()
    assert lines[0] == ",".join(MONTHLY_COLUMNS)
    assert len(lines) == 1 + 3 * _MONTHS


def test_xlsx_export(results):
    payload, media_type = export_results(results, "XLSX")
    assert media_type.endswith("spreadsheetml.sheet")
    wb = load_workbook(BytesIO(payload))
    assert wb.sheetnames == ["Monthly", "Summary"]
    monthly = wb["Monthly"]
    assert [c.value for c in monthly[1]] == MONTHLY_COLUMNS
    assert monthly.max_row == 1 + 3 * _MONTHS
    assert wb["Summary"].max_row == 4


def test_json_export(results):
    payload, media_type = export_results(results, "json")
    assert media_type == "application/json"
    data = json.loads(payload)
    assert set(data) == {"optimistic", "realistic", "pessimistic"}
    assert "breakEvenMonth" in data["realistic"]["riskMetrics"]
    assert len(data["realistic"]["results"]) == _MONTHS


def test_unsupported_format(results):
    with pytest.raises(ValueError):
        export_results(results, "pdf")
