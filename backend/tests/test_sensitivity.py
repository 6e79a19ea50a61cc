"""Tests for the sensitivity (tornado) analysis."""
import threading

import pytest

from ideasim.errors import InvalidConfigurationError, SimulationCancelledError
from ideasim.models.idea import IdeaFinancialData
from ideasim.models.simulation import SimulationParams, SimulationVariable
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.sensitivity import central_value, run_sensitivity, shift_variable

_CONFIG = EngineConfig(max_workers=1)


def _make_idea(**overrides) -> IdeaFinancialData:
    defaults = dict(
        title="Sensitivity test",
        target_market_size=100_000,
        initial_investment=10_000.0,
        monthly_costs=500.0,
        pricing=20.0,
    )
    defaults.update(overrides)
    return IdeaFinancialData(**defaults)


def _make_params(variables=None) -> SimulationParams:
    if variables is None:
        variables = [
            {"name": "efficiency", "type": "normal", "impact": "costs",
             "parameters": {"mean": 1.0, "stdDev": 0.0}},
            {"name": "demand", "type": "normal", "impact": "revenue",
             "parameters": {"mean": 1.0, "stdDev": 0.01}},
        ]
    return SimulationParams.model_validate({
        "timeHorizon": 12, "iterations": 20, "confidenceLevel": 0.95, "seed": 42,
        "variables": variables,
    })


def _variable(**data) -> SimulationVariable:
    return SimulationVariable.model_validate(data)


# --- Central value & shifting ---


def test_central_value_per_distribution():
    assert central_value(_variable(name="a", type="normal", impact="revenue",
                                   parameters={"mean": 1.2, "stdDev": 0.1})) == 1.2
    assert central_value(_variable(name="b", type="triangular", impact="costs",
                                   parameters={"min": 0.8, "mode": 1.0, "max": 1.5})) == 1.0
    assert central_value(_variable(name="c", type="uniform", impact="market_share",
                                   parameters={"min": 0.6, "max": 1.0})) == pytest.approx(0.8)


def test_central_value_zero_falls_back_to_one():
    v = _variable(name="churn_shock", type="normal", impact="churn_rate",
                  parameters={"mean": 0.0, "stdDev": 0.01})
    assert central_value(v) == 1.0


def test_shift_variable_moves_whole_distribution():
    v = _variable(name="cac", type="triangular", impact="costs",
                  parameters={"min": 0.8, "mode": 1.0, "max": 1.5})
    shifted = shift_variable(v, 0.1)
    assert shifted.parameters.min == pytest.approx(0.9)
    assert shifted.parameters.mode == pytest.approx(1.1)
    assert shifted.parameters.max == pytest.approx(1.6)
    assert v.parameters.min == 0.8


def test_shift_normal_keeps_std_dev():
    v = _variable(name="demand", type="normal", impact="revenue",
                  parameters={"mean": 1.0, "stdDev": 0.2})
    shifted = shift_variable(v, -0.15)
    assert shifted.parameters.mean == pytest.approx(0.85)
    assert shifted.parameters.std_dev == 0.2


# --- Analysis ---


def test_variables_ranked_by_impact():
    report = run_sensitivity(_make_idea(), _make_params(), config=_CONFIG)
    assert report.scenario == "realistic"
    assert [row.variable for row in report.variables] == ["demand", "efficiency"]
    impacts = [row.impact for row in report.variables]
    assert impacts == sorted(impacts, reverse=True)


def test_revenue_shift_moves_metric_in_expected_direction():
    report = run_sensitivity(_make_idea(), _make_params(), config=_CONFIG)
    demand = next(r for r in report.variables if r.variable == "demand")
    efficiency = next(r for r in report.variables if r.variable == "efficiency")
    assert demand.low_metric < report.baseline_metric < demand.high_metric
    assert efficiency.high_metric < report.baseline_metric < efficiency.low_metric
    assert demand.percent_change > 0
    assert efficiency.percent_change < 0


def test_row_fields():
    report = run_sensitivity(_make_idea(), _make_params(), variation_pct=10.0, config=_CONFIG)
    row = next(r for r in report.variables if r.variable == "efficiency")
    assert row.impact_target == "costs"
    assert row.base_value == 1.0
    assert row.low_value == pytest.approx(0.9)
    assert row.high_value == pytest.approx(1.1)
    assert row.level in ("low", "medium", "high")
    assert row.sensitivity == pytest.approx(abs(row.percent_change / 10.0))


def test_no_variables_gives_empty_report():
    report = run_sensitivity(_make_idea(), _make_params(variables=[]), config=_CONFIG)
    assert report.variables == []
    assert report.variation_pct == 15.0


@pytest.mark.parametrize("pct", [0.0, -5.0, 150.0])
def test_invalid_variation_rejected(pct):
    with pytest.raises(InvalidConfigurationError):
        run_sensitivity(_make_idea(), _make_params(), variation_pct=pct, config=_CONFIG)


def test_unknown_scenario_rejected():
    with pytest.raises(InvalidConfigurationError):
        run_sensitivity(_make_idea(), _make_params(), scenario="moonshot", config=_CONFIG)


def test_cancelled_analysis_raises():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(SimulationCancelledError):
        run_sensitivity(_make_idea(), _make_params(), config=_CONFIG, cancel_event=cancel)


class _CountingSystemRandom:
    draws = 0

    def getrandbits(self, k):
        type(self).draws += 1
        return 1000 + type(self).draws


def test_unseeded_analysis_draws_one_seed_for_every_rerun(monkeypatch):
    monkeypatch.setattr(_CountingSystemRandom, "draws", 0)
    monkeypatch.setattr("random.SystemRandom", _CountingSystemRandom)
    params = _make_params().model_copy(update={"seed": None})

    report = run_sensitivity(_make_idea(), params, config=_CONFIG)

    # baseline plus a low and a high rerun per variable, all on seed 1001
    assert _CountingSystemRandom.draws == 1
    efficiency = next(r for r in report.variables if r.variable == "efficiency")
    assert efficiency.high_metric < report.baseline_metric < efficiency.low_metric
    seeded = run_sensitivity(_make_idea(), params.model_copy(update={"seed": 1001}), config=_CONFIG)
    assert report == seeded
