import pytest

from ideasim.errors import InvalidConfigurationError
from ideasim.models.simulation import DistributionType, ImpactTarget
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.defaults import (
    default_simulation_params,
    default_variables,
    list_revenue_models,
    list_variable_types,
    revenue_model_info,
    scenario_info,
    variable_type_info,
)
from ideasim.simulation.distributions import resolve_variable


def test_default_variables():
    variables = default_variables()
    assert [v.name for v in variables] == [
        "market_demand",
        "customer_acquisition_cost",
        "competition_impact",
        "operational_efficiency",
        "market_growth_rate",
    ]
    assert variables[0].type == DistributionType.normal
    assert variables[2].impact == ImpactTarget.market_share
    assert variables[4].impact == ImpactTarget.growth_rate


def test_default_variables_all_resolve():
    for v in default_variables():
        resolve_variable(v)


def test_default_params():
    params = default_simulation_params()
    assert params.time_horizon == 36
    assert params.iterations == 1000
    assert params.confidence_level == 0.95
    assert params.variables == []
    assert len(default_simulation_params(with_variables=True).variables) == 5


def test_revenue_models_listed():
    names = [m.name for m in list_revenue_models()]
    assert names == ["Subscription", "Freemium", "Commission", "Advertising", "One-time"]
    for m in list_revenue_models():
        assert m.base_metrics
        assert m.growth_factors


def test_unknown_revenue_model_info_falls_back():
    assert revenue_model_info("Barter").name == "Subscription"
    assert revenue_model_info("Freemium").name == "Freemium"


def test_scenario_info():
    info = scenario_info("pessimistic", EngineConfig())
    assert info["name"] == "pessimistic"
    assert info["growth_multiplier"] < 1.0
    assert info["cost_multiplier"] > 1.0


def test_scenario_info_unknown():
    with pytest.raises(InvalidConfigurationError):
        scenario_info("moonshot", EngineConfig())


def test_variable_types():
    types = list_variable_types()
    assert set(types) == {"normal", "uniform", "triangular", "lognormal"}
    assert variable_type_info(DistributionType.triangular)["parameters"] == ["min", "max", "mode"]
    assert variable_type_info("normal")["parameters"] == ["mean", "stdDev"]
