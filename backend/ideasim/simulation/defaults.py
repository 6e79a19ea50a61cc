"""Defaults and catalogs offered to the scenario-builder forms."""
from __future__ import annotations

from ideasim.models.idea import RevenueModelInfo
from ideasim.models.simulation import (
    DistributionParameters,
    DistributionType,
    ImpactTarget,
    SimulationParams,
    SimulationVariable,
)
from ideasim.simulation.config import DEFAULT_REVENUE_MODEL, EngineConfig

_REVENUE_MODELS: dict[str, RevenueModelInfo] = {
    "Subscription": RevenueModelInfo(
        name="Subscription",
        label="Subscription (SaaS)",
        description="Recurring monthly revenue from the subscriber base",
        base_metrics=["Customer base", "Monthly price", "Churn rate"],
        growth_factors=["Customer acquisition", "Retention", "Upselling"],
    ),
    "Freemium": RevenueModelInfo(
        name="Freemium",
        label="Freemium",
        description="Free tier with conversion to premium plans",
        base_metrics=["Total users", "Conversion rate", "Premium price"],
        growth_factors=["User growth", "Conversion improvements", "Value proposition"],
    ),
    "Commission": RevenueModelInfo(
        name="Commission",
        label="Commission (Marketplace)",
        description="Revenue from a commission on transactions",
        base_metrics=["Transaction volume", "Commission rate", "Average ticket"],
        growth_factors=["Number of sellers", "Volume per seller", "Frequency"],
    ),
    "Advertising": RevenueModelInfo(
        name="Advertising",
        label="Advertising",
        description="Revenue from ads and sponsorships",
        base_metrics=["Active users", "CPM/CPC", "Engagement"],
        growth_factors=["Audience growth", "Better targeting", "Premium inventory"],
    ),
    "One-time": RevenueModelInfo(
        name="One-time",
        label="One-time payment",
        description="Direct sale of products or services",
        base_metrics=["Units sold", "Unit price", "Margin"],
        growth_factors=["Sales volume", "Pricing", "New products"],
    ),
}

_VARIABLE_TYPES: dict[str, dict] = {
    DistributionType.normal.value: {
        "name": "Normal",
        "description": "Bell curve around the mean",
        "parameters": ["mean", "stdDev"],
    },
    DistributionType.uniform.value: {
        "name": "Uniform",
        "description": "Every value between min and max equally likely",
        "parameters": ["min", "max"],
    },
    DistributionType.triangular.value: {
        "name": "Triangular",
        "description": "Most likely value at the mode, bounded by min and max",
        "parameters": ["min", "max", "mode"],
    },
    DistributionType.lognormal.value: {
        "name": "Log-normal",
        "description": "Always-positive values with a long right tail",
        "parameters": ["mean", "stdDev"],
    },
}


def default_variables() -> list[SimulationVariable]:
    """The uncertain variables every new simulation starts with."""
    def var(name, dist, impact, **params):
        return SimulationVariable(
            name=name, type=dist, impact=impact,
            parameters=DistributionParameters(**params),
        )

    return [
        var("market_demand", DistributionType.normal, ImpactTarget.revenue,
            mean=1.0, std_dev=0.2),
        var("customer_acquisition_cost", DistributionType.triangular, ImpactTarget.costs,
            min=0.8, max=1.5, mode=1.0),
        var("competition_impact", DistributionType.uniform, ImpactTarget.market_share,
            min=0.7, max=1.3),
        var("operational_efficiency", DistributionType.normal, ImpactTarget.costs,
            mean=1.0, std_dev=0.15),
        var("market_growth_rate", DistributionType.triangular, ImpactTarget.growth_rate,
            min=0.02, max=0.15, mode=0.05),
    ]


def default_simulation_params(with_variables: bool = False) -> SimulationParams:
    """Three years, 1000 iterations, 95% confidence."""
    return SimulationParams(
        time_horizon=36,
        iterations=1000,
        confidence_level=0.95,
        variables=default_variables() if with_variables else [],
    )


def scenario_info(name: str, config: EngineConfig) -> dict:
    """Display info and multipliers for one scenario."""
    s = config.scenario(name)
    return {
        "name": s.name,
        "label": s.label or s.name.capitalize(),
        "description": s.description,
        "growth_multiplier": s.growth_multiplier,
        "churn_multiplier": s.churn_multiplier,
        "cost_multiplier": s.cost_multiplier,
        "cost_inflation_multiplier": s.cost_inflation_multiplier,
    }


def variable_type_info(dist_type: DistributionType | str) -> dict:
    key = dist_type.value if isinstance(dist_type, DistributionType) else dist_type
    return _VARIABLE_TYPES[key]


def list_variable_types() -> dict[str, dict]:
    return dict(_VARIABLE_TYPES)


def revenue_model_info(name: str) -> RevenueModelInfo:
    """Look up a revenue model; unknown names get Subscription."""
    return _REVENUE_MODELS.get(name, _REVENUE_MODELS[DEFAULT_REVENUE_MODEL])


def list_revenue_models() -> list[RevenueModelInfo]:
    return list(_REVENUE_MODELS.values())
