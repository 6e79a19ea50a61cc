"""Scenario parameter resolver.

Maps a scenario name plus the idea's base financials to the concrete monthly
assumptions the projector uses, via the multiplier table in EngineConfig.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ideasim.models.idea import IdeaFinancialData
from ideasim.simulation.config import (
    DEFAULT_REVENUE_MODEL,
    DEFAULT_REVENUE_MODELS,
    EngineConfig,
    RevenueModelProfile,
)

logger = logging.getLogger(__name__)

# Checked in order against the lower-cased monetization text (and description
# for freemium); English and Portuguese wording
_MONETIZATION_KEYWORDS: list[tuple[str, tuple[str, ...], bool]] = [
    ("Subscription", ("subscription", "assinatura", "mensal", "monthly", "saas"), False),
    ("Freemium", ("freemium",), True),
    ("Commission", ("marketplace", "commission", "comissão", "comissao"), False),
    ("Advertising", ("advertising", "publicidade", "anúncios", "anuncios", " ads"), False),
    ("One-time", ("one-time", "one time", "pagamento único", "single purchase"), False),
]


@dataclass(frozen=True)
class ResolvedAssumptions:
    """Monthly assumptions for one scenario."""
    scenario: str
    revenue_model: str
    growth_rate: float
    churn_rate: float
    cost_multiplier: float
    cost_inflation: float
    price: float
    fixed_costs: float
    variable_cost_ratio: float
    acquisition_cost: float
    initial_investment: float
    target_market_size: float
    initial_customers: float
    acquisitions_per_period: float
    profile: RevenueModelProfile = DEFAULT_REVENUE_MODELS[DEFAULT_REVENUE_MODEL]


def normalize_revenue_model(name: Optional[str], config: EngineConfig) -> Optional[str]:
    """Match a revenue model name ignoring case, '_' and '-'; None if unknown."""
    key = (name or "").strip().lower().replace("_", "").replace("-", "").replace(" ", "")
    if not key:
        return None
    for model in config.revenue_models:
        if model.lower().replace("-", "") == key:
            return model
    return None


def detect_revenue_model(base: IdeaFinancialData, config: EngineConfig) -> str:
    """Explicit ``revenue_model`` first, then monetization keywords, then Subscription."""
    model = normalize_revenue_model(base.revenue_model, config)
    if model is not None:
        return model

    monetization = f" {(base.monetization or '').lower()}"
    description = (base.description or "").lower()
    for candidate, keywords, check_description in _MONETIZATION_KEYWORDS:
        if candidate not in config.revenue_models:
            continue
        if any(k in monetization for k in keywords) or (
            check_description and any(k in description for k in keywords)
        ):
            if base.revenue_model:
                logger.info(
                    "Unknown revenue model %r, detected %s from monetization",
                    base.revenue_model, candidate,
                )
            return candidate

    logger.warning(
        "No revenue model in %r or monetization %r, using %s",
        base.revenue_model, base.monetization, DEFAULT_REVENUE_MODEL,
    )
    return DEFAULT_REVENUE_MODEL


def resolve(scenario: str, base: IdeaFinancialData, config: EngineConfig) -> ResolvedAssumptions:
    """Apply the scenario's multipliers to the base case.

    Raises InvalidConfigurationError for unknown scenario names.
    """
    mult = config.scenario(scenario)
    revenue_model = detect_revenue_model(base, config)
    base_churn = base.churn_rate if base.churn_rate is not None else config.default_churn_rate

    return ResolvedAssumptions(
        scenario=scenario,
        revenue_model=revenue_model,
        growth_rate=config.base_growth_rate * mult.growth_multiplier,
        churn_rate=min(max(base_churn * mult.churn_multiplier, 0.0), 1.0),
        cost_multiplier=mult.cost_multiplier,
        cost_inflation=config.base_cost_inflation * mult.cost_inflation_multiplier,
        price=base.pricing,
        fixed_costs=base.monthly_costs,
        variable_cost_ratio=config.variable_cost_ratio,
        acquisition_cost=base.customer_acquisition_cost or 0.0,
        initial_investment=base.initial_investment,
        target_market_size=base.target_market_size,
        initial_customers=base.target_market_size * config.seed_fraction,
        acquisitions_per_period=base.target_market_size * config.acquisition_rate,
        profile=config.revenue_models.get(
            revenue_model, DEFAULT_REVENUE_MODELS[DEFAULT_REVENUE_MODEL],
        ),
    )


def resolve_all(
    scenarios: list[str], base: IdeaFinancialData, config: EngineConfig,
) -> dict[str, ResolvedAssumptions]:
    return {name: resolve(name, base, config) for name in scenarios}


def list_scenario_names(config: EngineConfig) -> list[str]:
    """Return all scenario names in the configured table."""
    return list(config.scenarios.keys())
