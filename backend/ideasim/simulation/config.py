"""Engine configuration: scenario multiplier table and projection constants.

An ``EngineConfig`` is built once (usually from ``Settings``) and passed into
every engine call, so concurrent runs with different tuning don't interfere.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from ideasim.config import Settings, settings as default_settings
from ideasim.errors import InvalidConfigurationError
from ideasim.models.simulation import ImpactTarget

logger = logging.getLogger(__name__)

MULTIPLICATIVE = "multiplicative"
ADDITIVE = "additive"


@dataclass(frozen=True)
class ScenarioMultipliers:
    """Multipliers applied to the base case for one scenario."""
    name: str
    growth_multiplier: float = 1.0
    churn_multiplier: float = 1.0
    cost_multiplier: float = 1.0
    cost_inflation_multiplier: float = 1.0
    label: str = ""
    description: str = ""


DEFAULT_SCENARIO_TABLE: Mapping[str, ScenarioMultipliers] = MappingProxyType({
    "optimistic": ScenarioMultipliers(
        name="optimistic",
        growth_multiplier=1.3,
        churn_multiplier=0.7,
        cost_multiplier=0.9,
        cost_inflation_multiplier=0.5,
        label="Optimistic",
        description="Favourable market conditions",
    ),
    "realistic": ScenarioMultipliers(
        name="realistic",
        label="Realistic",
        description="Normal market conditions",
    ),
    "pessimistic": ScenarioMultipliers(
        name="pessimistic",
        growth_multiplier=0.7,
        churn_multiplier=1.3,
        cost_multiplier=1.15,
        cost_inflation_multiplier=1.5,
        label="Pessimistic",
        description="Adverse market conditions",
    ),
})

# How samples of each impact combine with the assumption they perturb
DEFAULT_IMPACT_MODES: Mapping[str, str] = MappingProxyType({
    ImpactTarget.revenue.value: MULTIPLICATIVE,
    ImpactTarget.costs.value: MULTIPLICATIVE,
    ImpactTarget.market_share.value: MULTIPLICATIVE,
    ImpactTarget.growth_rate.value: ADDITIVE,
    ImpactTarget.churn_rate.value: ADDITIVE,
})

RECURRING = "recurring"
FREEMIUM = "freemium"
ONE_TIME = "one_time"


@dataclass(frozen=True)
class RevenueModelProfile:
    """How a revenue model turns its customer base into monthly revenue.

    ``recurring`` bills ``customers * active_share * units_per_active *
    take_rate`` units at ``pricing``. ``freemium`` treats customers as free
    users and bills a paid cohort that converts at ``conversion_rate`` and is
    capped at ``max_paid_share`` of users. ``one_time`` bills new buyers plus
    ``repeat_rate`` of past buyers each month.
    """
    name: str
    formula: str = RECURRING
    max_penetration: float = 0.10       # of the reachable market
    active_share: float = 1.0           # customers active in a month
    units_per_active: float = 1.0       # transactions, or impressions / 1000
    take_rate: float = 1.0              # commission kept on each unit
    conversion_rate: float = 0.0        # monthly free -> paid
    max_paid_share: float = 1.0
    repeat_rate: float = 0.0


DEFAULT_REVENUE_MODELS: Mapping[str, RevenueModelProfile] = MappingProxyType({
    "Subscription": RevenueModelProfile(name="Subscription", max_penetration=0.10),
    "Freemium": RevenueModelProfile(
        name="Freemium", formula=FREEMIUM, max_penetration=0.20,
        conversion_rate=0.02, max_paid_share=0.10,
    ),
    # 60% monthly active, 2 transactions each at `pricing`, 5% commission
    "Commission": RevenueModelProfile(
        name="Commission", max_penetration=0.15,
        active_share=0.6, units_per_active=2.0, take_rate=0.05,
    ),
    # 80% monthly active, 1000 impressions each, `pricing` is the CPM
    "Advertising": RevenueModelProfile(
        name="Advertising", max_penetration=0.25, active_share=0.8,
    ),
    "One-time": RevenueModelProfile(
        name="One-time", formula=ONE_TIME, max_penetration=0.05, repeat_rate=0.20,
    ),
})
DEFAULT_REVENUE_MODEL = "Subscription"


@dataclass(frozen=True)
class EngineConfig:
    scenarios: Mapping[str, ScenarioMultipliers] = field(default_factory=lambda: DEFAULT_SCENARIO_TABLE)
    impact_modes: Mapping[str, str] = field(default_factory=lambda: DEFAULT_IMPACT_MODES)
    revenue_models: Mapping[str, RevenueModelProfile] = field(default_factory=lambda: DEFAULT_REVENUE_MODELS)
    discount_rate_annual: float = 0.10
    base_growth_rate: float = 0.05
    default_churn_rate: float = 0.05
    base_cost_inflation: float = 0.002
    seed_fraction: float = 0.001
    acquisition_rate: float = 0.0005
    variable_cost_ratio: float = 0.20
    max_time_horizon: int = 600
    max_iterations: int = 100_000
    max_workers: int = 1

    @property
    def monthly_discount_rate(self) -> float:
        return self.discount_rate_annual / 12

    def scenario(self, name: str) -> ScenarioMultipliers:
        try:
            return self.scenarios[name]
        except KeyError:
            raise InvalidConfigurationError(
                f"Unknown scenario '{name}'. Available: {', '.join(self.scenarios)}",
                scenario=name,
            ) from None

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "EngineConfig":
        s = s or default_settings
        scenarios = DEFAULT_SCENARIO_TABLE
        if s.SCENARIO_TABLE_PATH:
            scenarios = load_scenario_table(s.SCENARIO_TABLE_PATH)
        return cls(
            scenarios=scenarios,
            discount_rate_annual=s.DISCOUNT_RATE_ANNUAL,
            base_growth_rate=s.BASE_GROWTH_RATE,
            default_churn_rate=s.DEFAULT_CHURN_RATE,
            base_cost_inflation=s.BASE_COST_INFLATION,
            seed_fraction=s.SEED_FRACTION,
            acquisition_rate=s.ACQUISITION_RATE,
            variable_cost_ratio=s.VARIABLE_COST_RATIO,
            max_time_horizon=s.MAX_TIME_HORIZON,
            max_iterations=s.MAX_ITERATIONS,
            max_workers=s.MAX_WORKERS,
        )


def load_scenario_table(path: str | Path) -> Mapping[str, ScenarioMultipliers]:
    """Read a scenario multiplier table from JSON.

    Expected shape: ``{"optimistic": {"growth_multiplier": 1.3, ...}, ...}``.
    Falls back to the default table if the file is missing or malformed.
    """
    table_path = Path(path)
    if not table_path.is_file():
        logger.warning("Scenario table %s not found, using defaults", table_path)
        return DEFAULT_SCENARIO_TABLE
    try:
        data = json.loads(table_path.read_text())
        table = {
            name: ScenarioMultipliers(name=name, **{k: v for k, v in values.items() if k != "name"})
            for name, values in data.items()
        }
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning("Failed to load scenario table %s: %s, using defaults", table_path, e)
        return DEFAULT_SCENARIO_TABLE
    logger.info("Loaded %d scenarios from %s", len(table), table_path)
    return MappingProxyType(table)
