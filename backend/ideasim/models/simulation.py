from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ideasim.models.idea import IdeaFinancialData


class DistributionType(str, Enum):
    normal = "normal"
    uniform = "uniform"
    triangular = "triangular"
    lognormal = "lognormal"


class ImpactTarget(str, Enum):
    """Which projector quantity a variable perturbs."""
    revenue = "revenue"
    costs = "costs"
    market_share = "market_share"
    growth_rate = "growth_rate"
    churn_rate = "churn_rate"


class ScenarioType(str, Enum):
    optimistic = "optimistic"
    realistic = "realistic"
    pessimistic = "pessimistic"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class DistributionParameters(_CamelModel):
    """Loose wire record; which fields matter depends on the distribution type.

    Resolved into a typed distribution by ``ideasim.simulation.distributions``.
    """
    mean: Optional[float] = None
    std_dev: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    mode: Optional[float] = None


class SimulationVariable(_CamelModel):
    """A named uncertain quantity sampled once per period."""
    name: str
    type: DistributionType
    parameters: DistributionParameters = DistributionParameters()
    impact: ImpactTarget


class SimulationParams(_CamelModel):
    """Run configuration. Range checks happen in the engine, not here."""
    time_horizon: int = 36
    iterations: int = 1000
    confidence_level: float = 0.95
    variables: list[SimulationVariable] = []
    seed: Optional[int] = 42

    @field_validator("confidence_level", mode="before")
    @classmethod
    def _percent_to_fraction(cls, v):
        # Forms send 95 for 95%
        if isinstance(v, (int, float)) and 1 < v < 100:
            return v / 100.0
        return v


class SimulationRequest(_CamelModel):
    """Request body for a simulation run."""
    idea_data: IdeaFinancialData
    simulation_params: Optional[SimulationParams] = None
    scenario_types: Optional[list[str]] = None


class SensitivityRequest(_CamelModel):
    """Request body for a sensitivity (tornado) analysis."""
    idea_data: IdeaFinancialData
    simulation_params: SimulationParams
    variation_pct: float = 15.0
    scenario: str = ScenarioType.realistic.value
