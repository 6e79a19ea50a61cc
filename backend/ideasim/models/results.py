from typing import Optional

from pydantic import BaseModel, ConfigDict, RootModel
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MonteCarloResult(_CamelModel):
    """Outcome of a single period (month, 0-based)."""
    month: int
    revenue: float
    costs: float
    profit: float
    cumulative_profit: float
    customer_base: Optional[float] = None
    active_users: Optional[float] = None  # paying or active units billed this month


class ScenarioStatistics(_CamelModel):
    """Distribution of final cumulative profit across iterations."""
    mean: float
    median: float
    std_dev: float
    percentile5: float
    percentile95: float


class RiskMetrics(_CamelModel):
    probability_of_loss: float
    value_at_risk: float
    # -mean of the tail at or below the VaR threshold, not floored at 0;
    # negative when even the worst outcomes are profitable
    expected_shortfall: float
    break_even_month: int  # -1 if never reached


class FinalMetrics(_CamelModel):
    roi: float
    payback_period: int  # -1 if never reached
    net_present_value: float
    total_revenue: float
    total_costs: float
    net_profit: float


class ScenarioResult(_CamelModel):
    """Aggregated outcome of one scenario: the mean trajectory plus metrics."""
    results: list[MonteCarloResult]
    statistics: ScenarioStatistics
    risk_metrics: RiskMetrics
    final_metrics: FinalMetrics


class SimulationResults(RootModel[dict[str, ScenarioResult]]):
    """Scenario name -> ScenarioResult."""

    model_config = ConfigDict(frozen=True)

    def __getitem__(self, scenario: str) -> ScenarioResult:
        return self.root[scenario]

    def __contains__(self, scenario: object) -> bool:
        return scenario in self.root

    def __len__(self) -> int:
        return len(self.root)

    def items(self):
        return self.root.items()

    def keys(self):
        return self.root.keys()


class VariableSensitivity(_CamelModel):
    """Effect of shifting one variable's central value down and up."""
    variable: str
    impact_target: str
    base_value: float
    low_value: float
    high_value: float
    low_metric: float
    high_metric: float
    impact: float
    percent_change: float
    sensitivity: float
    level: str  # high / medium / low


class SensitivityReport(_CamelModel):
    scenario: str
    variation_pct: float
    baseline_metric: float
    variables: list[VariableSensitivity]
