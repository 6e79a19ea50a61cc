"""Statistics & risk aggregator.

Trajectories are folded into a ScenarioAccumulator one at a time: per-period
running sums for the mean trajectory, Welford mean/variance for the final
cumulative profit, and one float per iteration for percentiles. Raw
trajectories are never retained.
"""
from __future__ import annotations

import math
from typing import Iterable, Sequence

from ideasim.errors import InvalidConfigurationError, NumericOverflowError
from ideasim.models.results import (
    FinalMetrics,
    MonteCarloResult,
    RiskMetrics,
    ScenarioResult,
    ScenarioStatistics,
)

NEVER = -1


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear interpolation at rank p * (n - 1) over an ascending sequence."""
    if not sorted_values:
        raise ValueError("percentile of empty sequence")
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"p must be in [0, 1], got {p}")
    rank = p * (len(sorted_values) - 1)
    lo = math.floor(rank)
    hi = math.ceil(rank)
    if lo == hi:
        return sorted_values[lo]
    return sorted_values[lo] + (sorted_values[hi] - sorted_values[lo]) * (rank - lo)


def break_even_month(trajectory: Sequence[MonteCarloResult]) -> int:
    """First period with cumulative profit >= 0, or -1."""
    for r in trajectory:
        if r.cumulative_profit >= 0:
            return r.month
    return NEVER


def net_present_value(
    profits: Sequence[float], initial_investment: float, monthly_rate: float,
) -> float:
    """-investment + sum of profit_t / (1 + r)^(t+1)."""
    npv = -initial_investment
    for t, profit in enumerate(profits):
        npv += profit / (1.0 + monthly_rate) ** (t + 1)
    return npv


class ScenarioAccumulator:
    """Incremental reducer for one scenario's iteration population."""

    def __init__(self, scenario: str = "") -> None:
        self.scenario = scenario
        self.count = 0
        self._periods = 0
        self._revenue: list[float] = []
        self._costs: list[float] = []
        self._profit: list[float] = []
        self._cumulative: list[float] = []
        self._customers: list[float] = []
        self._active: list[float] = []
        self._finals: list[float] = []
        self._mean = 0.0
        self._m2 = 0.0

    def add(self, trajectory: Sequence[MonteCarloResult]) -> None:
        if not trajectory:
            raise InvalidConfigurationError("Empty trajectory", scenario=self.scenario or None)
        if self.count == 0:
            self._periods = len(trajectory)
            zeros = [0.0] * self._periods
            self._revenue = list(zeros)
            self._costs = list(zeros)
            self._profit = list(zeros)
            self._cumulative = list(zeros)
            self._customers = list(zeros)
            self._active = list(zeros)
        elif len(trajectory) != self._periods:
            raise InvalidConfigurationError(
                f"Trajectory length {len(trajectory)} != {self._periods}",
                scenario=self.scenario or None,
            )

        for i, r in enumerate(trajectory):
            self._revenue[i] += r.revenue
            self._costs[i] += r.costs
            self._profit[i] += r.profit
            self._cumulative[i] += r.cumulative_profit
            self._customers[i] += r.customer_base or 0.0
            self._active[i] += r.active_users or 0.0

        # Welford
        final = trajectory[-1].cumulative_profit
        self.count += 1
        delta = final - self._mean
        self._mean += delta / self.count
        self._m2 += delta * (final - self._mean)
        self._finals.append(final)

    def mean_trajectory(self) -> list[MonteCarloResult]:
        n = self.count
        return [
            MonteCarloResult(
                month=i,
                revenue=self._revenue[i] / n,
                costs=self._costs[i] / n,
                profit=self._profit[i] / n,
                cumulative_profit=self._cumulative[i] / n,
                customer_base=self._customers[i] / n,
                active_users=self._active[i] / n,
            )
            for i in range(self._periods)
        ]

    def finalize(
        self,
        confidence_level: float,
        initial_investment: float,
        monthly_discount_rate: float,
    ) -> ScenarioResult:
        if self.count == 0:
            raise InvalidConfigurationError(
                "No iterations to aggregate", scenario=self.scenario or None,
            )

        finals = sorted(self._finals)
        n = len(finals)

        statistics = ScenarioStatistics(
            mean=self._mean,
            median=percentile(finals, 0.5),
            std_dev=math.sqrt(self._m2 / n),
            percentile5=percentile(finals, 0.05),
            percentile95=percentile(finals, 0.95),
        )

        threshold = percentile(finals, 1.0 - confidence_level)
        tail = [v for v in finals if v <= threshold]
        trajectory = self.mean_trajectory()
        be_month = break_even_month(trajectory)

        risk = RiskMetrics(
            probability_of_loss=sum(1 for v in finals if v < 0) / n,
            value_at_risk=max(0.0, -threshold),
            expected_shortfall=-sum(tail) / len(tail),
            break_even_month=be_month,
        )

        profits = [r.profit for r in trajectory]
        net_profit = sum(profits)
        final = FinalMetrics(
            roi=net_profit / initial_investment if initial_investment else 0.0,
            payback_period=be_month,
            net_present_value=net_present_value(profits, initial_investment, monthly_discount_rate),
            total_revenue=sum(r.revenue for r in trajectory),
            total_costs=sum(r.costs for r in trajectory),
            net_profit=net_profit,
        )

        for label, value in (
            ("mean", statistics.mean), ("stdDev", statistics.std_dev),
            ("roi", final.roi), ("netPresentValue", final.net_present_value),
            ("totalRevenue", final.total_revenue), ("totalCosts", final.total_costs),
        ):
            if not math.isfinite(value):
                raise NumericOverflowError(f"Non-finite {label}", scenario=self.scenario or None)

        return ScenarioResult(
            results=trajectory,
            statistics=statistics,
            risk_metrics=risk,
            final_metrics=final,
        )


def aggregate(
    iterations: Iterable[Sequence[MonteCarloResult]],
    confidence_level: float,
    initial_investment: float = 0.0,
    monthly_discount_rate: float = 0.10 / 12,
    scenario: str = "",
) -> ScenarioResult:
    """Reduce an iteration population (list or generator) to a ScenarioResult."""
    acc = ScenarioAccumulator(scenario)
    for trajectory in iterations:
        acc.add(trajectory)
    return acc.finalize(confidence_level, initial_investment, monthly_discount_rate)
