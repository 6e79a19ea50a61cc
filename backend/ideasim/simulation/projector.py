"""Period projector: advances one iteration by one month.

Pure functions: the next period depends only on the prior state, the
scenario's assumptions and this period's sampled perturbations.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Sequence

from ideasim.errors import NumericOverflowError
from ideasim.models.results import MonteCarloResult
from ideasim.models.simulation import ImpactTarget
from ideasim.simulation.config import (
    ADDITIVE,
    FREEMIUM,
    MULTIPLICATIVE,
    ONE_TIME,
    RevenueModelProfile,
)
from ideasim.simulation.distributions import ResolvedVariable
from ideasim.simulation.scenarios import ResolvedAssumptions


@dataclass(frozen=True)
class ProjectionState:
    """Running state carried from one period to the next."""
    customers: float
    cumulative_profit: float
    active_users: float = 0.0

    @classmethod
    def from_result(cls, result: MonteCarloResult) -> "ProjectionState":
        return cls(
            customers=result.customer_base or 0.0,
            cumulative_profit=result.cumulative_profit,
            active_users=result.active_users or 0.0,
        )


@dataclass(frozen=True)
class Perturbation:
    """Combined effect of all variables targeting one impact."""
    mode: str
    value: float

    def apply(self, base: float) -> float:
        if self.mode == ADDITIVE:
            return base + self.value
        return base * self.value


_NEUTRAL = {MULTIPLICATIVE: 1.0, ADDITIVE: 0.0}


def combine_samples(
    variables: Sequence[ResolvedVariable],
    values: Sequence[float],
    impact_modes: Mapping[str, str],
) -> dict[str, Perturbation]:
    """Fold one period's samples into a perturbation per impact target.

    Multiplicative samples multiply together (each floored at 0); additive
    samples sum. Impacts with no variable get the neutral element.
    """
    acc: dict[str, float] = {}
    modes: dict[str, str] = {}
    for impact in ImpactTarget:
        mode = impact_modes.get(impact.value, MULTIPLICATIVE)
        modes[impact.value] = mode
        acc[impact.value] = _NEUTRAL[mode]

    for var, v in zip(variables, values):
        if modes[var.impact] == ADDITIVE:
            acc[var.impact] += v
        else:
            acc[var.impact] *= max(v, 0.0)

    return {impact: Perturbation(modes[impact], acc[impact]) for impact in acc}


def initial_state(assumptions: ResolvedAssumptions) -> ProjectionState:
    """State before period 0: seed customers, investment already spent."""
    return ProjectionState(
        customers=assumptions.initial_customers,
        cumulative_profit=-assumptions.initial_investment,
    )


def _get(perturbations: Mapping[str, Perturbation], impact: ImpactTarget, base: float) -> float:
    p = perturbations.get(impact.value)
    return p.apply(base) if p is not None else base


def billed_units(
    prev: ProjectionState,
    customers: float,
    growth: float,
    churn: float,
    acquisitions: float,
    profile: RevenueModelProfile,
) -> float:
    """Customers (or paid users, or buyers) billed this month under a revenue model."""
    if profile.formula == FREEMIUM:
        # customers are free users; the paid cohort churns and converts
        paid = prev.active_users * (1.0 - churn) + customers * profile.conversion_rate
        return min(paid, customers * profile.max_paid_share)
    if profile.formula == ONE_TIME:
        new_buyers = prev.customers * max(growth, 0.0) + acquisitions
        return new_buyers + prev.customers * profile.repeat_rate
    return customers * profile.active_share


def project(
    prev: ProjectionState,
    assumptions: ResolvedAssumptions,
    perturbations: Mapping[str, Perturbation],
    period: int,
) -> MonteCarloResult:
    """Project a single month.

    customers = prev * (1 + growth - churn) + acquisitions, capped at the
    revenue model's maximum penetration of the reachable market; revenue =
    billed units * units per active * take rate * price; costs are fixed
    (inflating monthly) + variable share of revenue + acquisition spend.
    """
    a = assumptions
    profile = a.profile

    growth = _get(perturbations, ImpactTarget.growth_rate, a.growth_rate)
    churn = min(max(_get(perturbations, ImpactTarget.churn_rate, a.churn_rate), 0.0), 1.0)
    share = max(_get(perturbations, ImpactTarget.market_share, 1.0), 0.0)

    reachable_market = a.target_market_size * share * profile.max_penetration
    acquisitions = a.acquisitions_per_period * share
    customers = prev.customers * max(0.0, 1.0 + growth - churn) + acquisitions
    customers = min(max(customers, 0.0), reachable_market)

    active = billed_units(prev, customers, growth, churn, acquisitions, profile)
    base_revenue = active * profile.units_per_active * profile.take_rate * a.price
    revenue = max(_get(perturbations, ImpactTarget.revenue, base_revenue), 0.0)

    try:
        inflation_factor = (1.0 + a.cost_inflation) ** period
    except OverflowError:
        raise NumericOverflowError(
            f"Cost inflation overflowed at period {period}", scenario=a.scenario,
        ) from None

    base_costs = (
        a.fixed_costs * inflation_factor
        + a.variable_cost_ratio * revenue
        + acquisitions * a.acquisition_cost
    ) * a.cost_multiplier
    costs = max(_get(perturbations, ImpactTarget.costs, base_costs), 0.0)

    profit = revenue - costs
    cumulative = prev.cumulative_profit + profit

    for label, value in (("customers", customers), ("revenue", revenue),
                         ("costs", costs), ("cumulative profit", cumulative)):
        if not math.isfinite(value):
            raise NumericOverflowError(
                f"Non-finite {label} at period {period}", scenario=a.scenario,
            )

    return MonteCarloResult(
        month=period,
        revenue=revenue,
        costs=costs,
        profit=profit,
        cumulative_profit=cumulative,
        customer_base=customers,
        active_users=active,
    )
