"""Scenario simulation engine.

Validates inputs, resolves each requested scenario, streams its Monte Carlo
iterations into an accumulator, and assembles a SimulationResults map. A
result is only returned once every scenario has completed.
"""
from __future__ import annotations

import logging
import math
import random
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Optional, Sequence

from ideasim.errors import InvalidConfigurationError, SimulationCancelledError, SimulationError
from ideasim.models.idea import IdeaFinancialData
from ideasim.models.results import ScenarioResult, SimulationResults
from ideasim.models.simulation import ScenarioType, SimulationParams
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.distributions import ResolvedVariable, resolve_variable
from ideasim.simulation.runner import run_iterations, validate_params
from ideasim.simulation.scenarios import ResolvedAssumptions, resolve_all
from ideasim.simulation.statistics import ScenarioAccumulator

logger = logging.getLogger(__name__)

DEFAULT_SCENARIOS = [s.value for s in ScenarioType]


def validate_idea(idea: IdeaFinancialData) -> None:
    """Reject idea financials the projector can't work with."""
    checks = [
        ("target_market_size", idea.target_market_size, 0.0, False),
        ("initial_investment", idea.initial_investment, 0.0, True),
        ("monthly_costs", idea.monthly_costs, 0.0, True),
        ("pricing", idea.pricing, 0.0, True),
    ]
    if idea.customer_acquisition_cost is not None:
        checks.append(("customer_acquisition_cost", idea.customer_acquisition_cost, 0.0, True))
    for name, value, floor, allow_equal in checks:
        if not math.isfinite(value):
            raise InvalidConfigurationError(f"{name} must be finite, got {value}")
        if value < floor or (value == floor and not allow_equal):
            op = ">=" if allow_equal else ">"
            raise InvalidConfigurationError(f"{name} must be {op} {floor}, got {value}")
    if idea.churn_rate is not None and not 0.0 <= idea.churn_rate <= 1.0:
        raise InvalidConfigurationError(f"churn_rate must be in [0, 1], got {idea.churn_rate}")


def _scenario_list(scenarios: Optional[Sequence[str]]) -> list[str]:
    if scenarios is None:
        return list(DEFAULT_SCENARIOS)
    names: list[str] = []
    for s in scenarios:
        name = s.value if isinstance(s, ScenarioType) else str(s)
        if name not in names:
            names.append(name)
    if not names:
        raise InvalidConfigurationError("At least one scenario is required")
    return names


class StopSignal:
    """Stops a parallel run when the caller cancels or any scenario fails.

    Quacks like the ``threading.Event`` that ``run_iterations`` polls.
    """

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self._cancel_event = cancel_event
        self._failed = threading.Event()

    def set(self) -> None:
        self._failed.set()

    def is_set(self) -> bool:
        if self._failed.is_set():
            return True
        return self._cancel_event is not None and self._cancel_event.is_set()


def resolve_seed(seed: Optional[int]) -> int:
    """Return ``seed``, or draw a fresh base seed when none was supplied."""
    if seed is not None:
        return seed
    fresh = random.SystemRandom().getrandbits(32)
    logger.info("No seed supplied, using base seed %d", fresh)
    return fresh


def simulate_scenario(
    assumptions: ResolvedAssumptions,
    params: SimulationParams,
    variables: Sequence[ResolvedVariable],
    config: EngineConfig,
    base_seed: int,
    cancel_event: Optional[threading.Event] = None,
) -> ScenarioResult:
    """Run and aggregate all iterations for one resolved scenario."""
    acc = ScenarioAccumulator(assumptions.scenario)
    try:
        for trajectory in run_iterations(
            params, assumptions, config, base_seed, variables, cancel_event,
        ):
            acc.add(trajectory)
        return acc.finalize(
            params.confidence_level,
            assumptions.initial_investment,
            config.monthly_discount_rate,
        )
    except SimulationError as e:
        raise e.with_scenario(assumptions.scenario)


def run_simulation(
    idea: IdeaFinancialData,
    params: SimulationParams,
    scenarios: Optional[Sequence[str]] = None,
    config: Optional[EngineConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResults:
    """Simulate every requested scenario for an idea.

    All validation (params, idea, variables, scenario names) happens before
    any sampling. Scenarios share the same base seed so they see the same
    random draws; with ``config.max_workers > 1`` they run on a thread pool.

    Raises InvalidConfigurationError, InvalidParametersError,
    NumericOverflowError or SimulationCancelledError.
    """
    config = config or EngineConfig.from_settings()
    names = _scenario_list(scenarios)

    validate_params(params, config)
    validate_idea(idea)
    variables = [resolve_variable(v) for v in params.variables]
    resolved = resolve_all(names, idea, config)
    base_seed = resolve_seed(params.seed)

    logger.info(
        "Running simulation '%s': %d scenarios x %d iterations x %d months, %d variables",
        idea.title, len(names), params.iterations, params.time_horizon, len(variables),
    )
    started = time.perf_counter()

    results: dict[str, ScenarioResult] = {}
    if config.max_workers > 1 and len(names) > 1:
        stop = StopSignal(cancel_event)
        with ThreadPoolExecutor(
            max_workers=min(config.max_workers, len(names)),
            thread_name_prefix="scenario",
        ) as pool:
            futures = {
                name: pool.submit(
                    simulate_scenario, resolved[name], params, variables,
                    config, base_seed, stop,
                )
                for name in names
            }
            _, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
            if pending:
                logger.warning("Scenario failed, stopping %d remaining", len(pending))
                stop.set()
                for future in pending:
                    future.cancel()

        errors = [
            futures[name].exception() for name in names
            if not futures[name].cancelled() and futures[name].exception() is not None
        ]
        if errors:
            # scenarios stopped by a sibling's failure report cancellation; surface the cause
            raise next((e for e in errors if not isinstance(e, SimulationCancelledError)), errors[0])
        for name in names:
            results[name] = futures[name].result()
    else:
        for name in names:
            results[name] = simulate_scenario(
                resolved[name], params, variables, config, base_seed, cancel_event,
            )

    logger.info(
        "Simulation '%s' finished in %.2fs", idea.title, time.perf_counter() - started,
    )
    return SimulationResults(results)
