"""Monte Carlo runner: repeats the projector over the horizon, N times.

Each iteration owns its own generator seeded with ``base_seed ^ index`` so a
run is reproducible no matter how iterations are scheduled.
"""
from __future__ import annotations

import random
import threading
from typing import Iterator, Optional, Sequence

from ideasim.errors import InvalidConfigurationError, SimulationCancelledError
from ideasim.models.results import MonteCarloResult
from ideasim.models.simulation import SimulationParams
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.distributions import ResolvedVariable, resolve_variable, sample
from ideasim.simulation.projector import ProjectionState, combine_samples, initial_state, project
from ideasim.simulation.scenarios import ResolvedAssumptions


def validate_params(params: SimulationParams, config: EngineConfig) -> None:
    """Reject malformed run parameters before any sampling."""
    if params.time_horizon <= 0:
        raise InvalidConfigurationError(f"timeHorizon must be positive, got {params.time_horizon}")
    if params.iterations <= 0:
        raise InvalidConfigurationError(f"iterations must be positive, got {params.iterations}")
    if params.time_horizon > config.max_time_horizon:
        raise InvalidConfigurationError(
            f"timeHorizon must be at most {config.max_time_horizon}, got {params.time_horizon}"
        )
    if params.iterations > config.max_iterations:
        raise InvalidConfigurationError(
            f"iterations must be at most {config.max_iterations}, got {params.iterations}"
        )
    if not 0.0 < params.confidence_level < 1.0:
        raise InvalidConfigurationError(
            f"confidenceLevel must be in (0, 1), got {params.confidence_level}"
        )


def iteration_seed(base_seed: int, index: int) -> int:
    return (base_seed ^ index) & 0xFFFFFFFFFFFFFFFF


def run_iteration(
    assumptions: ResolvedAssumptions,
    variables: Sequence[ResolvedVariable],
    time_horizon: int,
    rng: random.Random,
    config: EngineConfig,
) -> list[MonteCarloResult]:
    """One trajectory: sample every variable once per period, then project."""
    state: ProjectionState = initial_state(assumptions)
    trajectory: list[MonteCarloResult] = []
    for period in range(time_horizon):
        values = [sample(v, rng) for v in variables]
        perturbations = combine_samples(variables, values, config.impact_modes)
        result = project(state, assumptions, perturbations, period)
        trajectory.append(result)
        state = ProjectionState.from_result(result)
    return trajectory


def run_iterations(
    params: SimulationParams,
    assumptions: ResolvedAssumptions,
    config: EngineConfig,
    base_seed: int,
    variables: Optional[Sequence[ResolvedVariable]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[list[MonteCarloResult]]:
    """Yield one trajectory per iteration, lazily.

    Validation happens in ``run``; callers using this directly should call
    ``validate_params`` first.
    """
    if variables is None:
        variables = [resolve_variable(v) for v in params.variables]
    for i in range(params.iterations):
        if cancel_event is not None and cancel_event.is_set():
            raise SimulationCancelledError(
                f"Cancelled after {i} of {params.iterations} iterations",
                scenario=assumptions.scenario,
            )
        rng = random.Random(iteration_seed(base_seed, i))
        yield run_iteration(assumptions, variables, params.time_horizon, rng, config)


def run(
    params: SimulationParams,
    assumptions: ResolvedAssumptions,
    config: EngineConfig | None = None,
    base_seed: int = 42,
    cancel_event: Optional[threading.Event] = None,
) -> list[list[MonteCarloResult]]:
    """Materialise every trajectory for one scenario.

    Fails fast with InvalidConfigurationError / InvalidParametersError
    before sampling. Prefer ``run_iterations`` + an accumulator for large runs.
    """
    config = config or EngineConfig()
    validate_params(params, config)
    variables = [resolve_variable(v) for v in params.variables]
    return list(run_iterations(params, assumptions, config, base_seed, variables, cancel_event))
