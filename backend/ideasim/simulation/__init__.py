"""Simulation engine: distributions, scenarios, projection, Monte Carlo, statistics."""
from ideasim.simulation.config import EngineConfig, ScenarioMultipliers
from ideasim.simulation.distributions import resolve_distribution, sample
from ideasim.simulation.scenarios import ResolvedAssumptions, resolve
from ideasim.simulation.projector import ProjectionState, initial_state, project
from ideasim.simulation.runner import run
from ideasim.simulation.statistics import ScenarioAccumulator, aggregate, percentile
from ideasim.simulation.engine import run_simulation
from ideasim.simulation.sensitivity import run_sensitivity

__all__ = [
    "EngineConfig",
    "ScenarioMultipliers",
    "resolve_distribution",
    "sample",
    "ResolvedAssumptions",
    "resolve",
    "ProjectionState",
    "initial_state",
    "project",
    "run",
    "ScenarioAccumulator",
    "aggregate",
    "percentile",
    "run_simulation",
    "run_sensitivity",
]
