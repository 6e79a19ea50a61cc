"""Simulation orchestration service.

Facade between the API routes and the engine: fills in default parameters,
builds the engine config, and logs run summaries.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from ideasim.config import settings
from ideasim.models.results import SensitivityReport, SimulationResults
from ideasim.models.simulation import SensitivityRequest, SimulationRequest
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.defaults import default_simulation_params
from ideasim.simulation.engine import run_simulation
from ideasim.simulation.sensitivity import run_sensitivity

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine_config() -> EngineConfig:
    """Engine config built once from settings."""
    config = EngineConfig.from_settings(settings)
    logger.info(
        "Engine config: discount %.2f%%/yr, scenarios %s, %d worker(s)",
        config.discount_rate_annual * 100, list(config.scenarios), config.max_workers,
    )
    return config


def run_request(request: SimulationRequest, config: Optional[EngineConfig] = None) -> SimulationResults:
    """Run a simulation request; missing params fall back to defaults with variables."""
    params = request.simulation_params or default_simulation_params(with_variables=True)
    results = run_simulation(
        request.idea_data, params, request.scenario_types, config or get_engine_config(),
    )
    for name, res in results.items():
        logger.info(
            "%s: mean %.2f, P(loss) %.3f, break-even %d",
            name, res.statistics.mean, res.risk_metrics.probability_of_loss,
            res.risk_metrics.break_even_month,
        )
    return results


def run_sensitivity_request(
    request: SensitivityRequest, config: Optional[EngineConfig] = None,
) -> SensitivityReport:
    return run_sensitivity(
        request.idea_data,
        request.simulation_params,
        variation_pct=request.variation_pct,
        scenario=request.scenario,
        config=config or get_engine_config(),
    )
