"""Defaults and catalogs for the scenario-builder forms."""
from fastapi import APIRouter, Depends

from ideasim.api.deps import get_config
from ideasim.models.idea import RevenueModelInfo
from ideasim.models.simulation import SimulationParams
from ideasim.simulation.config import EngineConfig
from ideasim.simulation.defaults import (
    default_simulation_params,
    list_revenue_models,
    list_variable_types,
    scenario_info,
)

router = APIRouter(tags=["catalog"])


@router.get("/simulations/defaults", response_model=SimulationParams)
def get_defaults():
    """Default params, pre-populated with the standard uncertain variables."""
    return default_simulation_params(with_variables=True)


@router.get("/simulations/scenarios")
def get_scenarios(config: EngineConfig = Depends(get_config)):
    return [scenario_info(name, config) for name in config.scenarios]


@router.get("/simulations/revenue-models", response_model=list[RevenueModelInfo])
def get_revenue_models():
    return list_revenue_models()


@router.get("/simulations/variable-types")
def get_variable_types():
    return list_variable_types()
