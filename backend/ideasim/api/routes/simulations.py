"""Simulation API: run, sensitivity analysis, export."""
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ideasim.api.deps import get_config
from ideasim.errors import SimulationError
from ideasim.models.results import SensitivityReport, SimulationResults
from ideasim.models.simulation import SensitivityRequest, SimulationRequest
from ideasim.services.export_service import export_results
from ideasim.services.simulation_service import run_request, run_sensitivity_request
from ideasim.simulation.config import EngineConfig

router = APIRouter(tags=["simulations"])


@router.post("/simulations/run", response_model=SimulationResults)
def run_simulation_endpoint(request: SimulationRequest, config: EngineConfig = Depends(get_config)):
    """Run the Monte Carlo simulation for an idea.

    Accepts the idea's financials, optional simulation params (defaults to
    36 months / 1000 iterations with the default variables) and an optional
    scenario list. Returns the per-scenario mean trajectory and metrics.
    """
    try:
        return run_request(request, config)
    except SimulationError as e:
        raise HTTPException(status_code=422, detail=e.to_detail())


@router.post("/simulations/sensitivity", response_model=SensitivityReport)
def run_sensitivity_endpoint(request: SensitivityRequest, config: EngineConfig = Depends(get_config)):
    """Rank the simulation's variables by their impact on the scenario outcome."""
    try:
        return run_sensitivity_request(request, config)
    except SimulationError as e:
        raise HTTPException(status_code=422, detail=e.to_detail())


@router.post("/simulations/export")
def export_endpoint(
    results: SimulationResults,
    format: str = Query("csv", description="csv, xlsx or json"),
):
    """Download previously computed results as a file."""
    try:
        payload, media_type = export_results(results, format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    filename = f"simulation.{format.lower()}"
    return Response(
        content=payload,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
