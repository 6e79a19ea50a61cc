from fastapi import APIRouter, Depends

from ideasim import __version__
from ideasim.api.deps import get_config
from ideasim.simulation.config import EngineConfig

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(config: EngineConfig = Depends(get_config)):
    return {
        "status": "ok",
        "version": __version__,
        "engine": {
            "scenarios": list(config.scenarios),
            "discount_rate_annual": config.discount_rate_annual,
            "max_workers": config.max_workers,
        },
    }
