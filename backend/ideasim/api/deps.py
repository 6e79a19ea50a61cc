from ideasim.services.simulation_service import get_engine_config
from ideasim.simulation.config import EngineConfig


def get_config() -> EngineConfig:
    """FastAPI dependency returning the engine config (override in tests)."""
    return get_engine_config()
