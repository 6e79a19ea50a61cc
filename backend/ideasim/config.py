from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    # Engine tuning: see ideasim.simulation.config.EngineConfig
    DISCOUNT_RATE_ANNUAL: float = 0.10
    SCENARIO_TABLE_PATH: Optional[str] = None
    MAX_WORKERS: int = 3
    MAX_TIME_HORIZON: int = 600
    MAX_ITERATIONS: int = 100_000
    BASE_GROWTH_RATE: float = 0.05        # monthly
    DEFAULT_CHURN_RATE: float = 0.05      # monthly, when the idea has none
    BASE_COST_INFLATION: float = 0.002    # monthly
    SEED_FRACTION: float = 0.001          # of target market, at launch
    ACQUISITION_RATE: float = 0.0005      # of target market, per month
    VARIABLE_COST_RATIO: float = 0.20     # of revenue

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
