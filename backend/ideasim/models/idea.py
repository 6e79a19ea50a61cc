from typing import Optional

from pydantic import BaseModel, ConfigDict


class IdeaFinancialData(BaseModel):
    """Financial assumptions of the idea under analysis."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    monetization: str = ""
    target_market_size: float
    initial_investment: float
    monthly_costs: float
    revenue_model: Optional[str] = None  # detected from `monetization` when missing
    pricing: float
    customer_acquisition_cost: Optional[float] = None
    churn_rate: Optional[float] = None


class RevenueModelInfo(BaseModel):
    name: str
    label: str
    description: str
    base_metrics: list[str]
    growth_factors: list[str]
