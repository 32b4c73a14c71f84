"""Growth simulation models."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import Field

from life_leveling.models.interest import CamelModel


class SimulationResult(CamelModel):
    """Forecast for one interest category."""

    projected_level: float
    growth_rate: float
    synergy_bonus: float = Field(ge=0.0, le=0.5)
    effort_efficiency: float


class SimulationScenario(CamelModel):
    """A saved hypothetical effort plan and its forecast."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    scenario_name: str
    effort_allocation: dict[str, float]
    timeframe_weeks: int = Field(ge=1)
    forecasted_results: dict[str, SimulationResult] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)
    is_converted_to_goals: bool = False


class TradeOffType(StrEnum):
    OPPORTUNITY_COST = "opportunity_cost"
    SYNERGY_BOOST = "synergy_boost"
    DIMINISHING_RETURNS = "diminishing_returns"
    BALANCED_GROWTH = "balanced_growth"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {Severity.LOW: 1, Severity.MEDIUM: 2, Severity.HIGH: 3}[self]


class TradeOff(CamelModel):
    """One observation about how an effort allocation trades growth between skills."""

    type: TradeOffType
    skill: str
    impact: float
    description: str
    severity: Severity
