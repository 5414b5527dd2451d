# app/schemas/strategy.py
from typing import Dict, Literal, Optional
from pydantic import BaseModel, Field

class ContributionStrategy(BaseModel):
    amount: float
    frequency: str
    type: Literal["deadline", "general", "smart"]
    confidence: float = Field(..., ge=0, le=1)
    description: Optional[str] = None

class HistoryMetrics(BaseModel):
    average_contribution: float = 0.0
    highest_contribution: float = 0.0
    preferred_frequency: Literal["week", "fortnight", "month"] = "month"
    contribution_pattern: Literal["consistent", "irregular", "increasing", "decreasing"] = "irregular"
    weekday_preference: Dict[int, int] = {}
    monthly_timing: Literal["early", "mid", "late"] = "mid"
    average_interval: float = 30.0
    consistency_score: float = 0.0
    seasonal_pattern: Dict[int, float] = {}
    recent_trend: Literal["increasing", "decreasing", "stable"] = "stable"
