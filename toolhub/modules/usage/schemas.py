from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime


class UsageSummary(BaseModel):
    total_calls: int = 0
    total_tokens: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    total_cost: float = 0.0


class FeatureUsage(BaseModel):
    feature: str
    calls: int = 0
    tokens: int = 0
    cost: float = 0.0


class DailyUsage(BaseModel):
    day: date
    calls: int = 0
    cost: float = 0.0


class UsageLog(BaseModel):
    id: str
    feature: Optional[str] = None
    model: Optional[str] = None
    total_tokens: int = 0
    estimated_cost: float = 0.0
    user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UsageReport(BaseModel):
    days: int
    summary: UsageSummary
    by_feature: List[FeatureUsage]  # most expensive first
    daily: List[DailyUsage]  # oldest first, one entry per day including empty days
    recent: List[UsageLog]
