from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
from enum import Enum


class WorkType(str, Enum):
    OWN_TOOL = "own_tool"
    OTHERS_TOOL = "others_tool"


class DateRange(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    LAST_WEEK = "lastweek"
    MONTH = "month"


class DailyLogCreate(BaseModel):
    date: date
    tasks_completed: str
    blockers: Optional[str] = None
    collaboration_notes: Optional[str] = None
    work_type: WorkType = WorkType.OWN_TOOL
    tool_id: str
    tool_owner_id: Optional[str] = None  # required when work_type is others_tool

    @field_validator("tasks_completed")
    @classmethod
    def tasks_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter at least one task you completed today")
        return value.strip()


class DailyLogResponse(BaseModel):
    id: str
    user_id: str
    date: date
    work_type: WorkType = WorkType.OWN_TOOL
    tool_id: Optional[str] = None
    tool_owner_id: Optional[str] = None
    tasks_completed: str
    blockers: Optional[str] = None
    collaboration_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WeekStats(BaseModel):
    total_logs: int
    days_logged: int
    collaborations: int
    blockers: int


class TeamMember(BaseModel):
    id: str
    name: str
