from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class BusinessClarityUpdate(BaseModel):
    # Business context
    why_building: Optional[str] = None
    problem_statement: Optional[str] = None
    company_usage: Optional[str] = None
    revenue_model: Optional[str] = None
    # Users and workflow
    primary_user: Optional[str] = None
    user_persona: Optional[str] = None
    end_to_end_workflow: Optional[str] = None
    # Risks and success
    challenges_risks: Optional[str] = None
    success_metrics: Optional[str] = None


class BusinessClarityResponse(BusinessClarityUpdate):
    id: str
    tool_id: str
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
