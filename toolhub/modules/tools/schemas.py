from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ToolCreate(BaseModel):
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    owner_id: Optional[str] = None  # Admins may assign an owner; Owners always own what they create


class ToolUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None


class ToolDecision(BaseModel):
    reason: Optional[str] = None


class ToolResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    owner_id: Optional[str] = None
    created_by: Optional[str] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
