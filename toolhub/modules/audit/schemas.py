from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime
from enum import Enum


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"


class AuditEntityType(str, Enum):
    TOOL = "tool"
    USER = "user"
    REQUEST = "request"
    DAILY_LOG = "daily_log"
    BUSINESS_CLARITY = "business_clarity"


class AuditLogCreate(BaseModel):
    user_id: str
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str
    details: Dict[str, Any] = {}


class AuditLogFilters(BaseModel):
    action: Optional[AuditAction] = None
    entity_type: Optional[AuditEntityType] = None
    user_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AuditLogResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str
    details: Dict[str, Any] = {}
    user: Optional[Dict[str, Any]] = None  # embedded users(name, email, role)
    created_at: datetime

    class Config:
        from_attributes = True
