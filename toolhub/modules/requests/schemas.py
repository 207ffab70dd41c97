from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class BulkAction(str, Enum):
    MARK_IN_PROGRESS = "mark_in_progress"
    MARK_COMPLETED = "mark_completed"
    DELETE = "delete"


class RequestCreate(BaseModel):
    tool_id: str
    title: str
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()


class RequestStatusUpdate(BaseModel):
    status: RequestStatus


class RequestResponse(BaseModel):
    id: str
    tool_id: str
    title: str
    description: Optional[str] = None
    status: RequestStatus = RequestStatus.PENDING
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkActionRequest(BaseModel):
    ids: List[str]
    action: BulkAction
    confirm: bool = False


class BulkActionResponse(BaseModel):
    action: BulkAction
    affected: int
    ids: List[str]
