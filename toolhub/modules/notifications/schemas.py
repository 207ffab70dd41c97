from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    TOOL_ADDED = "tool_added"
    TOOL_APPROVED = "tool_approved"
    TOOL_REJECTED = "tool_rejected"
    REQUEST_UPDATED = "request_updated"
    REQUEST_ASSIGNED = "request_assigned"


class NotificationCreate(BaseModel):
    user_id: str
    type: NotificationType
    title: str
    message: str
    related_id: Optional[str] = None
    related_type: Optional[str] = None


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: Optional[NotificationType] = None
    title: str
    message: str
    related_id: Optional[str] = None
    related_type: Optional[str] = None
    is_read: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationBellResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class MarkReadResponse(BaseModel):
    id: str
    changed: bool
    unread_count: int


class MarkAllReadResponse(BaseModel):
    marked: int
    unread_count: int
