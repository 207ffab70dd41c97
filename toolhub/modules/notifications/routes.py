from fastapi import APIRouter, Depends, HTTPException
from toolhub.config import settings
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.notifications.schemas import (
    NotificationBellResponse, MarkReadResponse, MarkAllReadResponse
)
from toolhub.modules.notifications.service import NotificationService
from toolhub.modules.notifications.store import NotificationStore
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


async def get_notification_store(
    current_user: UserProfile = Depends(require_permission("notifications:read")),
    service: NotificationService = Depends(get_notification_service)
) -> NotificationStore:
    store = NotificationStore(
        current_user.id,
        service,
        display_limit=settings.notification_display_limit,
        fetch_limit=settings.notification_fetch_limit,
    )
    await store.refresh()
    return store


@router.get("", response_model=NotificationBellResponse)
async def get_bell(store: NotificationStore = Depends(get_notification_store)):
    """Most recent notifications for the bell menu plus the unread badge count"""
    return NotificationBellResponse(notifications=store.displayed, unread_count=store.unread_count)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: UserProfile = Depends(require_permission("notifications:update")),
    store: NotificationStore = Depends(get_notification_store)
):
    """Mark the displayed notifications as read, sequentially"""
    marked = await store.mark_all_as_read()
    return MarkAllReadResponse(marked=marked, unread_count=store.unread_count)


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: str,
    current_user: UserProfile = Depends(require_permission("notifications:update")),
    store: NotificationStore = Depends(get_notification_store)
):
    """Mark a single notification as read (idempotent)"""
    if not any(n.id == notification_id for n in store.notifications):
        raise HTTPException(status_code=404, detail="Notification not found")
    changed = await store.mark_as_read(notification_id)
    return MarkReadResponse(id=notification_id, changed=changed, unread_count=store.unread_count)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    current_user: UserProfile = Depends(require_permission("notifications:update")),
    service: NotificationService = Depends(get_notification_service)
):
    if not service.delete_notification(current_user.id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return None
