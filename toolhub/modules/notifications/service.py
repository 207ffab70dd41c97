import logging
from datetime import datetime, timezone
from supabase import Client
from toolhub.modules.notifications.schemas import NotificationCreate, NotificationResponse
from typing import List
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_notification(self, params: NotificationCreate) -> NotificationResponse:
        try:
            result = self.supabase.table("notifications").insert({
                "user_id": params.user_id,
                "type": params.type.value,
                "title": params.title,
                "message": params.message,
                "related_id": params.related_id,
                "related_type": params.related_type,
                "is_read": False,
                "created_at": datetime.now(timezone.utc).isoformat()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create notification")

            logger.info(f"Notification created: {params.type.value} for user {params.user_id}")
            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Notification error: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def notify_quietly(self, params: NotificationCreate) -> bool:
        """Create a notification as a side effect; a failure is logged, not raised."""
        try:
            self.create_notification(params)
            return True
        except HTTPException as e:
            logger.warning(f"Could not notify user {params.user_id}: {e.detail}")
            return False

    def fetch_notifications(
        self,
        user_id: str,
        limit: int = 50,
        unread_only: bool = False
    ) -> List[NotificationResponse]:
        """Notifications for one user, newest first. Scoped by user_id in the query itself."""
        try:
            query = self.supabase.table("notifications")\
                .select("*")\
                .eq("user_id", user_id)
            if unread_only:
                query = query.eq("is_read", False)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [NotificationResponse(**row) for row in result.data]
        except Exception as e:
            logger.error(f"Error fetching notifications: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_unread_count(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .select("id", count="exact")\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error getting unread count: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def mark_as_read(self, user_id: str, notification_id: str) -> bool:
        try:
            result = self.supabase.table("notifications")\
                .update({"is_read": True})\
                .eq("id", notification_id)\
                .eq("user_id", user_id)\
                .execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} as read: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def mark_all_as_read(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .update({"is_read": True})\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
            logger.info(f"All notifications marked as read for user {user_id}")
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error marking all notifications as read: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_notification(self, user_id: str, notification_id: str) -> bool:
        try:
            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .eq("user_id", user_id)\
                .execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error deleting notification {notification_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
