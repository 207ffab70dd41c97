"""
Daily journal: Admins and Owners record what they worked on each day.

A log names the approved tool the work was on. For own_tool work the author
must own it; for others_tool work the named tool_owner_id must own it.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from supabase import Client
from toolhub.config.permissions_config import Role
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogCreate
from toolhub.modules.audit.service import AuditService
from toolhub.modules.journal.schemas import (
    DailyLogCreate, DailyLogResponse, DateRange, TeamMember, WeekStats, WorkType
)
from toolhub.modules.tools.schemas import ApprovalStatus
from toolhub.modules.users.schemas import UserProfile
from toolhub.modules.users.service import UserService
from typing import Any, Dict, List, Optional, Tuple
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def date_bounds(date_range: DateRange, today: date) -> Tuple[Optional[date], Optional[date]]:
    """Inclusive (start, end) for a team-view range; None means unbounded."""
    if date_range is DateRange.ALL:
        return None, None
    if date_range is DateRange.TODAY:
        return today, today
    if date_range is DateRange.WEEK:
        return today - timedelta(days=7), None
    if date_range is DateRange.LAST_WEEK:
        return today - timedelta(days=14), today - timedelta(days=7)
    if date_range is DateRange.MONTH:
        return today.replace(day=1), None
    raise ValueError(f"Unhandled date range: {date_range}")


def week_stats(logs: List[DailyLogResponse], today: date) -> WeekStats:
    """Summary of the last seven days of logs (today included)."""
    week = [log for log in logs if today - timedelta(days=7) <= log.date <= today]
    return WeekStats(
        total_logs=len(week),
        days_logged=len({log.date for log in week}),
        collaborations=sum(1 for log in week if log.work_type is WorkType.OTHERS_TOOL),
        blockers=sum(1 for log in week if log.blockers),
    )


class JournalService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.audit = AuditService(supabase)

    def _fetch_tool(self, tool_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("tools")\
                .select("id, name, owner_id, approval_status")\
                .eq("id", tool_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=400, detail="Please select which tool you worked on")
        return result.data[0]

    def _check_tool(self, log: DailyLogCreate, author: UserProfile) -> None:
        tool = self._fetch_tool(log.tool_id)
        if tool.get("approval_status") != ApprovalStatus.APPROVED.value:
            raise HTTPException(status_code=400, detail="Logs can only reference approved tools")
        if log.work_type is WorkType.OWN_TOOL:
            if tool.get("owner_id") != author.id:
                raise HTTPException(status_code=400, detail="That tool is not one of yours; log it as others_tool")
        elif log.work_type is WorkType.OTHERS_TOOL:
            if not log.tool_owner_id:
                raise HTTPException(status_code=400, detail="tool_owner_id is required for others_tool work")
            if tool.get("owner_id") != log.tool_owner_id:
                raise HTTPException(status_code=400, detail="The selected tool is not owned by the selected owner")
        else:
            raise ValueError(f"Unhandled work type: {log.work_type}")

    def create_log(self, log: DailyLogCreate, author: UserProfile) -> DailyLogResponse:
        self._check_tool(log, author)
        try:
            result = self.supabase.table("daily_logs").insert({
                "user_id": author.id,
                "date": log.date.isoformat(),
                "work_type": log.work_type.value,
                "tool_id": log.tool_id,
                "tool_owner_id": log.tool_owner_id if log.work_type is WorkType.OTHERS_TOOL else None,
                "tasks_completed": log.tasks_completed,
                "blockers": log.blockers or None,
                "collaboration_notes": log.collaboration_notes or None,
                "created_at": datetime.now(timezone.utc).isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save daily log")
            created = DailyLogResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Daily log for {created.date} saved by {author.email}")
        self.audit.create_audit_log(AuditLogCreate(
            user_id=author.id,
            action=AuditAction.CREATE,
            entity_type=AuditEntityType.DAILY_LOG,
            entity_id=created.id,
            details={"date": created.date.isoformat(), "tool_id": created.tool_id}
        ))
        return created

    def list_own_logs(self, author: UserProfile) -> List[DailyLogResponse]:
        """The author's logs, most recent day first"""
        try:
            result = self.supabase.table("daily_logs")\
                .select("*")\
                .eq("user_id", author.id)\
                .order("date", desc=True)\
                .execute()
            return [DailyLogResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_team_logs(
        self,
        user_id: Optional[str] = None,
        date_range: DateRange = DateRange.WEEK,
        today: Optional[date] = None
    ) -> List[DailyLogResponse]:
        start, end = date_bounds(date_range, today or date.today())
        try:
            query = self.supabase.table("daily_logs").select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            if start:
                query = query.gte("date", start.isoformat())
            if end:
                query = query.lte("date", end.isoformat())
            result = query.order("date", desc=True).execute()
            return [DailyLogResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_team_members(self) -> List[TeamMember]:
        """Owners, by name, for the team view's author filter"""
        owners = UserService(self.supabase).list_users_by_role(Role.OWNER)
        return [TeamMember(id=u.id, name=u.name) for u in sorted(owners, key=lambda u: u.name)]
