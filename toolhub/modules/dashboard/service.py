import logging
from collections import Counter
from datetime import datetime, timezone
from supabase import Client
from toolhub.config.permissions_config import Role
from toolhub.core.error_boundary import ErrorBoundary
from toolhub.modules.dashboard.schemas import (
    DashboardResponse, MostRequestedTool, OwnerMetrics, QuickAction, StatsCard
)
from toolhub.modules.requests.schemas import RequestStatus
from toolhub.modules.tools.schemas import ApprovalStatus
from toolhub.modules.users.schemas import UserProfile
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def stats(self) -> StatsCard:
        tools = self.supabase.table("tools").select("id, approval_status").execute().data or []
        requests = self.supabase.table("requests").select("id, status").execute().data or []
        tool_counts = Counter(row.get("approval_status") for row in tools)
        request_counts = Counter(row.get("status") for row in requests)
        return StatsCard(
            total_tools=len(tools),
            tools_by_status={s.value: tool_counts.get(s.value, 0) for s in ApprovalStatus},
            total_requests=len(requests),
            requests_by_status={s.value: request_counts.get(s.value, 0) for s in RequestStatus},
        )

    def owner_metrics(self, owner: UserProfile, now: Optional[datetime] = None) -> OwnerMetrics:
        now = now or datetime.now(timezone.utc)
        tools = self.supabase.table("tools")\
            .select("id, name, approval_status")\
            .eq("owner_id", owner.id)\
            .execute().data or []
        tool_names = {row["id"]: row.get("name", "") for row in tools}

        requests: List[Dict[str, Any]] = []
        if tool_names:
            requests = self.supabase.table("requests")\
                .select("id, tool_id, created_at")\
                .in_("tool_id", list(tool_names))\
                .execute().data or []

        this_month = 0
        for row in requests:
            created = _parse_timestamp(row.get("created_at"))
            if created and created.year == now.year and created.month == now.month:
                this_month += 1

        most_requested = None
        per_tool = Counter(row["tool_id"] for row in requests)
        if per_tool:
            tool_id, count = per_tool.most_common(1)[0]
            most_requested = MostRequestedTool(tool_id=tool_id, name=tool_names.get(tool_id, ""), count=count)

        return OwnerMetrics(
            my_tools_count=len(tools),
            my_pending_tools=sum(1 for row in tools if row.get("approval_status") == ApprovalStatus.PENDING.value),
            my_approved_tools=sum(1 for row in tools if row.get("approval_status") == ApprovalStatus.APPROVED.value),
            requests_this_month=this_month,
            most_requested_tool=most_requested,
        )

    @staticmethod
    def quick_actions(role: Role) -> List[QuickAction]:
        view_tools = QuickAction(key="view_tools", label="Browse Tools", path="/tools")
        add_tool = QuickAction(key="add_tool", label="Add Tool", path="/tools?new=1")
        if role is Role.ADMIN:
            return [
                add_tool,
                QuickAction(key="review_pending", label="Review Pending Tools", path="/pending-tools"),
                QuickAction(key="manage_users", label="Manage Users", path="/users"),
                view_tools,
            ]
        if role is Role.OWNER:
            return [add_tool, QuickAction(key="my_requests", label="My Requests", path="/requests?mine=1"), view_tools]
        if role is Role.OBSERVER:
            return [view_tools, QuickAction(key="new_request", label="New Request", path="/requests?new=1")]
        raise ValueError(f"Unhandled role: {role}")

    def build(self, viewer: UserProfile) -> DashboardResponse:
        """Assemble the dashboard. Each card renders inside its own boundary."""
        stats = ErrorBoundary("stats").render(lambda: self.stats().model_dump())
        owner_metrics = None
        if viewer.role is Role.OWNER:
            owner_metrics = ErrorBoundary("owner_metrics").render(
                lambda: self.owner_metrics(viewer).model_dump()
            )
        quick_actions = ErrorBoundary("quick_actions").render(
            lambda: [action.model_dump() for action in self.quick_actions(viewer.role)]
        )
        return DashboardResponse(stats=stats, owner_metrics=owner_metrics, quick_actions=quick_actions)
