from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class MostRequestedTool(BaseModel):
    tool_id: str
    name: str
    count: int


class StatsCard(BaseModel):
    total_tools: int
    tools_by_status: Dict[str, int]
    total_requests: int
    requests_by_status: Dict[str, int]


class OwnerMetrics(BaseModel):
    my_tools_count: int
    my_pending_tools: int
    my_approved_tools: int
    requests_this_month: int
    most_requested_tool: Optional[MostRequestedTool] = None


class QuickAction(BaseModel):
    key: str
    label: str
    path: str


class DashboardResponse(BaseModel):
    # Each card is either its payload or an error-boundary fallback view
    stats: Dict[str, Any]
    owner_metrics: Optional[Dict[str, Any]] = None
    quick_actions: Any
