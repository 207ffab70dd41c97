from fastapi import APIRouter, Depends
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.dashboard.schemas import DashboardResponse
from toolhub.modules.dashboard.service import DashboardService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_route_access
from supabase import Client

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    current_user: UserProfile = Depends(require_route_access),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Metrics cards and role-specific quick actions"""
    return service.build(current_user)
