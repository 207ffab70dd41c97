from fastapi import APIRouter, Depends, Query
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.usage.schemas import UsageReport
from toolhub.modules.usage.service import UsageService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client

router = APIRouter(prefix="/usage", tags=["usage"])


def get_usage_service(supabase: Client = Depends(get_supabase)) -> UsageService:
    return UsageService(supabase)


@router.get("/openai", response_model=UsageReport)
async def get_openai_usage(
    days: int = Query(30, ge=1, le=365),
    current_user: UserProfile = Depends(require_permission("openai_usage:read")),
    service: UsageService = Depends(get_usage_service)
):
    """OpenAI calls, tokens and estimated cost (Admin only)"""
    return service.get_report(days)
