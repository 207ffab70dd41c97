from fastapi import APIRouter, Depends
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.business_clarity.schemas import BusinessClarityResponse, BusinessClarityUpdate
from toolhub.modules.business_clarity.service import BusinessClarityService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/tools", tags=["business_clarity"])


def get_clarity_service(supabase: Client = Depends(get_supabase)) -> BusinessClarityService:
    return BusinessClarityService(supabase)


@router.get("/{tool_id}/business-clarity", response_model=Optional[BusinessClarityResponse])
async def get_business_clarity(
    tool_id: str,
    current_user: UserProfile = Depends(require_permission("tools:read")),
    service: BusinessClarityService = Depends(get_clarity_service)
):
    return service.get_clarity(tool_id, current_user)


@router.put("/{tool_id}/business-clarity", response_model=BusinessClarityResponse)
async def save_business_clarity(
    tool_id: str,
    body: BusinessClarityUpdate,
    current_user: UserProfile = Depends(require_permission("tools:update")),
    service: BusinessClarityService = Depends(get_clarity_service)
):
    """Owner or Admin writes the tool's business context"""
    return service.save_clarity(tool_id, body, current_user)
