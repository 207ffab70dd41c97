from fastapi import APIRouter, Depends, HTTPException, status
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.requests.bulk_actions import BulkActionBar
from toolhub.modules.requests.schemas import (
    BulkAction, BulkActionRequest, BulkActionResponse,
    RequestCreate, RequestResponse, RequestStatus, RequestStatusUpdate
)
from toolhub.modules.requests.service import RequestService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/requests", tags=["requests"])


def get_request_service(supabase: Client = Depends(get_supabase)) -> RequestService:
    return RequestService(supabase)


@router.get("", response_model=List[RequestResponse])
async def list_requests(
    tool_id: Optional[str] = None,
    status: Optional[RequestStatus] = None,
    mine: bool = False,
    current_user: UserProfile = Depends(require_permission("requests:read")),
    service: RequestService = Depends(get_request_service)
):
    """List requests, optionally only those on my tools (Owner) or filed by me"""
    return service.list_requests(current_user, tool_id=tool_id, status=status, mine=mine)


@router.post("", response_model=RequestResponse, status_code=201)
async def create_request(
    request_data: RequestCreate,
    current_user: UserProfile = Depends(require_permission("requests:create")),
    service: RequestService = Depends(get_request_service)
):
    return service.create_request(request_data, current_user)


@router.post("/bulk", response_model=BulkActionResponse)
async def bulk_action(
    body: BulkActionRequest,
    current_user: UserProfile = Depends(require_permission("requests:bulk")),
    service: RequestService = Depends(get_request_service)
):
    """Apply one action to many requests. Delete needs confirm=true."""
    ids = list(dict.fromkeys(body.ids))
    outcome: Dict[str, int] = {}

    def mark(target: RequestStatus):
        def apply():
            outcome["affected"] = len(service.bulk_update_status(ids, target, current_user))
        return apply

    def delete():
        outcome["affected"] = service.bulk_delete(ids, current_user)

    bar = BulkActionBar(
        selected_count=len(ids),
        on_mark_in_progress=mark(RequestStatus.IN_PROGRESS),
        on_mark_completed=mark(RequestStatus.COMPLETED),
        on_delete=delete,
        on_clear_selection=lambda: None,
    )
    if not bar.visible:
        raise HTTPException(status_code=400, detail="No requests selected")

    if body.action is BulkAction.MARK_IN_PROGRESS:
        bar.mark_in_progress()
    elif body.action is BulkAction.MARK_COMPLETED:
        bar.mark_completed()
    elif body.action is BulkAction.DELETE:
        bar.request_delete()
        if not body.confirm:
            bar.cancel_delete()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Deleting {len(ids)} request(s) cannot be undone; resend with confirm=true"
            )
        bar.confirm_delete()
    else:
        raise HTTPException(status_code=400, detail=f"Unsupported action: {body.action}")

    return BulkActionResponse(action=body.action, affected=outcome.get("affected", 0), ids=ids)


@router.patch("/{request_id}", response_model=RequestResponse)
async def update_request_status(
    request_id: str,
    body: RequestStatusUpdate,
    current_user: UserProfile = Depends(require_permission("requests:update")),
    service: RequestService = Depends(get_request_service)
):
    return service.update_status(request_id, body.status, current_user)


@router.delete("/{request_id}", status_code=204)
async def delete_request(
    request_id: str,
    current_user: UserProfile = Depends(require_permission("requests:delete")),
    service: RequestService = Depends(get_request_service)
):
    service.delete_request(request_id, current_user)
    return None
