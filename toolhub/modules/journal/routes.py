from fastapi import APIRouter, Depends, Query
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.journal.schemas import DailyLogCreate, DailyLogResponse, DateRange, TeamMember, WeekStats
from toolhub.modules.journal.service import JournalService, week_stats
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional
from datetime import date

router = APIRouter(prefix="/journal", tags=["journal"])


def get_journal_service(supabase: Client = Depends(get_supabase)) -> JournalService:
    return JournalService(supabase)


@router.get("/logs", response_model=List[DailyLogResponse])
async def list_my_logs(
    current_user: UserProfile = Depends(require_permission("journal:read")),
    service: JournalService = Depends(get_journal_service)
):
    return service.list_own_logs(current_user)


@router.post("/logs", response_model=DailyLogResponse, status_code=201)
async def create_log(
    log: DailyLogCreate,
    current_user: UserProfile = Depends(require_permission("journal:create")),
    service: JournalService = Depends(get_journal_service)
):
    """Record the work done on a day (Admin and Owner)"""
    return service.create_log(log, current_user)


@router.get("/stats", response_model=WeekStats)
async def get_week_stats(
    current_user: UserProfile = Depends(require_permission("journal:read")),
    service: JournalService = Depends(get_journal_service)
):
    """Counts over the caller's last seven days of logs"""
    return week_stats(service.list_own_logs(current_user), date.today())


@router.get("/team", response_model=List[DailyLogResponse])
async def list_team_logs(
    user_id: Optional[str] = None,
    date_range: DateRange = Query(DateRange.WEEK, alias="range"),
    current_user: UserProfile = Depends(require_permission("journal:read_all")),
    service: JournalService = Depends(get_journal_service)
):
    """Everyone's logs, filtered by author and date range (Admin only)"""
    return service.list_team_logs(user_id=user_id, date_range=date_range)


@router.get("/team/members", response_model=List[TeamMember])
async def list_team_members(
    current_user: UserProfile = Depends(require_permission("journal:read_all")),
    service: JournalService = Depends(get_journal_service)
):
    return service.list_team_members()
