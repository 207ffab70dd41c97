import logging
from datetime import datetime, timedelta, timezone
from supabase import Client
from toolhub.modules.usage.schemas import DailyUsage, FeatureUsage, UsageLog, UsageReport, UsageSummary
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

RECENT_LOG_LIMIT = 10


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def build_report(rows: List[Dict[str, Any]], recent: List[Dict[str, Any]], days: int, now: datetime) -> UsageReport:
    """Aggregate the usage rows of the window into summary, per-feature and per-day views."""
    summary = UsageSummary()
    features: Dict[str, FeatureUsage] = {}
    today = now.date()
    daily = {today - timedelta(days=offset): DailyUsage(day=today - timedelta(days=offset)) for offset in range(days + 1)}

    for row in rows:
        tokens = int(row.get("total_tokens") or 0)
        cost = _number(row.get("estimated_cost"))
        summary.total_calls += 1
        summary.total_tokens += tokens
        summary.input_tokens += int(row.get("input_tokens") or 0)
        summary.output_tokens += int(row.get("output_tokens") or 0)
        summary.total_cost += cost

        name = row.get("feature") or "unknown"
        feature = features.setdefault(name, FeatureUsage(feature=name))
        feature.calls += 1
        feature.tokens += tokens
        feature.cost += cost

        created_at = row.get("created_at")
        if created_at:
            day = datetime.fromisoformat(str(created_at).replace("Z", "+00:00")).date()
            if day in daily:
                daily[day].calls += 1
                daily[day].cost += cost

    return UsageReport(
        days=days,
        summary=summary,
        by_feature=sorted(features.values(), key=lambda f: f.cost, reverse=True),
        daily=[daily[day] for day in sorted(daily)],
        recent=[UsageLog(**{**row, "estimated_cost": _number(row.get("estimated_cost"))}) for row in recent],
    )


class UsageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_report(self, days: int = 30, now: Optional[datetime] = None) -> UsageReport:
        """OpenAI usage over the last `days` days plus the most recent calls"""
        now = now or datetime.now(timezone.utc)
        start = now - timedelta(days=days)
        try:
            rows = self.supabase.table("openai_usage")\
                .select("feature, total_tokens, input_tokens, output_tokens, estimated_cost, created_at")\
                .gte("created_at", start.isoformat())\
                .execute().data or []
            recent = self.supabase.table("openai_usage")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(RECENT_LOG_LIMIT)\
                .execute().data or []
        except Exception as e:
            logger.error(f"Usage report failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return build_report(rows, recent, days, now)
