"""Health check endpoints."""

from fastapi import APIRouter

from time_analytics.core.config import get_settings

router = APIRouter()


@router.get("/health")
def health() -> dict[str, object]:
    """Liveness plus the calendar settings dashboards are computed with."""

    settings = get_settings()
    return {
        "status": "ok",
        "week_start": settings.week_start,
        "non_working_week_days": list(settings.non_working_week_days),
        "holiday_calendar": settings.holiday_calendar,
    }
