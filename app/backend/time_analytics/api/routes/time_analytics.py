"""Individual time analytics dashboard endpoint."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from time_analytics.core.auth import RequestUserContext, get_current_user_context
from time_analytics.db.dependencies import get_db_session
from time_analytics.services.analytics_service import DashboardQuery, TimeAnalyticsService, ViewMode, ViewState
from time_analytics.services.charts import ChartType
from time_analytics.services.date_ranges import DatePreset
from time_analytics.services.periods import Granularity

router = APIRouter(prefix="/time-analytics", tags=["time-analytics"])


def _service(db: Session) -> TimeAnalyticsService:
    return TimeAnalyticsService(db)


def dashboard_query(
    filter: DatePreset | None = Query(default=None),
    from_: date | None = Query(default=None, alias="from"),
    to: date | None = Query(default=None),
    grouping: Granularity = Query(default=Granularity.DAILY),
    view_mode: ViewMode = Query(default=ViewMode.TIME_ENTRIES),
    chart_type: ChartType | None = Query(default=None),
    view_state: ViewState = Query(default=ViewState.DETAILED),
    search: str | None = Query(default=None, max_length=255),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, le=100),
) -> DashboardQuery:
    """Shared dashboard query parameters; unknown enum values are rejected with 422."""

    return DashboardQuery(
        preset=filter,
        date_from=from_,
        date_to=to,
        grouping=grouping,
        view_mode=view_mode,
        chart_type=chart_type,
        view_state=view_state,
        search=search,
        page=page,
        per_page=per_page,
    )


@router.get("/me")
def get_individual_dashboard(
    query: DashboardQuery = Depends(dashboard_query),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.individual_dashboard(context=context, query=query)
