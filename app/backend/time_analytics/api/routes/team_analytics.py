"""Team time analytics dashboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from time_analytics.api.routes.time_analytics import dashboard_query
from time_analytics.core.auth import RequestUserContext, get_current_user_context
from time_analytics.db.dependencies import get_db_session
from time_analytics.services.analytics_service import DashboardQuery, TimeAnalyticsService

router = APIRouter(prefix="/team-analytics", tags=["team-analytics"])


def _service(db: Session) -> TimeAnalyticsService:
    return TimeAnalyticsService(db)


@router.get("")
def get_team_dashboard(
    team_id: int | None = Query(default=None),
    query: DashboardQuery = Depends(dashboard_query),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.team_dashboard(context=context, query=query, team_id=team_id)
