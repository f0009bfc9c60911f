"""Export endpoints for dashboard datasets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from time_analytics.api.routes.time_analytics import dashboard_query
from time_analytics.core.auth import RequestUserContext, get_current_user_context
from time_analytics.db.dependencies import get_db_session
from time_analytics.services.analytics_service import DashboardQuery, TimeAnalyticsService
from time_analytics.services.exports import ExportFilePayload, ExportFormat

router = APIRouter(prefix="/exports", tags=["exports"])


def _service(db: Session) -> TimeAnalyticsService:
    return TimeAnalyticsService(db)


def _download(exported: ExportFilePayload) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.get("/time-analytics/me")
def export_individual_dashboard(
    format: ExportFormat = Query(default=ExportFormat.CSV),
    query: DashboardQuery = Depends(dashboard_query),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    exported = service.export_individual(context=context, query=query, format_name=format.value)
    return _download(exported)


@router.get("/team-analytics")
def export_team_dashboard(
    team_id: int | None = Query(default=None),
    format: ExportFormat = Query(default=ExportFormat.CSV),
    query: DashboardQuery = Depends(dashboard_query),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    exported = service.export_team(context=context, query=query, team_id=team_id, format_name=format.value)
    return _download(exported)
