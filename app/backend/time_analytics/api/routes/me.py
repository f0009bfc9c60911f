"""Current user endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from time_analytics.core.auth import RequestUserContext, get_current_user_context
from time_analytics.db.dependencies import get_db_session
from time_analytics.repositories.time_entry_repository import TimeEntryRepository

router = APIRouter(prefix="/me", tags=["me"])


@router.get("")
def get_me(
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Return the current user and the teams they lead."""

    repo = TimeEntryRepository(db)
    led_teams = [repo.get_team(team_id) for team_id in context.led_team_ids]
    return {
        "id": context.user_id,
        "login": context.login,
        "display_name": context.display_name,
        "is_super_user": context.is_super_user,
        "is_team_lead": context.is_team_lead,
        "led_teams": [{"id": team.id, "name": team.name} for team in led_teams if team is not None],
    }
