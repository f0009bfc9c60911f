"""Authentication context extraction and team access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from time_analytics.core.config import get_settings
from time_analytics.db.dependencies import get_db_session
from time_analytics.models.entities import USER_STATUS_ACTIVE
from time_analytics.repositories.time_entry_repository import TimeEntryRepository


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated host user resolved from headers and DB state."""

    user_id: int
    login: str
    display_name: str
    is_super_user: bool
    led_team_ids: tuple[int, ...]

    @property
    def is_team_lead(self) -> bool:
        return bool(self.led_team_ids)


def _resolve_login(x_user_login: str | None) -> str:
    if x_user_login and x_user_login.strip():
        return x_user_login.strip()

    settings = get_settings()
    if settings.auth_allow_dev_principal:
        return settings.auth_dev_login.strip()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing identity header. Expected X-User-Login or enable development principal fallback.",
    )


def get_current_user_context(
    x_user_login: str | None = Header(default=None, alias="X-User-Login"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve the current host user and the teams they lead today.

    The host's proxy is trusted to set ``X-User-Login`` after authentication.
    """

    login = _resolve_login(x_user_login)
    repo = TimeEntryRepository(db)
    user = repo.get_user_by_login(login)
    if user is None or user.status != USER_STATUS_ACTIVE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown or inactive user.")

    led_teams = repo.list_led_teams(user.id, date.today())
    return RequestUserContext(
        user_id=user.id,
        login=user.login,
        display_name=user.name,
        is_super_user=repo.is_super_user(user.id),
        led_team_ids=tuple(team.id for team in led_teams),
    )


def can_view_team(context: RequestUserContext, team_id: int) -> bool:
    """Super users see every team; leads see the teams they lead."""

    return context.is_super_user or team_id in context.led_team_ids
