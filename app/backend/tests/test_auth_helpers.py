from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import add_membership, add_setting, add_team, add_user, auth_headers
from time_analytics.core.auth import RequestUserContext, can_view_team
from time_analytics.models.entities import MembershipRole, TeamSettingType


def _context(*, is_super_user: bool = False, led_team_ids: tuple[int, ...] = ()) -> RequestUserContext:
    return RequestUserContext(
        user_id=1,
        login="ann",
        display_name="Ann Perera",
        is_super_user=is_super_user,
        led_team_ids=led_team_ids,
    )


def test_can_view_team_for_lead() -> None:
    context = _context(led_team_ids=(3,))

    assert context.is_team_lead is True
    assert can_view_team(context, 3) is True
    assert can_view_team(context, 4) is False


def test_super_user_can_view_any_team() -> None:
    context = _context(is_super_user=True)

    assert context.is_team_lead is False
    assert can_view_team(context, 42) is True


def test_me_endpoint_lists_led_teams(client: TestClient, db_session: Session) -> None:
    user = add_user(db_session, login="ann", firstname="Ann", lastname="Perera")
    team = add_team(db_session, name="Platform")
    add_membership(db_session, team=team, user=user, role=MembershipRole.LEAD)
    add_setting(db_session, user=user, setting_type=TeamSettingType.SUPER_USER)

    response = client.get("/api/v1/me", headers=auth_headers("ann"))

    assert response.status_code == 200
    body = response.json()
    assert body["display_name"] == "Ann Perera"
    assert body["is_super_user"] is True
    assert body["led_teams"] == [{"id": team.id, "name": "Platform"}]


def test_unknown_login_is_unauthorized(client: TestClient) -> None:
    response = client.get("/api/v1/me", headers=auth_headers("ghost"))

    assert response.status_code == 401
