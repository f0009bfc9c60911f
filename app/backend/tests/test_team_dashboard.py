from __future__ import annotations

import csv
import io
from datetime import date

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import (
    add_activity,
    add_entry,
    add_membership,
    add_project,
    add_setting,
    add_team,
    add_team_project,
    add_user,
    auth_headers,
)
from time_analytics.models.entities import MembershipRole, TeamSettingType

JANUARY = {"filter": "custom", "from": "2025-01-01", "to": "2025-01-31", "grouping": "weekly"}


def _seed(db: Session) -> dict[str, int]:
    ann = add_user(db, login="ann", firstname="Ann", lastname="Perera")
    bob = add_user(db, login="bob", firstname="Bob", lastname="Silva")
    carl = add_user(db, login="carl", firstname="Carl", lastname="Fernando")
    dana = add_user(db, login="dana", firstname="Dana", lastname="Jayasuriya")
    erin = add_user(db, login="erin", firstname="Erin", lastname="Wick")

    platform = add_team(db, name="Platform")
    data = add_team(db, name="Data")
    add_membership(db, team=platform, user=ann, role=MembershipRole.LEAD)
    add_membership(db, team=platform, user=bob)
    add_membership(db, team=platform, user=carl)
    add_membership(db, team=platform, user=dana, end_date=date(2024, 12, 31))
    add_setting(db, user=carl, setting_type=TeamSettingType.EXCLUSION)
    add_setting(db, user=erin, setting_type=TeamSettingType.SUPER_USER)

    website = add_project(db, name="Website")
    side_a = add_project(db, name="Side A")
    side_b = add_project(db, name="Side B")
    other = add_project(db, name="Other")
    add_team_project(db, team=platform, project=website)
    add_team_project(db, team=platform, project=side_a, is_personal=True)
    add_team_project(db, team=platform, project=side_b, is_personal=True)

    development = add_activity(db, name="Development")
    testing = add_activity(db, name="Testing")

    add_entry(db, user=ann, project=website, spent_on=date(2025, 1, 6), hours="4", activity=development)
    add_entry(db, user=bob, project=website, spent_on=date(2025, 1, 7), hours="6", activity=testing)
    add_entry(db, user=bob, project=side_a, spent_on=date(2025, 1, 8), hours="2", activity=development)
    add_entry(db, user=ann, project=side_b, spent_on=date(2025, 1, 20), hours="1", activity=development)
    add_entry(db, user=carl, project=website, spent_on=date(2025, 1, 6), hours="8", activity=development)
    add_entry(db, user=bob, project=other, spent_on=date(2025, 1, 9), hours="5", activity=development)
    return {"platform": platform.id, "data": data.id}


def test_team_time_overview(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    response = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["platform"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["team"]["name"] == "Platform"
    assert body["chart_type"] == "line"
    summary = body["summary"]
    assert summary["team_size"] == 2
    assert summary["total_hours"] == "13.00"
    assert summary["avg_hours_per_member"] == "6.50"
    assert summary["stats"]["average"] == "6.50"
    assert summary["stats"]["maximum"] == "12.00"
    assert summary["stats"]["minimum"] == "1.00"

    rows = body["table"]["rows"]
    assert [(row["period"], row["member_count"], row["hours"]) for row in rows] == [
        ("2025-01-20", 1, "1.00"),
        ("2025-01-06", 2, "12.00"),
    ]
    assert len(body["chart"]["data"]["labels"]) == 5


def test_default_team_is_first_led_team(client: TestClient, db_session: Session) -> None:
    _seed(db_session)

    response = client.get("/api/v1/team-analytics", headers=auth_headers("ann"), params=JANUARY)

    assert response.status_code == 200
    assert response.json()["team"]["name"] == "Platform"


def test_personal_projects_collapse_under_umbrella(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    response = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["platform"], "view_mode": "project", "view_state": "summary"},
    )

    assert response.status_code == 200
    assert response.json()["table"]["rows"] == [
        {"label": "Website", "hours": "10.00"},
        {"label": "Personal Projects", "hours": "3.00"},
    ]


def test_members_view(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    response = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["platform"], "view_mode": "members", "view_state": "summary"},
    )

    assert response.status_code == 200
    assert response.json()["table"]["rows"] == [
        {"label": "Bob Silva", "hours": "8.00"},
        {"label": "Ann Perera", "hours": "5.00"},
    ]


def test_search_matches_member_names(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    response = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["platform"], "search": "silva"},
    )

    assert response.status_code == 200
    assert response.json()["summary"]["total_hours"] == "8.00"


def test_team_access_rules(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    not_a_lead = client.get("/api/v1/team-analytics", headers=auth_headers("bob"), params=JANUARY)
    other_team = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["data"]},
    )
    missing_team = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": 999},
    )
    super_user = client.get(
        "/api/v1/team-analytics",
        headers=auth_headers("erin"),
        params={**JANUARY, "team_id": teams["data"]},
    )

    assert not_a_lead.status_code == 403
    assert other_team.status_code == 403
    assert missing_team.status_code == 404
    assert super_user.status_code == 200
    assert super_user.json()["summary"]["team_size"] == 0


def test_team_csv_export(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    response = client.get(
        "/api/v1/exports/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["platform"]},
    )

    assert response.status_code == 200
    assert 'filename="team_analytics_platform_2025-01-01_2025-01-31.csv"' in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Team", "Date", "Member", "Project", "Issue", "Activity", "Hours", "Comments"]
    assert rows[1] == ["Platform", "2025-01-20", "Ann Perera", "Side B", "N/A", "Development", "1.00", "N/A"]
    assert rows[-1] == ["TOTAL", "", "", "", "", "", "13.00", ""]


def test_team_overview_export(client: TestClient, db_session: Session) -> None:
    teams = _seed(db_session)

    response = client.get(
        "/api/v1/exports/team-analytics",
        headers=auth_headers("ann"),
        params={**JANUARY, "team_id": teams["platform"], "view_state": "summary"},
    )

    assert response.status_code == 200
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Period", "Members", "Hours"]
    assert rows[1] == ["2025-2", "2", "12.00"]
    assert rows[-1] == ["TOTAL", "", "13.00"]
