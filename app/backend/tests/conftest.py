from __future__ import annotations

from collections.abc import Generator
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from time_analytics.db.base import Base
from time_analytics.db.dependencies import get_db_session
import time_analytics.models.entities  # noqa: F401
from time_analytics.main import create_app
from time_analytics.models.entities import (
    Activity,
    CustomHoliday,
    Issue,
    MembershipRole,
    Project,
    Team,
    TeamMembership,
    TeamProject,
    TeamSetting,
    TeamSettingType,
    TimeEntry,
    User,
)

TEST_TABLES = [
    User.__table__,
    Project.__table__,
    Issue.__table__,
    Activity.__table__,
    TimeEntry.__table__,
    Team.__table__,
    TeamMembership.__table__,
    TeamProject.__table__,
    TeamSetting.__table__,
    CustomHoliday.__table__,
]


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=TEST_TABLES)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(login: str = "admin") -> dict[str, str]:
    return {"X-User-Login": login}


# ---------- Seed helpers ----------
def add_user(db: Session, *, login: str, firstname: str = "", lastname: str = "") -> User:
    user = User(login=login, firstname=firstname, lastname=lastname)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_project(db: Session, *, name: str, status: int = 1) -> Project:
    project = Project(name=name, identifier=name.lower().replace(" ", "-"), status=status)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def add_activity(db: Session, *, name: str) -> Activity:
    activity = Activity(name=name)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def add_issue(db: Session, *, project: Project, subject: str) -> Issue:
    issue = Issue(project_id=project.id, subject=subject)
    db.add(issue)
    db.commit()
    db.refresh(issue)
    return issue


def add_entry(
    db: Session,
    *,
    user: User,
    project: Project,
    spent_on: date,
    hours: str,
    activity: Activity | None = None,
    issue: Issue | None = None,
    comments: str | None = None,
) -> TimeEntry:
    entry = TimeEntry(
        user_id=user.id,
        project_id=project.id,
        activity_id=activity.id if activity else None,
        issue_id=issue.id if issue else None,
        spent_on=spent_on,
        hours=Decimal(hours),
        comments=comments,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def add_team(db: Session, *, name: str, personal_projects_label: str | None = None) -> Team:
    team = Team(name=name, personal_projects_label=personal_projects_label)
    db.add(team)
    db.commit()
    db.refresh(team)
    return team


def add_membership(
    db: Session,
    *,
    team: Team,
    user: User,
    role: MembershipRole = MembershipRole.MEMBER,
    start_date: date = date(2020, 1, 1),
    end_date: date | None = None,
) -> TeamMembership:
    membership = TeamMembership(team_id=team.id, user_id=user.id, role=role, start_date=start_date, end_date=end_date)
    db.add(membership)
    db.commit()
    return membership


def add_team_project(
    db: Session,
    *,
    team: Team,
    project: Project,
    start_date: date = date(2020, 1, 1),
    end_date: date | None = None,
    is_personal: bool = False,
) -> TeamProject:
    row = TeamProject(
        team_id=team.id,
        project_id=project.id,
        start_date=start_date,
        end_date=end_date,
        is_personal=is_personal,
    )
    db.add(row)
    db.commit()
    return row


def add_setting(db: Session, *, user: User, setting_type: TeamSettingType) -> TeamSetting:
    row = TeamSetting(user_id=user.id, setting_type=setting_type, active=True)
    db.add(row)
    db.commit()
    return row
