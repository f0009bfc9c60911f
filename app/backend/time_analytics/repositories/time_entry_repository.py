"""Repository helpers for time entries, teams and holiday records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from time_analytics.models.entities import (
    PROJECT_STATUS_ACTIVE,
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
from time_analytics.services.periods import DateRange


def _overlaps(start_column, end_column, date_range: DateRange):
    """Interval overlap with an open-ended (NULL) end date."""

    return and_(
        start_column <= date_range.end,
        or_(end_column.is_(None), end_column >= date_range.start),
    )


class TimeEntryRepository:
    """Read-side queries used by the analytics dashboards."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Users and settings ----------
    def get_user_by_login(self, login: str) -> User | None:
        return self.db.scalar(select(User).where(func.lower(User.login) == login.strip().lower()))

    def _setting_user_ids(self, setting_type: TeamSettingType) -> set[int]:
        return set(
            self.db.scalars(
                select(TeamSetting.user_id).where(
                    and_(TeamSetting.setting_type == setting_type, TeamSetting.active.is_(True))
                )
            ).all()
        )

    def excluded_user_ids(self) -> set[int]:
        return self._setting_user_ids(TeamSettingType.EXCLUSION)

    def is_super_user(self, user_id: int) -> bool:
        return user_id in self._setting_user_ids(TeamSettingType.SUPER_USER)

    # ---------- Teams ----------
    def get_team(self, team_id: int) -> Team | None:
        return self.db.scalar(select(Team).where(Team.id == team_id))

    def list_teams(self) -> list[Team]:
        return self.db.scalars(select(Team).order_by(Team.name.asc())).all()

    def list_led_teams(self, user_id: int, as_of: date) -> list[Team]:
        return self.db.scalars(
            select(Team)
            .join(TeamMembership, TeamMembership.team_id == Team.id)
            .where(
                and_(
                    TeamMembership.user_id == user_id,
                    TeamMembership.role == MembershipRole.LEAD,
                    _overlaps(TeamMembership.start_date, TeamMembership.end_date, DateRange(as_of, as_of)),
                )
            )
            .distinct()
            .order_by(Team.name.asc())
        ).all()

    def list_team_member_ids(self, team_id: int, date_range: DateRange) -> list[int]:
        """Members whose membership overlaps the range, excluded users removed."""

        member_ids = self.db.scalars(
            select(TeamMembership.user_id)
            .where(
                and_(
                    TeamMembership.team_id == team_id,
                    _overlaps(TeamMembership.start_date, TeamMembership.end_date, date_range),
                )
            )
            .distinct()
            .order_by(TeamMembership.user_id.asc())
        ).all()
        excluded = self.excluded_user_ids()
        return [user_id for user_id in member_ids if user_id not in excluded]

    def list_team_projects(self, team_id: int, date_range: DateRange) -> list[TeamProject]:
        return self.db.scalars(
            select(TeamProject)
            .where(
                and_(
                    TeamProject.team_id == team_id,
                    _overlaps(TeamProject.start_date, TeamProject.end_date, date_range),
                )
            )
            .order_by(TeamProject.project_id.asc())
        ).all()

    # ---------- Time entries ----------
    def list_time_entries(
        self,
        *,
        user_ids: Sequence[int],
        date_range: DateRange,
        project_ids: Sequence[int] | None = None,
        search: str | None = None,
        search_member_names: bool = False,
    ) -> list[TimeEntry]:
        """Entries on active projects within the range, most recent first."""

        if not user_ids or date_range.is_empty or (project_ids is not None and not project_ids):
            return []

        stmt = (
            select(TimeEntry)
            .join(Project, Project.id == TimeEntry.project_id)
            .join(User, User.id == TimeEntry.user_id)
            .outerjoin(Issue, Issue.id == TimeEntry.issue_id)
            .where(
                and_(
                    TimeEntry.user_id.in_(list(user_ids)),
                    TimeEntry.spent_on >= date_range.start,
                    TimeEntry.spent_on <= date_range.end,
                    Project.status == PROJECT_STATUS_ACTIVE,
                )
            )
        )
        if project_ids is not None:
            stmt = stmt.where(TimeEntry.project_id.in_(list(project_ids)))

        term = (search or "").strip()
        if term:
            pattern = f"%{term.lower()}%"
            conditions = [
                func.lower(Project.name).like(pattern),
                func.lower(Issue.subject).like(pattern),
                func.lower(TimeEntry.comments).like(pattern),
            ]
            if search_member_names:
                conditions.append(func.lower(User.firstname).like(pattern))
                conditions.append(func.lower(User.lastname).like(pattern))
            stmt = stmt.where(or_(*conditions))

        stmt = stmt.order_by(TimeEntry.spent_on.desc(), TimeEntry.created_on.desc(), TimeEntry.id.desc())
        return self.db.scalars(stmt).unique().all()

    # ---------- Holidays ----------
    def list_custom_holiday_ranges(self, date_range: DateRange) -> list[DateRange]:
        rows = self.db.scalars(
            select(CustomHoliday)
            .where(
                and_(
                    CustomHoliday.active.is_(True),
                    _overlaps(CustomHoliday.start_date, CustomHoliday.end_date, date_range),
                )
            )
            .order_by(CustomHoliday.start_date.asc())
        ).all()
        return [DateRange(row.start_date, row.end_date) for row in rows]
