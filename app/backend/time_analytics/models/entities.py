"""ORM entities for host time-tracking tables and analytics plugin tables."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from time_analytics.db.base import Base

PROJECT_STATUS_ACTIVE = 1
USER_STATUS_ACTIVE = 1


class MembershipRole(str, enum.Enum):
    LEAD = "lead"
    MEMBER = "member"


class TeamSettingType(str, enum.Enum):
    EXCLUSION = "exclusion"
    SUPER_USER = "super_user"


# ---------- Host tables (read-only) ----------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    login: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    firstname: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    lastname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=USER_STATUS_ACTIVE)

    @property
    def name(self) -> str:
        full_name = f"{self.firstname} {self.lastname}".strip()
        return full_name or self.login


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    identifier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=PROJECT_STATUS_ACTIVE)


class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey("projects.id"), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)


class Activity(Base):
    """Time-entry activity, stored by the host in its enumerations table."""

    __tablename__ = "enumerations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    type: Mapped[str | None] = mapped_column(String(255), nullable=True, default="TimeEntryActivity")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        Index("ix_time_entries_user_spent_on", "user_id", "spent_on"),
        Index("ix_time_entries_project_id", "project_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey("projects.id"), nullable=False)
    issue_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("issues.id"), nullable=True)
    activity_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("enumerations.id"), nullable=True)
    spent_on: Mapped[date] = mapped_column(Date, nullable=False)
    hours: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    comments: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_on: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    user: Mapped[User] = relationship(lazy="joined")
    project: Mapped[Project] = relationship(lazy="joined")
    issue: Mapped[Issue | None] = relationship(lazy="joined")
    activity: Mapped[Activity | None] = relationship(lazy="joined")


# ---------- Analytics plugin tables ----------
class Team(Base):
    __tablename__ = "ta_teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    personal_projects_label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class TeamMembership(Base):
    __tablename__ = "ta_team_memberships"
    __table_args__ = (
        CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_ta_team_memberships_dates"),
        Index("ix_ta_team_memberships_team_dates", "team_id", "user_id", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("ta_teams.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    role: Mapped[MembershipRole] = mapped_column(
        SQLEnum(
            MembershipRole,
            name="ta_membership_role",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=MembershipRole.MEMBER,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    team: Mapped[Team] = relationship(lazy="joined")


class TeamProject(Base):
    __tablename__ = "ta_team_projects"
    __table_args__ = (
        CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_ta_team_projects_dates"),
        Index("ix_ta_team_projects_team_dates", "team_id", "project_id", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("ta_teams.id"), nullable=False)
    project_id: Mapped[int] = mapped_column(Integer, ForeignKey("projects.id"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Personal projects of members are reported under the team's umbrella label.
    is_personal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class TeamSetting(Base):
    __tablename__ = "ta_team_settings"
    __table_args__ = (UniqueConstraint("user_id", "setting_type", name="uq_ta_team_settings_user_type"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    setting_type: Mapped[TeamSettingType] = mapped_column(
        SQLEnum(
            TeamSettingType,
            name="ta_team_setting_type",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class CustomHoliday(Base):
    __tablename__ = "custom_holidays"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_custom_holidays_dates"),
        Index("ix_custom_holidays_range", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
