"""ORM model package."""

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

__all__ = [
    "Activity",
    "CustomHoliday",
    "Issue",
    "MembershipRole",
    "Project",
    "Team",
    "TeamMembership",
    "TeamProject",
    "TeamSetting",
    "TeamSettingType",
    "TimeEntry",
    "User",
]
