"""Individual and team dashboard service layer."""

from __future__ import annotations

import enum
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from time_analytics.core.auth import RequestUserContext, can_view_team
from time_analytics.core.config import get_settings
from time_analytics.models.entities import Team, TimeEntry
from time_analytics.repositories.time_entry_repository import TimeEntryRepository
from time_analytics.services.aggregation import (
    Q2,
    AggregateBucket,
    LabelDirectory,
    TimeRecord,
    aggregate,
    fill_gaps,
    per_member_average,
    summary_stats,
    total_hours,
)
from time_analytics.services.calendar import (
    HolidayCalendar,
    normalize_weekend_days,
    sri_lanka_calendar,
    working_day_count,
)
from time_analytics.services.charts import ChartType, build_chart, to_series
from time_analytics.services.date_ranges import (
    INDIVIDUAL_CUSTOM_LOOKBACK_DAYS,
    INDIVIDUAL_DEFAULT_PRESET,
    TEAM_CUSTOM_LOOKBACK_DAYS,
    TEAM_DEFAULT_PRESET,
    DatePreset,
    resolve_date_range,
)
from time_analytics.services.exports import (
    INDIVIDUAL_COLUMNS,
    ExportFilePayload,
    aggregate_rows,
    pivot_rows,
    render_export,
    summary_rows,
    team_columns,
    to_rows,
)
from time_analytics.services.periods import (
    DateRange,
    Granularity,
    PeriodKey,
    Weekday,
    chart_label,
    table_label,
    tooltip_label,
)
from time_analytics.services.pivot import (
    DimensionExtractor,
    PivotTable,
    activity_dimension,
    build_pivot,
    member_dimension,
    project_dimension,
)

logger = logging.getLogger(__name__)

DEFAULT_PERSONAL_PROJECTS_LABEL = "Personal Projects"


class ViewMode(str, enum.Enum):
    TIME_ENTRIES = "time_entries"
    ACTIVITY = "activity"
    PROJECT = "project"
    MEMBERS = "members"


class ViewState(str, enum.Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"


DIMENSION_HEADINGS = {
    ViewMode.ACTIVITY: "Activity",
    ViewMode.PROJECT: "Project",
    ViewMode.MEMBERS: "Member",
}


@dataclass(slots=True)
class DashboardQuery:
    preset: DatePreset | None = None
    date_from: date | None = None
    date_to: date | None = None
    grouping: Granularity = Granularity.DAILY
    view_mode: ViewMode = ViewMode.TIME_ENTRIES
    chart_type: ChartType | None = None
    view_state: ViewState = ViewState.DETAILED
    search: str | None = None
    page: int = 1
    per_page: int | None = None


@dataclass(slots=True)
class _Dataset:
    preset: DatePreset
    date_range: DateRange
    entries: list[TimeEntry]
    records: list[TimeRecord]
    labels: LabelDirectory


def _hours(value: Decimal) -> str:
    return str(Decimal(value).quantize(Q2))


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "team"


def records_from_entries(entries: Sequence[TimeEntry]) -> tuple[list[TimeRecord], LabelDirectory]:
    """Project ORM rows onto engine records plus their display labels."""

    records: list[TimeRecord] = []
    actors: dict[int, str] = {}
    projects: dict[int, str] = {}
    activities: dict[int, str] = {}
    issues: dict[int, str] = {}
    for entry in entries:
        records.append(
            TimeRecord(
                spent_on=entry.spent_on,
                hours=Decimal(entry.hours),
                actor_id=entry.user_id,
                project_id=entry.project_id,
                activity_id=entry.activity_id,
                issue_id=entry.issue_id,
                comment=entry.comments or None,
            )
        )
        actors[entry.user_id] = entry.user.name
        projects[entry.project_id] = entry.project.name
        if entry.activity is not None:
            activities[entry.activity.id] = entry.activity.name
        if entry.issue is not None:
            issues[entry.issue.id] = entry.issue.subject
    return records, LabelDirectory(actors=actors, projects=projects, activities=activities, issues=issues)


class TimeAnalyticsService:
    """Service building individual and team time analytics dashboards."""

    def __init__(self, db: Session, *, today: date | None = None) -> None:
        self.db = db
        self.repo = TimeEntryRepository(db)
        self.settings = get_settings()
        self.week_start = Weekday.from_name(self.settings.week_start)
        self.weekend_days = normalize_weekend_days(self.settings.non_working_week_days)
        self.today = today or date.today()

    # ---------- Shared helpers ----------
    def _resolve_range(
        self,
        query: DashboardQuery,
        *,
        default_preset: DatePreset,
        lookback_days: int,
    ) -> tuple[DatePreset, DateRange]:
        preset = query.preset or default_preset
        if query.preset is None and (query.date_from or query.date_to):
            preset = DatePreset.CUSTOM
        date_range = resolve_date_range(
            preset,
            today=self.today,
            week_start=self.week_start,
            custom_from=query.date_from,
            custom_to=query.date_to,
            custom_lookback_days=lookback_days,
        )
        return preset, date_range

    def _holiday_calendar(self, date_range: DateRange) -> HolidayCalendar:
        if self.settings.holiday_calendar == "none":
            return HolidayCalendar()
        return sri_lanka_calendar(self.repo.list_custom_holiday_ranges(date_range))

    def _working_day_summary(self, date_range: DateRange) -> dict[str, object]:
        is_holiday = self._holiday_calendar(date_range)
        holidays = is_holiday.holidays_between(date_range)
        return {
            "working_days": working_day_count(date_range, self.weekend_days, is_holiday),
            "holidays": [day.isoformat() for day in holidays],
        }

    def _per_page(self, query: DashboardQuery) -> int:
        return query.per_page or self.settings.default_per_page

    def _paginate(self, items: list, query: DashboardQuery) -> tuple[list, dict[str, int]]:
        limit = self._per_page(query)
        page = max(query.page, 1)
        offset = (page - 1) * limit
        total_items = len(items)
        return items[offset : offset + limit], {
            "page": page,
            "per_page": limit,
            "total_items": total_items,
            "total_pages": math.ceil(total_items / limit) if total_items else 0,
        }

    def _period_row(self, key: PeriodKey, date_range: DateRange) -> dict[str, str]:
        return {
            "period": key.isoformat(),
            "label": table_label(key),
            "tooltip": tooltip_label(key, date_range),
        }

    def _stats(self, records: list[TimeRecord], query: DashboardQuery, working_days: int) -> dict[str, object]:
        buckets = aggregate(records, query.grouping, self.week_start)
        return summary_stats(buckets, query.grouping, working_days=working_days).as_dict()

    def _period_chart(
        self,
        buckets: list[AggregateBucket],
        chart_type: ChartType,
        date_range: DateRange,
        *,
        dataset_label: str = "Hours",
    ) -> dict[str, object]:
        if not any(bucket.entry_count for bucket in buckets):
            buckets = []
        series = to_series(
            buckets,
            chart_label,
            tooltip_formatter=lambda key: tooltip_label(key, date_range),
        )
        return build_chart(series, chart_type, dataset_label=dataset_label)

    def _pivot_chart(
        self,
        pivot: PivotTable,
        chart_type: ChartType,
        view_state: ViewState,
        date_range: DateRange,
        *,
        dataset_label: str = "Hours",
    ) -> dict[str, object]:
        if pivot.is_empty:
            return build_chart(to_series([], str), chart_type, dataset_label=dataset_label)
        if view_state is ViewState.SUMMARY:
            series = to_series(pivot.summary_view(), str)
        else:
            series = to_series(
                pivot.detailed_view(),
                chart_label,
                tooltip_formatter=lambda key: tooltip_label(key, date_range),
            )
        return build_chart(series, chart_type, dataset_label=dataset_label)

    def _pivot_table(
        self,
        pivot: PivotTable,
        query: DashboardQuery,
        date_range: DateRange,
    ) -> tuple[dict[str, object], dict[str, int]]:
        dimension_totals = pivot.dimension_totals
        if query.view_state is ViewState.SUMMARY:
            rows, pagination = self._paginate(pivot.summary_view(), query)
            return {
                "heading": DIMENSION_HEADINGS[query.view_mode],
                "rows": [{"label": label, "hours": _hours(value)} for label, value in rows],
                "grand_total": _hours(pivot.grand_total),
            }, pagination

        period_totals = pivot.period_totals
        periods, pagination = self._paginate(list(reversed(pivot.periods)), query)
        return {
            "heading": DIMENSION_HEADINGS[query.view_mode],
            "dimension_values": list(pivot.dimension_values),
            "rows": [
                {
                    **self._period_row(period, date_range),
                    "cells": {
                        label: _hours(value) for label, value in zip(pivot.dimension_values, pivot.row(period))
                    },
                    "total": _hours(period_totals[period]),
                }
                for period in periods
            ],
            "dimension_totals": {label: _hours(value) for label, value in dimension_totals.items()},
            "grand_total": _hours(pivot.grand_total),
        }, pagination

    # ---------- Individual dashboard ----------
    def _individual_dataset(self, context: RequestUserContext, query: DashboardQuery) -> _Dataset:
        preset, date_range = self._resolve_range(
            query,
            default_preset=INDIVIDUAL_DEFAULT_PRESET,
            lookback_days=INDIVIDUAL_CUSTOM_LOOKBACK_DAYS,
        )
        entries = self.repo.list_time_entries(
            user_ids=[context.user_id],
            date_range=date_range,
            search=query.search,
        )
        records, labels = records_from_entries(entries)
        return _Dataset(preset=preset, date_range=date_range, entries=entries, records=records, labels=labels)

    @staticmethod
    def _ensure_individual_view_mode(view_mode: ViewMode) -> None:
        if view_mode is ViewMode.MEMBERS:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="view_mode must be one of: time_entries, activity, project.",
            )

    @staticmethod
    def _individual_extractor(view_mode: ViewMode, labels: LabelDirectory) -> DimensionExtractor:
        if view_mode is ViewMode.ACTIVITY:
            return activity_dimension(labels)
        return project_dimension(labels)

    def individual_dashboard(self, *, context: RequestUserContext, query: DashboardQuery) -> dict[str, object]:
        self._ensure_individual_view_mode(query.view_mode)
        dataset = self._individual_dataset(context, query)
        date_range = dataset.date_range

        default_chart = ChartType.BAR if query.view_mode is ViewMode.TIME_ENTRIES else ChartType.PIE
        chart_type = query.chart_type or default_chart
        working = self._working_day_summary(date_range)
        logger.info(
            "Individual dashboard: user=%s range=%s..%s grouping=%s view_mode=%s entries=%d",
            context.login,
            date_range.start,
            date_range.end,
            query.grouping.value,
            query.view_mode.value,
            len(dataset.records),
        )

        if query.view_mode is ViewMode.TIME_ENTRIES:
            buckets = fill_gaps(
                aggregate(dataset.records, query.grouping, self.week_start),
                date_range,
                query.grouping,
                self.week_start,
            )
            chart = self._period_chart(buckets, chart_type, date_range)
            if query.grouping is Granularity.DAILY:
                page_entries, pagination = self._paginate(list(zip(dataset.entries, dataset.records)), query)
                table: dict[str, object] = {
                    "kind": "entries",
                    "rows": [
                        {
                            "id": entry.id,
                            "date": record.spent_on.isoformat(),
                            "project": dataset.labels.project(record.project_id),
                            "activity": dataset.labels.activity(record.activity_id),
                            "issue_id": record.issue_id,
                            "issue": dataset.labels.issue(record.issue_id),
                            "comment": record.comment,
                            "hours": _hours(record.hours),
                        }
                        for entry, record in page_entries
                    ],
                }
            else:
                page_buckets, pagination = self._paginate(list(reversed(buckets)), query)
                table = {
                    "kind": "periods",
                    "rows": [
                        {**self._period_row(bucket.period, date_range), "hours": _hours(bucket.total_hours)}
                        for bucket in page_buckets
                    ],
                }
        else:
            pivot = build_pivot(
                dataset.records,
                query.grouping,
                self.week_start,
                self._individual_extractor(query.view_mode, dataset.labels),
                date_range=date_range,
            )
            chart = self._pivot_chart(pivot, chart_type, query.view_state, date_range)
            pivot_table, pagination = self._pivot_table(pivot, query, date_range)
            table = {"kind": "pivot", **pivot_table}

        return {
            "user": {"id": context.user_id, "login": context.login, "name": context.display_name},
            "filter": dataset.preset.value,
            "from": date_range.start.isoformat(),
            "to": date_range.end.isoformat(),
            "grouping": query.grouping.value,
            "view_mode": query.view_mode.value,
            "view_state": query.view_state.value,
            "chart_type": chart_type.value,
            "search": query.search or "",
            "summary": {
                "total_hours": _hours(total_hours(dataset.records)),
                "entry_count": len(dataset.records),
                **working,
                "stats": self._stats(dataset.records, query, working["working_days"]),
            },
            "table": table,
            "pagination": pagination,
            "chart": chart,
        }

    def export_individual(
        self,
        *,
        context: RequestUserContext,
        query: DashboardQuery,
        format_name: str,
    ) -> ExportFilePayload:
        self._ensure_individual_view_mode(query.view_mode)
        dataset = self._individual_dataset(context, query)
        date_range = dataset.date_range
        suffix = f"{context.login}_{date_range.start.isoformat()}_{date_range.end.isoformat()}"

        if query.view_mode is ViewMode.TIME_ENTRIES:
            rows = to_rows(dataset.records, INDIVIDUAL_COLUMNS, dataset.labels)
            base_filename = f"time_analytics_{suffix}"
        else:
            pivot = build_pivot(
                dataset.records,
                query.grouping,
                self.week_start,
                self._individual_extractor(query.view_mode, dataset.labels),
                date_range=date_range,
            )
            if query.view_state is ViewState.SUMMARY:
                rows = summary_rows(pivot, DIMENSION_HEADINGS[query.view_mode])
            else:
                rows = pivot_rows(pivot, table_label)
            base_filename = f"time_analytics_{query.view_mode.value}_{suffix}"

        logger.info("Individual export: user=%s file=%s rows=%d", context.login, base_filename, len(rows))
        return render_export(rows, format_name, base_filename)

    # ---------- Team dashboard ----------
    def _resolve_team(self, context: RequestUserContext, team_id: int | None) -> Team:
        if team_id is None:
            if context.is_super_user:
                teams = self.repo.list_teams()
            else:
                teams = [team for team in (self.repo.get_team(item) for item in context.led_team_ids) if team]
            if not teams:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Team analytics are available to team leads only.",
                )
            return teams[0]

        team = self.repo.get_team(team_id)
        if team is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found.")
        if not can_view_team(context, team.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You are not a lead of this team.",
            )
        return team

    def _team_dataset(self, team: Team, query: DashboardQuery) -> tuple[_Dataset, list[int], dict[int, str]]:
        preset, date_range = self._resolve_range(
            query,
            default_preset=TEAM_DEFAULT_PRESET,
            lookback_days=TEAM_CUSTOM_LOOKBACK_DAYS,
        )
        member_ids = self.repo.list_team_member_ids(team.id, date_range)
        team_projects = self.repo.list_team_projects(team.id, date_range)
        umbrella_label = team.personal_projects_label or DEFAULT_PERSONAL_PROJECTS_LABEL
        umbrella = {item.project_id: umbrella_label for item in team_projects if item.is_personal}
        entries = self.repo.list_time_entries(
            user_ids=member_ids,
            project_ids=sorted({item.project_id for item in team_projects}),
            date_range=date_range,
            search=query.search,
            search_member_names=True,
        )
        records, labels = records_from_entries(entries)
        logger.info(
            "Team dataset: team=%s members=%d projects=%d entries=%d",
            team.name,
            len(member_ids),
            len(team_projects),
            len(records),
        )
        dataset = _Dataset(preset=preset, date_range=date_range, entries=entries, records=records, labels=labels)
        return dataset, member_ids, umbrella

    @staticmethod
    def _team_extractor(view_mode: ViewMode, labels: LabelDirectory, umbrella: dict[int, str]) -> DimensionExtractor:
        if view_mode is ViewMode.ACTIVITY:
            return activity_dimension(labels)
        if view_mode is ViewMode.PROJECT:
            return project_dimension(labels, umbrella=umbrella)
        return member_dimension(labels)

    def _accessible_teams(self, context: RequestUserContext) -> list[dict[str, object]]:
        if context.is_super_user:
            teams = self.repo.list_teams()
        else:
            teams = [team for team in (self.repo.get_team(item) for item in context.led_team_ids) if team]
        return [{"id": team.id, "name": team.name} for team in teams]

    def team_dashboard(
        self,
        *,
        context: RequestUserContext,
        query: DashboardQuery,
        team_id: int | None,
    ) -> dict[str, object]:
        team = self._resolve_team(context, team_id)
        dataset, member_ids, umbrella = self._team_dataset(team, query)
        date_range = dataset.date_range
        chart_type = query.chart_type or ChartType.LINE
        dataset_label = "Team Hours" if chart_type is ChartType.PIE else "Hours"
        working = self._working_day_summary(date_range)
        total = total_hours(dataset.records)

        if query.view_mode is ViewMode.TIME_ENTRIES:
            overview = aggregate(dataset.records, query.grouping, self.week_start, descending=True)
            page_buckets, pagination = self._paginate(overview, query)
            table: dict[str, object] = {
                "kind": "periods",
                "rows": [
                    {
                        **self._period_row(bucket.period, date_range),
                        "member_count": bucket.actor_count,
                        "hours": _hours(bucket.total_hours),
                    }
                    for bucket in page_buckets
                ],
            }
            buckets = fill_gaps(overview, date_range, query.grouping, self.week_start)
            chart = self._period_chart(buckets, chart_type, date_range, dataset_label=dataset_label)
        else:
            pivot = build_pivot(
                dataset.records,
                query.grouping,
                self.week_start,
                self._team_extractor(query.view_mode, dataset.labels, umbrella),
                date_range=date_range,
            )
            chart = self._pivot_chart(pivot, chart_type, query.view_state, date_range, dataset_label=dataset_label)
            pivot_table, pagination = self._pivot_table(pivot, query, date_range)
            table = {"kind": "pivot", **pivot_table}

        logger.info(
            "Team dashboard: team=%s range=%s..%s grouping=%s view_mode=%s total_hours=%s",
            team.name,
            date_range.start,
            date_range.end,
            query.grouping.value,
            query.view_mode.value,
            total,
        )
        return {
            "team": {"id": team.id, "name": team.name},
            "teams": self._accessible_teams(context),
            "filter": dataset.preset.value,
            "from": date_range.start.isoformat(),
            "to": date_range.end.isoformat(),
            "grouping": query.grouping.value,
            "view_mode": query.view_mode.value,
            "view_state": query.view_state.value,
            "chart_type": chart_type.value,
            "search": query.search or "",
            "summary": {
                "total_hours": _hours(total),
                "entry_count": len(dataset.records),
                "team_size": len(member_ids),
                "avg_hours_per_member": _hours(per_member_average(total, len(member_ids))),
                **working,
                "stats": self._stats(dataset.records, query, working["working_days"]),
            },
            "table": table,
            "pagination": pagination,
            "chart": chart,
        }

    def export_team(
        self,
        *,
        context: RequestUserContext,
        query: DashboardQuery,
        team_id: int | None,
        format_name: str,
    ) -> ExportFilePayload:
        team = self._resolve_team(context, team_id)
        dataset, _member_ids, umbrella = self._team_dataset(team, query)
        date_range = dataset.date_range
        suffix = f"{_slug(team.name)}_{date_range.start.isoformat()}_{date_range.end.isoformat()}"

        if query.view_mode is ViewMode.TIME_ENTRIES:
            if query.view_state is ViewState.SUMMARY:
                rows = aggregate_rows(aggregate(dataset.records, query.grouping, self.week_start), table_label)
            else:
                rows = to_rows(dataset.records, team_columns(team.name), dataset.labels)
            base_filename = f"team_analytics_{suffix}"
        else:
            pivot = build_pivot(
                dataset.records,
                query.grouping,
                self.week_start,
                self._team_extractor(query.view_mode, dataset.labels, umbrella),
                date_range=date_range,
            )
            if query.view_state is ViewState.SUMMARY:
                rows = summary_rows(pivot, DIMENSION_HEADINGS[query.view_mode])
            else:
                rows = pivot_rows(pivot, table_label)
            base_filename = f"team_analytics_{query.view_mode.value}_{suffix}"

        logger.info("Team export: team=%s file=%s rows=%d", team.name, base_filename, len(rows))
        return render_export(rows, format_name, base_filename)
