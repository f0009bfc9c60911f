"""Tabular export rows and CSV/XLSX file rendering."""

from __future__ import annotations

import csv
import enum
import io
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO

from fastapi import HTTPException, status
from openpyxl import Workbook

from time_analytics.services.aggregation import ZERO, AggregateBucket, LabelDirectory, TimeRecord, total_hours
from time_analytics.services.pivot import NO_ACTIVITY, NO_PROJECT, UNKNOWN_MEMBER, PivotTable
from time_analytics.services.periods import PeriodKey

NOT_AVAILABLE = "N/A"
TOTAL_LABEL = "TOTAL"

Row = list[str]


class ExportFormat(str, enum.Enum):
    CSV = "csv"
    XLSX = "xlsx"


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


@dataclass(frozen=True, slots=True)
class ExportColumn:
    heading: str
    value: Callable[[TimeRecord, LabelDirectory], str]
    is_hours: bool = False


def _hours(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


def _issue(record: TimeRecord, labels: LabelDirectory) -> str:
    if record.issue_id is None:
        return NOT_AVAILABLE
    subject = labels.issue(record.issue_id)
    return f"#{record.issue_id}: {subject}" if subject else f"#{record.issue_id}"


DATE_COLUMN = ExportColumn("Date", lambda record, _labels: record.spent_on.strftime("%Y-%m-%d"))
PROJECT_COLUMN = ExportColumn("Project", lambda record, labels: labels.project(record.project_id) or NO_PROJECT)
ACTIVITY_COLUMN = ExportColumn("Activity", lambda record, labels: labels.activity(record.activity_id) or NO_ACTIVITY)
ISSUE_COLUMN = ExportColumn("Issue", _issue)
COMMENT_COLUMN = ExportColumn("Comment", lambda record, _labels: record.comment or NOT_AVAILABLE)
HOURS_COLUMN = ExportColumn("Hours", lambda record, _labels: _hours(record.hours), is_hours=True)
MEMBER_COLUMN = ExportColumn("Member", lambda record, labels: labels.actor(record.actor_id) or UNKNOWN_MEMBER)

INDIVIDUAL_COLUMNS: tuple[ExportColumn, ...] = (
    DATE_COLUMN,
    PROJECT_COLUMN,
    ACTIVITY_COLUMN,
    ISSUE_COLUMN,
    COMMENT_COLUMN,
    HOURS_COLUMN,
)


def team_columns(team_name: str) -> tuple[ExportColumn, ...]:
    return (
        ExportColumn("Team", lambda _record, _labels: team_name),
        DATE_COLUMN,
        MEMBER_COLUMN,
        PROJECT_COLUMN,
        ISSUE_COLUMN,
        ACTIVITY_COLUMN,
        HOURS_COLUMN,
        ExportColumn("Comments", lambda record, _labels: record.comment or NOT_AVAILABLE),
    )


def _total_row(width: int, label_index: int, value_index: int, value: Decimal) -> Row:
    row = [""] * width
    row[label_index] = TOTAL_LABEL
    row[value_index] = _hours(value)
    return row


def to_rows(
    records: Iterable[TimeRecord],
    columns: Sequence[ExportColumn],
    labels: LabelDirectory,
    *,
    include_total: bool = True,
) -> list[Row]:
    """Header, one row per record, then a blank separator and the TOTAL row."""

    record_list = list(records)
    rows: list[Row] = [[column.heading for column in columns]]
    rows.extend([column.value(record, labels) for column in columns] for record in record_list)
    hours_index = next((index for index, column in enumerate(columns) if column.is_hours), None)
    if include_total and hours_index is not None:
        rows.append([])
        rows.append(_total_row(len(columns), 0, hours_index, total_hours(record_list)))
    return rows


def summary_rows(pivot: PivotTable, heading: str) -> list[Row]:
    rows: list[Row] = [[heading, "Total Hours"]]
    rows.extend([label, _hours(value)] for label, value in pivot.summary_view())
    rows.append([])
    rows.append([TOTAL_LABEL, _hours(pivot.grand_total)])
    return rows


def pivot_rows(pivot: PivotTable, period_formatter: Callable[[PeriodKey], str]) -> list[Row]:
    """Period x dimension grid with a row total column and a TOTAL row."""

    period_totals = pivot.period_totals
    dimension_totals = pivot.dimension_totals
    rows: list[Row] = [["Period", *pivot.dimension_values, "Total"]]
    for period in pivot.periods:
        rows.append(
            [period_formatter(period), *(_hours(cell) for cell in pivot.row(period)), _hours(period_totals[period])]
        )
    rows.append(
        [
            TOTAL_LABEL,
            *(_hours(dimension_totals[label]) for label in pivot.dimension_values),
            _hours(pivot.grand_total),
        ]
    )
    return rows


def aggregate_rows(buckets: Iterable[AggregateBucket], period_formatter: Callable[[PeriodKey], str]) -> list[Row]:
    bucket_list = list(buckets)
    rows: list[Row] = [["Period", "Members", "Hours"]]
    rows.extend(
        [period_formatter(bucket.period), str(bucket.actor_count), _hours(bucket.total_hours)]
        for bucket in bucket_list
    )
    rows.append([])
    rows.append([TOTAL_LABEL, "", _hours(sum((bucket.total_hours for bucket in bucket_list), ZERO))])
    return rows


def render_export(rows: Sequence[Row], format_name: str, base_filename: str) -> ExportFilePayload:
    try:
        export_format = ExportFormat(format_name.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="format must be one of: csv, xlsx.",
        ) from None

    if export_format is ExportFormat.CSV:
        sio = io.StringIO()
        writer = csv.writer(sio)
        writer.writerows(rows)
        return ExportFilePayload(
            media_type="text/csv; charset=utf-8",
            filename=f"{base_filename}.csv",
            content=sio.getvalue().encode("utf-8"),
        )

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "report"
    for row in rows:
        sheet.append(list(row))

    output = BytesIO()
    workbook.save(output)
    return ExportFilePayload(
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=f"{base_filename}.xlsx",
        content=output.getvalue(),
    )
