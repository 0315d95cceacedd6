from dataclasses import replace
from datetime import date
from typing import Iterable

from copilot_dashboard.models import UsageRecord


def week_label(day: "date") -> "str":
    """
    ISO week bucket, e.g. "2024-W03". Uses the ISO year so the days
    around new year land in the same bucket as the rest of their week.
    """
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_label(day: "date") -> "str":
    return day.strftime("%Y-%m")


def display_label(day: "date") -> "str":
    return day.strftime("%b %d")


def apply_time_frame_label(records: "Iterable[UsageRecord]") -> "list[UsageRecord]":
    """
    sorts records ascending by day and attaches the week, month and
    display labels to each of them.
    """
    return [
        replace(
            record,
            time_frame_week=week_label(record.day),
            time_frame_month=month_label(record.day),
            time_frame_display=display_label(record.day),
        )
        for record in sorted(records, key=lambda r: r.day)
    ]
