from dataclasses import replace
from typing import Collection, Iterable

from copilot_dashboard.models import TimeFrame, UsageRecord

# date.weekday() values for saturday and sunday
_WEEKEND = (5, 6)


def _bucket_key(record: "UsageRecord", time_frame: "TimeFrame") -> "str":
    if time_frame is TimeFrame.WEEKLY:
        return record.time_frame_week
    return record.time_frame_month


def group_by_time_frame(
    records: "Iterable[UsageRecord]",
    time_frame: "TimeFrame",
    hide_weekends: "bool" = False,
) -> "list[UsageRecord]":
    """
    buckets labeled records by the given time frame.

    Daily returns every record as-is. Weekly and monthly collapse each
    bucket into one row: the newest member of the bucket stands in for
    the whole bucket, its breakdown re-used without summing the other
    days, and its display label replaced by the bucket label. Buckets
    keep the order in which they first appear.
    """
    items = list(records)
    if hide_weekends:
        items = [r for r in items if r.day.weekday() not in _WEEKEND]

    if time_frame is TimeFrame.DAILY:
        return items

    buckets: "dict[str, UsageRecord]" = {}
    for record in items:
        key = _bucket_key(record, time_frame)
        current = buckets.get(key)
        if current is None or record.day >= current.day:
            buckets[key] = record

    return [
        replace(representative, time_frame_display=label)
        for label, representative in buckets.items()
    ]


def filter_breakdowns(
    records: "Iterable[UsageRecord]",
    languages: "Collection[str]",
    editors: "Collection[str]",
) -> "list[UsageRecord]":
    """
    narrows each record's breakdown to the selected languages and
    editors. An empty selection leaves that facet unfiltered. Records
    left with no breakdown entries are dropped.
    """
    result: "list[UsageRecord]" = []
    for record in records:
        breakdown = tuple(
            b
            for b in record.breakdown
            if (not languages or b.language in languages)
            and (not editors or b.editor in editors)
        )
        if not breakdown:
            continue

        if breakdown != record.breakdown:
            record = replace(record, breakdown=breakdown)
        result.append(record)

    return result
