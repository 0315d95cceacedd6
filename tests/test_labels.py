from datetime import date

from copilot_dashboard.labels import apply_time_frame_label, week_label
from copilot_dashboard.models import UsageRecord


class TestApplyTimeFrameLabel:
    def test_sorts_ascending_by_day(self) -> "None":
        records = [
            UsageRecord(day=date(2024, 1, 3)),
            UsageRecord(day=date(2024, 1, 1)),
            UsageRecord(day=date(2024, 1, 2)),
        ]
        labeled = apply_time_frame_label(records)
        assert [r.day for r in labeled] == [
            date(2024, 1, 1),
            date(2024, 1, 2),
            date(2024, 1, 3),
        ]

    def test_attaches_labels(self) -> "None":
        labeled = apply_time_frame_label([UsageRecord(day=date(2024, 1, 5))])
        record = labeled[0]
        assert record.time_frame_week == "2024-W01"
        assert record.time_frame_month == "2024-01"
        assert record.time_frame_display == "Jan 05"

    def test_does_not_touch_input(self) -> "None":
        original = UsageRecord(day=date(2024, 1, 5))
        apply_time_frame_label([original])
        assert original.time_frame_week == ""

    def test_empty_input(self) -> "None":
        assert apply_time_frame_label([]) == []


class TestWeekLabel:
    def test_uses_iso_year_around_new_year(self) -> "None":
        # monday 2024-12-30 belongs to the first ISO week of 2025
        assert week_label(date(2024, 12, 30)) == "2025-W01"
        assert week_label(date(2025, 1, 5)) == "2025-W01"

    def test_week_starts_on_monday(self) -> "None":
        assert week_label(date(2024, 1, 7)) == "2024-W01"
        assert week_label(date(2024, 1, 8)) == "2024-W02"
