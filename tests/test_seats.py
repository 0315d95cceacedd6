from datetime import date, datetime, timedelta, timezone

import pytest

from copilot_dashboard.models import (
    Assignee,
    SeatAssignment,
    SeatRecord,
    SeatSummary,
    Team,
)
from copilot_dashboard.seats import aggregate_seats, is_active

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _seat(
    login: "str",
    days_ago: "int | None" = 0,
    team: "str | None" = None,
) -> "SeatAssignment":
    return SeatAssignment(
        assignee=Assignee(login=login),
        assigning_team=Team(name=team) if team else None,
        last_activity_at=None if days_ago is None else NOW - timedelta(days=days_ago),
    )


def _page(*seats: "SeatAssignment", page: "int" = 1) -> "SeatRecord":
    return SeatRecord(
        seats=seats,
        total_seats=len(seats),
        organization="acme",
        page=page,
        date=date(2024, 6, 1),
    )


def _as_record(summary: "SeatSummary") -> "SeatRecord":
    return SeatRecord(
        seats=summary.seats,
        total_seats=summary.total_seats,
        total_active_seats=summary.total_active_seats,
        enterprise=summary.enterprise,
        organization=summary.organization,
        page=summary.page,
        last_update=summary.last_update,
        date=summary.date,
        id=summary.id,
    )


class TestAggregateSeats:
    def test_no_records(self) -> "None":
        assert aggregate_seats([], now=NOW) == SeatSummary(
            total_seats=0, total_active_seats=0, seats=()
        )

    def test_duplicate_login_across_pages(self) -> "None":
        pages = [
            _page(_seat("a", 0), _seat("b", 40), page=1),
            _page(_seat("a", 0), page=2),
        ]
        summary = aggregate_seats(pages, now=NOW)

        assert summary.total_seats == 2
        assert summary.total_active_seats == 1
        assert [s.assignee.login for s in summary.seats] == ["a", "b"]

    def test_first_occurrence_wins(self) -> "None":
        first = _seat("a", 0, team="platform")
        later = _seat("a", 50, team="mobile")
        summary = aggregate_seats([_page(first), _page(later, page=2)], now=NOW)

        assert summary.seats == (first,)
        assert summary.total_active_seats == 1

    def test_dedup_happens_before_team_filter(self) -> "None":
        pages = [
            _page(_seat("a", 0, team="platform")),
            _page(_seat("a", 0, team="mobile"), page=2),
        ]
        summary = aggregate_seats(pages, team_filter=["mobile"], now=NOW)
        assert summary.total_seats == 0

    def test_single_record_is_filtered_and_recounted(self) -> "None":
        record = SeatRecord(
            seats=(
                _seat("a", 0, team="platform"),
                _seat("b", 2, team="mobile"),
                _seat("c", 0),
            ),
            total_seats=10,
            total_active_seats=10,
        )
        summary = aggregate_seats([record], team_filter=["platform"], now=NOW)

        assert summary.total_seats == 1
        assert summary.total_active_seats == 1
        assert summary.seats[0].assignee.login == "a"

    def test_empty_team_filter_keeps_every_seat(self) -> "None":
        summary = aggregate_seats([_page(_seat("a"), _seat("b"))], [], now=NOW)
        assert summary.total_seats == 2

    def test_metadata_comes_from_first_record(self) -> "None":
        summary = aggregate_seats(
            [_page(_seat("a"), page=1), _page(_seat("b"), page=2)], now=NOW
        )
        assert summary.organization == "acme"
        assert summary.page == 1
        assert summary.date == date(2024, 6, 1)

    @pytest.mark.parametrize(
        "pages",
        [
            [_page(_seat("a", None), _seat("b", 31))],
            [_page(_seat("a", 0)), _page(_seat("a", 0), _seat("b", 1))],
            [_page(_seat("a", 29, team="x"), _seat("b", 45, team="y"))],
            [_page()],
        ],
    )
    def test_active_never_exceeds_total(self, pages: "list[SeatRecord]") -> "None":
        summary = aggregate_seats(pages, now=NOW)
        assert summary.total_active_seats <= summary.total_seats

    @pytest.mark.parametrize("team_filter", [None, ["platform"]])
    def test_aggregation_is_idempotent(
        self, team_filter: "list[str] | None"
    ) -> "None":
        pages = [
            _page(_seat("a", 0, team="platform"), _seat("b", 40, team="platform")),
            _page(_seat("a", 3, team="mobile"), _seat("c", 1), page=2),
        ]
        once = aggregate_seats(pages, team_filter, now=NOW)
        twice = aggregate_seats([_as_record(once)], team_filter, now=NOW)
        assert twice == once


class TestIsActive:
    def test_missing_activity_is_inactive(self) -> "None":
        assert is_active(_seat("a", None), NOW) is False

    def test_window_boundary_is_inclusive(self) -> "None":
        assert is_active(_seat("a", 30), NOW) is True
        assert is_active(_seat("a", 31), NOW) is False
