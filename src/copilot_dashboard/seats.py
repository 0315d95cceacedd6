from datetime import datetime, timedelta, timezone
from typing import Collection, Sequence

from copilot_dashboard.models import SeatAssignment, SeatRecord, SeatSummary

# a seat counts as active when used within this window
ACTIVE_WINDOW = timedelta(days=30)


def is_active(seat: "SeatAssignment", now: "datetime") -> "bool":
    if seat.last_activity_at is None:
        return False
    return seat.last_activity_at >= now - ACTIVE_WINDOW


def count_active(seats: "Sequence[SeatAssignment]", now: "datetime") -> "int":
    return sum(1 for seat in seats if is_active(seat, now))


def _in_teams(seat: "SeatAssignment", teams: "Collection[str]") -> "bool":
    return seat.assigning_team is not None and seat.assigning_team.name in teams


def aggregate_seats(
    records: "Sequence[SeatRecord]",
    team_filter: "Collection[str] | None" = None,
    now: "datetime | None" = None,
) -> "SeatSummary":
    """
    merges seat records (API pages or stored snapshots) into a single
    SeatSummary.

    Seats are flattened in input order and deduplicated by assignee
    login, keeping the first occurrence. When team_filter is non-empty
    only seats assigned through one of those teams survive. The totals
    are always recomputed from the surviving seats, so the summary
    never reports more active seats than seats.
    """
    if not records:
        return SeatSummary(total_seats=0, total_active_seats=0, seats=())

    if now is None:
        now = datetime.now(timezone.utc)

    first = records[0]

    if len(records) == 1:
        seats = list(first.seats)
    else:
        unique: "dict[str, SeatAssignment]" = {}
        for record in records:
            for seat in record.seats:
                unique.setdefault(seat.assignee.login, seat)
        seats = list(unique.values())

    if team_filter:
        seats = [seat for seat in seats if _in_teams(seat, team_filter)]

    return SeatSummary(
        total_seats=len(seats),
        total_active_seats=count_active(seats, now),
        seats=tuple(seats),
        enterprise=first.enterprise,
        organization=first.organization,
        page=first.page,
        last_update=first.last_update,
        date=first.date,
        id=first.id,
    )
