from datetime import date
from typing import Protocol, Sequence

from copilot_dashboard.models import Scope, SeatRecord, Team, UsageRecord


class UsageSource(Protocol):
    """
    UsageSource stands as a common protocol for the places usage and
    seat data can come from: the vendor REST API or the historical
    document store.

    Sources return labeled UsageRecords, raw SeatRecords (one per page
    or stored snapshot) and Team lists. Non-success answers raise
    UpstreamError.
    """

    @property
    def name(self) -> "str": ...

    async def fetch_metrics(
        self,
        scope: "Scope",
        start_date: "date | None",
        end_date: "date | None",
        teams: "Sequence[str]" = (),
    ) -> "list[UsageRecord]": ...

    async def fetch_seat_records(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
        teams: "Sequence[str]" = (),
        page: "int | None" = None,
    ) -> "list[SeatRecord]": ...

    async def fetch_teams(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
    ) -> "list[Team]": ...

    async def close(self) -> "None": ...
