import asyncio
from datetime import date
from typing import Sequence

import pytest
from prometheus_client import CollectorRegistry

from copilot_dashboard.models import Scope, SeatRecord, Team, UsageRecord


class FakeSource:
    """
    An in-memory UsageSource. Responses are keyed by the requested team
    tuple, falling back to the () entry. Setting an error makes the
    matching fetch raise it, and a gate makes it wait for the event.
    """

    def __init__(
        self,
        metrics: "dict[tuple[str, ...], list[UsageRecord]] | None" = None,
        seat_records: "list[SeatRecord] | None" = None,
        teams: "list[Team] | None" = None,
    ) -> "None":
        self.metrics = metrics or {(): []}
        self.seat_records = seat_records or []
        self.teams = teams or []
        self.metrics_error: "BaseException | None" = None
        self.seats_error: "BaseException | None" = None
        self.teams_error: "BaseException | None" = None
        self.gates: "dict[tuple[str, ...], asyncio.Event]" = {}
        self.metrics_calls: "list[tuple[Scope, tuple[str, ...]]]" = []
        self.seat_calls: "list[tuple[Scope, date | None, tuple[str, ...]]]" = []
        self.team_calls: "list[tuple[Scope, date | None]]" = []
        self.closed = False

    @property
    def name(self) -> "str":
        return "fake"

    async def _wait(self, teams: "tuple[str, ...]") -> "None":
        gate = self.gates.get(teams)
        if gate is not None:
            await gate.wait()

    async def fetch_metrics(
        self,
        scope: "Scope",
        start_date: "date | None",
        end_date: "date | None",
        teams: "Sequence[str]" = (),
    ) -> "list[UsageRecord]":
        key = tuple(teams)
        self.metrics_calls.append((scope, key))
        await self._wait(key)
        if self.metrics_error is not None:
            raise self.metrics_error
        return list(self.metrics.get(key, self.metrics.get((), [])))

    async def fetch_seat_records(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
        teams: "Sequence[str]" = (),
        page: "int | None" = None,
    ) -> "list[SeatRecord]":
        key = tuple(teams)
        self.seat_calls.append((scope, snapshot_date, key))
        await self._wait(key)
        if self.seats_error is not None:
            raise self.seats_error
        return list(self.seat_records)

    async def fetch_teams(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
    ) -> "list[Team]":
        self.team_calls.append((scope, snapshot_date))
        if self.teams_error is not None:
            raise self.teams_error
        return list(self.teams)

    async def close(self) -> "None":
        self.closed = True


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


@pytest.fixture()
def source() -> "FakeSource":
    return FakeSource()
