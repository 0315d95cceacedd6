import asyncio
from typing import Callable, Iterable, Sequence

import structlog

from copilot_dashboard.actions import refresh_metrics_data, refresh_seats_data
from copilot_dashboard.aggregation import filter_breakdowns, group_by_time_frame
from copilot_dashboard.metrics import DashboardMetrics
from copilot_dashboard.models import (
    DropdownFilterItem,
    SeatSummary,
    ServerFilter,
    Team,
    TimeFrame,
    UsageRecord,
)
from copilot_dashboard.service import DashboardService

logger = structlog.get_logger()

Listener = Callable[["DashboardState"], None]


def _dropdown(values: "Iterable[str]") -> "list[DropdownFilterItem]":
    unique = {v for v in values if v}
    return [DropdownFilterItem(value=v) for v in sorted(unique, key=str.casefold)]


def _toggle(items: "list[DropdownFilterItem]", value: "str") -> "bool":
    for item in items:
        if item.value == value:
            item.is_selected = not item.is_selected
            return True
    return False


def _selected(items: "Iterable[DropdownFilterItem]") -> "list[str]":
    return [item.value for item in items if item.is_selected]


class DashboardState:
    """
    DashboardState holds the fetched dataset together with the user's
    filter selections and keeps filtered_data derived from them.

    Every mutation recomputes filtered_data synchronously and then
    notifies the subscribed listeners. Language, editor, weekend and
    time frame changes are applied locally. Team changes only mark the
    selection as pending; refresh_team_data_if_needed() (called when the
    team picker closes) re-fetches metrics and seats for the selected
    teams through the refresh protocol.

    The state expects a single writer: all calls must come from the
    same event loop.
    """

    def __init__(
        self,
        service: "DashboardService",
        metrics: "DashboardMetrics | None" = None,
    ) -> "None":
        self.api_data: "list[UsageRecord]" = []
        self.filtered_data: "list[UsageRecord]" = []
        self.languages: "list[DropdownFilterItem]" = []
        self.editors: "list[DropdownFilterItem]" = []
        self.teams: "list[DropdownFilterItem]" = []
        self.time_frame: "TimeFrame" = TimeFrame.WEEKLY
        self.hide_weekends: "bool" = False
        self.is_loading: "bool" = False
        self.has_pending_team_changes: "bool" = False

        self.seats_data: "SeatSummary" = SeatSummary()
        self.teams_data: "list[Team]" = []
        # date range and scope of the last server query
        self.current_filter: "ServerFilter" = ServerFilter()

        self._service = service
        self._metrics = metrics
        self._listeners: "list[Listener]" = []
        # bumped by every refresh, responses of older refreshes are dropped
        self._refresh_seq: "int" = 0

    @property
    def filtered_seats_data(self) -> "SeatSummary":
        # seats are filtered by team on the server
        return self.seats_data

    @property
    def selected_teams(self) -> "list[str]":
        return _selected(self.teams)

    def subscribe(self, listener: "Listener") -> "Callable[[], None]":
        """
        registers a listener called after every mutation. Returns a
        callable that removes it again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> "None":
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> "None":
        for listener in list(self._listeners):
            listener(self)

    def initialize(
        self,
        records: "Sequence[UsageRecord]",
        seats_data: "SeatSummary",
        teams_data: "Sequence[Team]",
        server_filter: "ServerFilter | None" = None,
    ) -> "None":
        """
        replaces all stored data, rebuilds the dropdowns with nothing
        selected and resets filtered_data to the full dataset bucketed
        by the current time frame.
        """
        self.api_data = list(records)
        self.seats_data = seats_data
        self.teams_data = list(teams_data)
        self.languages = self._extract_languages()
        self.editors = self._extract_editors()
        self.teams = self._extract_teams()
        if server_filter is not None:
            self.current_filter = server_filter

        self._apply_filters()
        if self._metrics is not None:
            self._metrics.update_seats(self.seats_data)
        self._notify()

    def toggle_language(self, language: "str") -> "None":
        if _toggle(self.languages, language):
            self._apply_filters()
            self._notify()

    def toggle_editor(self, editor: "str") -> "None":
        if _toggle(self.editors, editor):
            self._apply_filters()
            self._notify()

    def toggle_team(self, team: "str") -> "None":
        """
        flips the team's selection and marks the team selection as
        pending. Teams are not narrowed locally, the data is re-fetched
        once the selection is applied.
        """
        if _toggle(self.teams, team):
            self._apply_filters()
            self.has_pending_team_changes = True
            self._notify()

    def set_time_frame(self, time_frame: "TimeFrame") -> "None":
        self.time_frame = TimeFrame(time_frame)
        self._apply_filters()
        self._notify()

    def set_hide_weekends(self, hide: "bool") -> "None":
        self.hide_weekends = hide
        self._apply_filters()
        self._notify()

    async def reset_all_filters(self) -> "None":
        """
        clears every selection and the weekend toggle, then re-fetches
        the unscoped data from the server regardless of what was
        selected before.
        """
        for item in (*self.languages, *self.editors, *self.teams):
            item.is_selected = False
        self.hide_weekends = False
        self.has_pending_team_changes = False
        self._apply_filters()
        self._notify()

        await self.refresh_with_teams([])

    async def refresh_team_data_if_needed(self) -> "None":
        """
        applies a pending team selection by refreshing with the selected
        teams. Does nothing when the selection has not changed.
        """
        if not self.has_pending_team_changes:
            return

        await self.refresh_with_teams(self.selected_teams)
        self.has_pending_team_changes = False

    async def refresh_with_teams(self, selected_teams: "Sequence[str]") -> "None":
        """
        re-fetches metrics and seats for the selected teams concurrently.

        Each half is applied independently: a failing half is logged and
        keeps its previous value. Only the most recent refresh may apply
        its results and clear is_loading; the responses of a refresh that
        was overtaken by a newer one are dropped.
        """
        self._refresh_seq += 1
        seq = self._refresh_seq
        teams = list(selected_teams)

        self.is_loading = True
        self._notify()

        try:
            metrics_result, seats_result = await asyncio.gather(
                refresh_metrics_data(self._service, self.current_filter, teams),
                refresh_seats_data(self._service, self.current_filter, teams),
            )

            if seq != self._refresh_seq:
                logger.info(
                    "refresh_stale_response_dropped",
                    seq=seq,
                    latest=self._refresh_seq,
                )
                self._inc_refresh("stale")
                return

            if metrics_result.success and metrics_result.data is not None:
                self._replace_metrics(metrics_result.data)
            else:
                logger.warning(
                    "refresh_metrics_kept_previous",
                    error=metrics_result.error,
                    teams=teams,
                )

            if seats_result.success and seats_result.data is not None:
                self.seats_data = seats_result.data
                if self._metrics is not None:
                    self._metrics.update_seats(self.seats_data)
            else:
                logger.warning(
                    "refresh_seats_kept_previous",
                    error=seats_result.error,
                    teams=teams,
                )

            if metrics_result.success and seats_result.success:
                self._inc_refresh("success")
            elif metrics_result.success or seats_result.success:
                self._inc_refresh("partial")
            else:
                self._inc_refresh("failed")

            logger.debug(
                "refresh_done",
                teams=teams,
                records=len(self.api_data),
                seats=self.seats_data.total_seats,
            )
        finally:
            if seq == self._refresh_seq:
                self.is_loading = False
            self._notify()

    def _replace_metrics(self, records: "Sequence[UsageRecord]") -> "None":
        self.api_data = list(records)
        self.languages = self._extract_languages()
        self.editors = self._extract_editors()

        # the team list is rebuilt but keeps the previous selections
        previous = {item.value: item.is_selected for item in self.teams}
        self.teams = self._extract_teams()
        for item in self.teams:
            item.is_selected = previous.get(item.value, False)

        self._apply_filters()

    def _apply_filters(self) -> "None":
        bucketed = group_by_time_frame(
            self.api_data, self.time_frame, self.hide_weekends
        )
        self.filtered_data = filter_breakdowns(
            bucketed,
            set(_selected(self.languages)),
            set(_selected(self.editors)),
        )
        if self._metrics is not None:
            self._metrics.update_usage(self.filtered_data, self.time_frame)

    def _extract_languages(self) -> "list[DropdownFilterItem]":
        return _dropdown(b.language for r in self.api_data for b in r.breakdown)

    def _extract_editors(self) -> "list[DropdownFilterItem]":
        return _dropdown(b.editor for r in self.api_data for b in r.breakdown)

    def _extract_teams(self) -> "list[DropdownFilterItem]":
        return _dropdown(team.name for team in self.teams_data)

    def _inc_refresh(self, outcome: "str") -> "None":
        if self._metrics is not None:
            self._metrics.inc_refresh(outcome)
