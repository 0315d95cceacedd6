from datetime import date

import pytest

from copilot_dashboard.__main__ import apply_view_options, refresh_view
from copilot_dashboard.cli import ViewOptions
from copilot_dashboard.config import Config
from copilot_dashboard.errors import UpstreamError
from copilot_dashboard.labels import apply_time_frame_label
from copilot_dashboard.models import Breakdown, SeatSummary, TimeFrame, UsageRecord
from copilot_dashboard.service import DashboardService
from copilot_dashboard.state import DashboardState

RECORDS = apply_time_frame_label(
    [
        UsageRecord(
            day=date(2024, 1, 1),
            breakdown=(
                Breakdown(language="python", editor="vscode"),
                Breakdown(language="go", editor="neovim"),
            ),
        ),
        UsageRecord(
            day=date(2024, 1, 2),
            breakdown=(Breakdown(language="TypeScript", editor="vscode"),),
        ),
    ]
)

OPTIONS = ViewOptions(
    languages=("python",),
    editors=("vscode",),
    time_frame=TimeFrame.DAILY,
)


def _languages(state: "DashboardState") -> "list[str]":
    return sorted({b.language for r in state.filtered_data for b in r.breakdown})


def _state(source: "FakeSource") -> "DashboardState":
    source.metrics = {(): RECORDS}
    state = DashboardState(DashboardService(Config(), source))
    state.initialize(RECORDS, SeatSummary(), [])
    return state


class TestApplyViewOptions:
    def test_selects_languages_and_editors(self, source: "FakeSource") -> "None":
        state = _state(source)
        apply_view_options(state, OPTIONS)

        assert _languages(state) == ["python"]
        assert state.time_frame is TimeFrame.DAILY

    def test_reapplying_keeps_selection(self, source: "FakeSource") -> "None":
        state = _state(source)
        apply_view_options(state, OPTIONS)
        apply_view_options(state, OPTIONS)

        assert [i.value for i in state.languages if i.is_selected] == ["python"]
        assert [i.value for i in state.editors if i.is_selected] == ["vscode"]


class TestRefreshView:
    @pytest.mark.asyncio
    async def test_filters_survive_refresh(self, source: "FakeSource") -> "None":
        state = _state(source)
        apply_view_options(state, OPTIONS)

        await refresh_view(state, OPTIONS)

        assert _languages(state) == ["python"]
        assert len(source.metrics_calls) == 1

    @pytest.mark.asyncio
    async def test_filters_survive_failed_refresh(
        self, source: "FakeSource"
    ) -> "None":
        state = _state(source)
        apply_view_options(state, OPTIONS)
        source.metrics_error = UpstreamError(502, "Bad Gateway")

        await refresh_view(state, OPTIONS)

        assert _languages(state) == ["python"]
