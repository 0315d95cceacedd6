import asyncio

import structlog

from copilot_dashboard.metrics import DashboardMetrics
from copilot_dashboard.models import MetricsQuery, SeatsQuery, ServerFilter
from copilot_dashboard.service import DashboardService
from copilot_dashboard.state import DashboardState

logger = structlog.get_logger()


async def load_dashboard(
    service: "DashboardService",
    server_filter: "ServerFilter",
    teams: "tuple[str, ...]" = (),
    metrics: "DashboardMetrics | None" = None,
) -> "DashboardState":
    """
    fetches metrics, seats and teams concurrently and seeds a new
    DashboardState with them.

    Unlike a refresh, the initial load fails fast: the first error is
    raised to the caller, which is expected to show it instead of a
    dashboard.
    """
    scope = service.resolve_scope(server_filter.scope)
    server_filter = ServerFilter(
        start_date=server_filter.start_date,
        end_date=server_filter.end_date,
        scope=scope,
    )
    seats_query = SeatsQuery(scope=scope, date=server_filter.end_date, teams=teams)

    records, seats, team_list = await asyncio.gather(
        service.fetch_metrics(
            MetricsQuery(
                scope=scope,
                start_date=server_filter.start_date,
                end_date=server_filter.end_date,
                teams=teams,
            )
        ),
        service.fetch_seats(seats_query),
        service.fetch_teams(SeatsQuery(scope=scope, date=server_filter.end_date)),
    )

    logger.info(
        "dashboard_loaded",
        scope=scope.name,
        records=len(records),
        seats=seats.total_seats,
        teams=len(team_list),
    )

    state = DashboardState(service, metrics)
    state.initialize(records, seats, team_list, server_filter)
    # teams the page was opened with start out selected
    for item in state.teams:
        item.is_selected = item.value in teams
    return state
