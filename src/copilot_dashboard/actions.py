from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

import structlog

from copilot_dashboard.errors import DashboardError
from copilot_dashboard.models import (
    MetricsQuery,
    SeatSummary,
    SeatsQuery,
    ServerFilter,
    UsageRecord,
)
from copilot_dashboard.service import DashboardService

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ActionResult(Generic[T]):
    """
    outcome of a refresh action. Refresh actions never raise, failures
    are reported through success/error instead.
    """

    success: "bool"
    data: "T | None" = None
    error: "str" = ""


async def refresh_metrics_data(
    service: "DashboardService",
    server_filter: "ServerFilter",
    teams: "Sequence[str]" = (),
) -> "ActionResult[list[UsageRecord]]":
    """
    re-fetches usage for the filter's date range and scope, narrowed
    to the given teams.
    """
    query = MetricsQuery(
        scope=server_filter.scope,
        start_date=server_filter.start_date,
        end_date=server_filter.end_date,
        teams=tuple(teams),
    )
    try:
        records = await service.fetch_metrics(query)
    except DashboardError as e:
        logger.warning("refresh_metrics_failed", error=str(e), teams=list(teams))
        return ActionResult(success=False, error=e.message or "Failed to fetch metrics")
    except Exception:
        logger.exception("refresh_metrics_unexpected_error")
        return ActionResult(success=False, error="An unexpected error occurred")

    return ActionResult(success=True, data=records)


async def refresh_seats_data(
    service: "DashboardService",
    server_filter: "ServerFilter",
    teams: "Sequence[str]" = (),
) -> "ActionResult[SeatSummary]":
    """
    re-fetches the seat summary for the filter's scope, using the end
    of the date range as the snapshot date.
    """
    query = SeatsQuery(
        scope=server_filter.scope,
        date=server_filter.end_date,
        teams=tuple(teams),
    )
    try:
        summary = await service.fetch_seats(query)
    except DashboardError as e:
        logger.warning("refresh_seats_failed", error=str(e), teams=list(teams))
        return ActionResult(
            success=False, error=e.message or "Failed to fetch seats data"
        )
    except Exception:
        logger.exception("refresh_seats_unexpected_error")
        return ActionResult(success=False, error="An unexpected error occurred")

    return ActionResult(success=True, data=summary)
