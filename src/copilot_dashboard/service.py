import time
from typing import Awaitable, TypeVar

import structlog

from copilot_dashboard.config import Config
from copilot_dashboard.errors import DashboardError, UnknownError
from copilot_dashboard.metrics import DashboardMetrics
from copilot_dashboard.models import (
    MetricsQuery,
    Scope,
    SeatSummary,
    SeatsQuery,
    Team,
    UsageRecord,
)
from copilot_dashboard.provider.base import UsageSource
from copilot_dashboard.provider.github import GitHubProvider
from copilot_dashboard.provider.store import CosmosQueryExecutor, StoreProvider
from copilot_dashboard.seats import aggregate_seats

logger = structlog.get_logger()

T = TypeVar("T")


def create_source(config: "Config") -> "UsageSource":
    """
    the document store wins when it is configured, otherwise the
    GitHub API is queried directly.
    """
    if config.cosmosdb_enabled:
        executor = CosmosQueryExecutor(
            config.cosmosdb_endpoint,
            config.cosmosdb_key,
            config.cosmosdb_database,
        )
        return StoreProvider(executor)

    return GitHubProvider(
        token=config.github_token,
        api_version=config.github_api_version,
        base_url=config.github_api_base_url,
        timeout=config.http_timeout,
    )


class DashboardService:
    """
    DashboardService is the collaborator boundary the dashboard state
    talks to. It fills in the configured scope, aggregates seat pages
    and turns anything unexpected into UnknownError so callers only
    ever see DashboardError subclasses.
    """

    def __init__(
        self,
        config: "Config",
        source: "UsageSource",
        metrics: "DashboardMetrics | None" = None,
    ) -> "None":
        self._config = config
        self._source = source
        self._metrics = metrics

    @property
    def source_name(self) -> "str":
        return self._source.name

    async def close(self) -> "None":
        await self._source.close()

    def resolve_scope(self, scope: "Scope") -> "Scope":
        """
        fills the empty half of the scope the configuration is bound
        to (enterprise or organization) with its configured value.
        """
        if self._config.enterprise_scope:
            if not scope.enterprise:
                return Scope(self._config.github_enterprise, scope.organization)
        elif not scope.organization:
            return Scope(scope.enterprise, self._config.github_organization)
        return scope

    async def fetch_metrics(self, query: "MetricsQuery") -> "list[UsageRecord]":
        scope = self.resolve_scope(query.scope)
        return await self._call(
            "metrics",
            self._source.fetch_metrics(
                scope, query.start_date, query.end_date, query.teams
            ),
        )

    async def fetch_seats(self, query: "SeatsQuery") -> "SeatSummary":
        scope = self.resolve_scope(query.scope)
        records = await self._call(
            "seats",
            self._source.fetch_seat_records(
                scope, query.date, query.teams, query.page
            ),
        )
        return aggregate_seats(records, query.teams)

    async def fetch_teams(self, query: "SeatsQuery") -> "list[Team]":
        scope = self.resolve_scope(query.scope)
        return await self._call(
            "teams",
            self._source.fetch_teams(scope, query.date),
        )

    async def _call(self, kind: "str", call: "Awaitable[T]") -> "T":
        start = time.monotonic()
        try:
            return await call
        except DashboardError:
            self._record_error(kind)
            raise
        except Exception as e:
            self._record_error(kind)
            logger.exception("fetch_unexpected_error", source=self.source_name, kind=kind)
            raise UnknownError.wrap(e) from e
        finally:
            if self._metrics is not None:
                self._metrics.observe_fetch_duration(
                    self.source_name, kind, time.monotonic() - start
                )

    def _record_error(self, kind: "str") -> "None":
        if self._metrics is not None:
            self._metrics.inc_fetch_error(self.source_name, kind)
