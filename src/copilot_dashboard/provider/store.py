from datetime import date, timedelta
from typing import Any, Protocol, Sequence

import structlog
from azure.cosmos import exceptions as cosmos_exceptions
from azure.cosmos.aio import CosmosClient

from copilot_dashboard.errors import UpstreamError
from copilot_dashboard.labels import apply_time_frame_label
from copilot_dashboard.models import Scope, SeatRecord, Team, UsageRecord

logger = structlog.get_logger()

METRICS_CONTAINER = "metrics_history"
SEATS_CONTAINER = "seats_history"

# maximum two years of documents per query
MAX_ITEM_COUNT = 365 * 2
# window used when no explicit date range is given
DEFAULT_RANGE_DAYS = 31

Parameters = list[dict[str, Any]]


class QueryExecutor(Protocol):
    """
    runs a parametrized query against one container of the document
    store and returns the matching documents.
    """

    async def query(
        self,
        container: "str",
        query: "str",
        parameters: "Parameters",
    ) -> "list[Any]": ...

    async def close(self) -> "None": ...


class CosmosQueryExecutor:
    """
    QueryExecutor backed by the Azure Cosmos DB async client.
    """

    def __init__(self, endpoint: "str", key: "str", database: "str") -> "None":
        self._client: "CosmosClient" = CosmosClient(endpoint, credential=key)
        self._database = self._client.get_database_client(database)

    async def close(self) -> "None":
        await self._client.close()

    async def query(
        self,
        container: "str",
        query: "str",
        parameters: "Parameters",
    ) -> "list[Any]":
        client = self._database.get_container_client(container)
        try:
            return [
                item
                async for item in client.query_items(
                    query=query,
                    parameters=parameters,
                    max_item_count=MAX_ITEM_COUNT,
                )
            ]
        except cosmos_exceptions.CosmosHttpResponseError as e:
            raise UpstreamError(e.status_code or 500, e.message or str(e)) from e


def _add_scope(query: "str", parameters: "Parameters", scope: "Scope") -> "str":
    if scope.enterprise:
        query += " AND c.enterprise = @enterprise"
        parameters.append({"name": "@enterprise", "value": scope.enterprise})
    if scope.organization:
        query += " AND c.organization = @organization"
        parameters.append({"name": "@organization", "value": scope.organization})
    return query


def _team_condition(
    field: "str",
    teams: "Sequence[str]",
    parameters: "Parameters",
) -> "str":
    if len(teams) == 1:
        parameters.append({"name": "@team", "value": teams[0]})
        return f"{field} = @team"

    conditions = []
    for index, team in enumerate(teams):
        parameters.append({"name": f"@team{index}", "value": team})
        conditions.append(f"{field} = @team{index}")
    return " OR ".join(conditions)


def build_metrics_query(
    scope: "Scope",
    start_date: "date | None",
    end_date: "date | None",
    teams: "Sequence[str]" = (),
    today: "date | None" = None,
) -> "tuple[str, Parameters]":
    """
    builds the metrics_history query. Without a full date range the
    last DEFAULT_RANGE_DAYS days are used. Without teams only the
    scope wide documents (no team) match.
    """
    if start_date is None or end_date is None:
        end_date = today or date.today()
        start_date = end_date - timedelta(days=DEFAULT_RANGE_DAYS)

    query = "SELECT * FROM c WHERE c.date >= @start AND c.date <= @end"
    parameters: "Parameters" = [
        {"name": "@start", "value": start_date.isoformat()},
        {"name": "@end", "value": end_date.isoformat()},
    ]
    query = _add_scope(query, parameters, scope)

    if teams:
        condition = _team_condition("c.team", teams, parameters)
        query += f" AND ({condition})" if len(teams) > 1 else f" AND {condition}"
    else:
        query += " AND c.team = null"

    return query, parameters


def build_seats_query(
    scope: "Scope",
    snapshot_date: "date | None",
    teams: "Sequence[str]" = (),
    page: "int | None" = None,
    today: "date | None" = None,
) -> "tuple[str, Parameters]":
    """
    builds the seats_history query for one snapshot date. Teams match
    documents holding at least one seat assigned through them.
    """
    snapshot_date = snapshot_date or today or date.today()

    query = "SELECT * FROM c WHERE c.date = @date"
    parameters: "Parameters" = [{"name": "@date", "value": snapshot_date.isoformat()}]
    query = _add_scope(query, parameters, scope)

    if teams:
        condition = _team_condition("seat.assigning_team.name", teams, parameters)
        query += f" AND EXISTS (SELECT VALUE 1 FROM seat IN c.seats WHERE {condition})"

    if page:
        query += " AND c.page = @page"
        parameters.append({"name": "@page", "value": page})

    return query, parameters


def build_teams_query(
    scope: "Scope",
    snapshot_date: "date | None",
    today: "date | None" = None,
) -> "tuple[str, Parameters]":
    snapshot_date = snapshot_date or today or date.today()

    query = (
        "SELECT DISTINCT VALUE seat.assigning_team FROM c JOIN seat IN c.seats"
        " WHERE IS_DEFINED(seat.assigning_team) AND seat.assigning_team != null"
        " AND c.date = @date"
    )
    parameters: "Parameters" = [{"name": "@date", "value": snapshot_date.isoformat()}]
    query = _add_scope(query, parameters, scope)
    return query, parameters


class StoreProvider:
    """
    StoreProvider implements the UsageSource protocol on top of the
    historical document store, where a collector job persists daily
    metrics and seat snapshots.
    """

    def __init__(self, executor: "QueryExecutor") -> "None":
        self._executor = executor

    @property
    def name(self) -> "str":
        return "store"

    async def close(self) -> "None":
        await self._executor.close()

    async def fetch_metrics(
        self,
        scope: "Scope",
        start_date: "date | None",
        end_date: "date | None",
        teams: "Sequence[str]" = (),
    ) -> "list[UsageRecord]":
        query, parameters = build_metrics_query(scope, start_date, end_date, teams)
        logger.debug("store_query", container=METRICS_CONTAINER, query=query)
        rows = await self._executor.query(METRICS_CONTAINER, query, parameters)
        return apply_time_frame_label(UsageRecord.from_dict(row) for row in rows)

    async def fetch_seat_records(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
        teams: "Sequence[str]" = (),
        page: "int | None" = None,
    ) -> "list[SeatRecord]":
        query, parameters = build_seats_query(scope, snapshot_date, teams, page)
        logger.debug("store_query", container=SEATS_CONTAINER, query=query)
        rows = await self._executor.query(SEATS_CONTAINER, query, parameters)

        # documents written before paging existed have no page property
        if not rows and page:
            query, parameters = build_seats_query(scope, snapshot_date, teams)
            logger.debug("store_query_without_page", container=SEATS_CONTAINER)
            rows = await self._executor.query(SEATS_CONTAINER, query, parameters)

        return [SeatRecord.from_dict(row) for row in rows]

    async def fetch_teams(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
    ) -> "list[Team]":
        query, parameters = build_teams_query(scope, snapshot_date)
        rows = await self._executor.query(SEATS_CONTAINER, query, parameters)
        teams = [Team.from_dict(row) for row in rows if row]
        return sorted(teams, key=lambda t: t.name)
