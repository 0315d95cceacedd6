import asyncio
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, AsyncIterator, Sequence

import httpx
import structlog

from copilot_dashboard.config import GITHUB_API_BASE_URL
from copilot_dashboard.errors import UnknownError, UpstreamError
from copilot_dashboard.labels import apply_time_frame_label
from copilot_dashboard.models import Scope, SeatRecord, Team, UsageRecord
from copilot_dashboard.seats import count_active

logger = structlog.get_logger()

SEATS_PER_PAGE = 100


def _scope_path(scope: "Scope") -> "str":
    if scope.is_enterprise:
        return f"enterprises/{scope.enterprise}"
    return f"orgs/{scope.organization}"


def _date_params(
    start_date: "date | None",
    end_date: "date | None",
) -> "dict[str, str]":
    params: "dict[str, str]" = {}
    if start_date:
        params["since"] = start_date.isoformat()
    if end_date:
        params["until"] = end_date.isoformat()
    return params


def _error_message(resp: "httpx.Response") -> "str":
    """
    prefers the vendor's JSON "message" over the bare reason phrase.
    """
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class GitHubProvider:
    """
    GitHubProvider implements the UsageSource protocol on top of the
    GitHub Copilot REST API. Metrics, seat listings and teams are
    followed across pages through the Link header's rel="next" URL.
    """

    def __init__(
        self,
        token: "str",
        api_version: "str" = "2022-11-28",
        base_url: "str" = GITHUB_API_BASE_URL,
        timeout: "float" = 30.0,
    ) -> "None":
        self._base_url = base_url.rstrip("/")
        headers: "dict[str, str]" = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": api_version,
        }
        self._client: "httpx.AsyncClient" = httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
        )

    @property
    def name(self) -> "str":
        return "github"

    async def close(self) -> "None":
        """
        closes the underlying HTTP client.
        """
        await self._client.aclose()

    async def _paginate(
        self,
        url: "str",
        entity: "str",
        params: "dict[str, str] | None" = None,
    ) -> "AsyncIterator[Any]":
        """
        yields the decoded JSON body of every page, starting at url and
        following rel="next" links until there are none left.
        """
        next_url: "str | None" = url
        while next_url:
            logger.debug("github_fetch", url=next_url, entity=entity)
            resp = await self._client.get(next_url, params=params)

            if not resp.is_success:
                message = _error_message(resp)
                logger.warning(
                    "github_request_failed",
                    entity=entity,
                    status=resp.status_code,
                    message=message,
                )
                raise UpstreamError(resp.status_code, f"{entity}: {message}")

            yield resp.json()

            # the next link already carries the query string
            params = None
            next_url = resp.links.get("next", {}).get("url")

    async def fetch_metrics(
        self,
        scope: "Scope",
        start_date: "date | None",
        end_date: "date | None",
        teams: "Sequence[str]" = (),
    ) -> "list[UsageRecord]":
        """
        fetches daily usage for the whole scope, or one request per team
        run concurrently when teams are given. A failing team fails the
        whole call with the first error in team order.
        """
        params = _date_params(start_date, end_date)

        if not teams:
            url = f"{self._base_url}/{_scope_path(scope)}/copilot/metrics"
            records = await self._fetch_metrics_pages(url, scope.name, params)
            return apply_time_frame_label(records)

        tasks = [
            self._fetch_metrics_pages(
                f"{self._base_url}/{_scope_path(scope)}/team/{team}/copilot/metrics",
                f"{scope.name}/team/{team}",
                params,
            )
            for team in teams
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException):
                raise result

        combined: "list[UsageRecord]" = []
        for result in results:
            combined.extend(result)

        logger.debug(
            "github_team_metrics_done",
            teams=list(teams),
            record_count=len(combined),
        )
        # labeling sorts ascending by day
        return apply_time_frame_label(combined)

    async def _fetch_metrics_pages(
        self,
        url: "str",
        entity: "str",
        params: "dict[str, str]",
    ) -> "list[UsageRecord]":
        records: "list[UsageRecord]" = []
        async for page in self._paginate(url, entity, params):
            if not isinstance(page, list):
                raise UnknownError(f"{entity}: unexpected metrics payload")
            records.extend(UsageRecord.from_dict(item) for item in page)
        return records

    async def fetch_seat_records(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
        teams: "Sequence[str]" = (),
        page: "int | None" = None,
    ) -> "list[SeatRecord]":
        """
        fetches every page of the seat listing. The API only knows the
        current assignments, so snapshot_date and page are ignored and
        team filtering is left to the aggregator.
        """
        url = f"{self._base_url}/{_scope_path(scope)}/copilot/billing/seats"
        params = {"per_page": str(SEATS_PER_PAGE)}
        is_enterprise = scope.is_enterprise
        records: "list[SeatRecord]" = []

        page_count = 1
        async for data in self._paginate(url, scope.name, params):
            if not isinstance(data, dict) or not isinstance(data.get("seats"), list):
                raise UnknownError(f"{scope.name}: seat listing without seats")

            record = SeatRecord.from_dict(
                {"seats": data["seats"], "total_seats": data.get("total_seats")}
            )
            records.append(
                replace(
                    record,
                    enterprise=scope.enterprise if is_enterprise else None,
                    organization=None if is_enterprise else scope.organization,
                    page=page_count,
                )
            )
            page_count += 1

        # every page but the last one has a successor
        records = [
            replace(r, has_next_page=i < len(records) - 1)
            for i, r in enumerate(records)
        ]

        # active seats are counted across all pages
        now = datetime.now(timezone.utc)
        active = count_active([s for r in records for s in r.seats], now)

        logger.debug("github_seats_done", entity=scope.name, pages=len(records))
        return [replace(r, total_active_seats=active) for r in records]

    async def fetch_teams(
        self,
        scope: "Scope",
        snapshot_date: "date | None",
    ) -> "list[Team]":
        """
        collects the assigning teams across all seat pages, deduplicated
        by id when the team has one and by name otherwise.
        """
        url = f"{self._base_url}/{_scope_path(scope)}/copilot/billing/seats"
        params = {"per_page": str(SEATS_PER_PAGE)}
        teams: "list[Team]" = []
        seen: "set[tuple[str, object]]" = set()

        async for data in self._paginate(url, scope.name, params):
            if not isinstance(data, dict):
                raise UnknownError(f"{scope.name}: seat listing without seats")

            for seat in data.get("seats") or []:
                raw = seat.get("assigning_team")
                if not raw:
                    continue

                team = Team.from_dict(raw)
                key = ("id", team.id) if team.id is not None else ("name", team.name)
                if key in seen:
                    continue
                seen.add(key)
                teams.append(team)

        return teams
